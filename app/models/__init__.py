from app.models.partner import Partner
from app.models.quote import Quote
from app.models.user import User
from app.models.auth_session import AuthSession

__all__ = [
    "Partner",
    "Quote",
    "User",
    "AuthSession",
]
