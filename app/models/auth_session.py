import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Uuid

from app.database import Base
from app.models.partner import utcnow


class AuthSession(Base):
    """Server-side record of an issued session token.

    ``id`` is the token's ``jti``; a token is valid only while its row exists,
    has not expired and has no ``revoked_at``.
    """

    __tablename__ = "auth_sessions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    revoked_at = Column(DateTime(timezone=True), nullable=True)
