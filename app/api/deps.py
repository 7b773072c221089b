"""
FastAPI Dependencies

Provides dependency injection for the record store, the service objects
built on it, authentication and authorization.

SECURITY NOTES:
- JWT payloads are never logged
- Bearer token is the primary auth method (SPA-friendly, no CSRF needed)
- Session cookies are supported but Bearer is preferred
"""

from typing import Annotated, Optional
from fastapi import Cookie, Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import logging

from app.config import get_settings
from app.core.sentry import set_user_context
from app.exceptions import UnauthorizedError
from app.schemas.auth import AuthUser
from app.services.auth_service import AuthService
from app.services.partner_directory import PartnerDirectory
from app.services.quote_store import QuoteStore
from app.services.record_store import RecordStore

logger = logging.getLogger(__name__)


# HTTP Bearer for JWT - primary auth method
security = HTTPBearer(auto_error=False)


def get_record_store(request: Request) -> RecordStore:
    """The store built in the application lifespan."""
    return request.app.state.record_store


def get_auth_service(store: Annotated[RecordStore, Depends(get_record_store)]) -> AuthService:
    return AuthService(store, get_settings())


def get_partner_directory(store: Annotated[RecordStore, Depends(get_record_store)]) -> PartnerDirectory:
    return PartnerDirectory(store)


def get_quote_store(store: Annotated[RecordStore, Depends(get_record_store)]) -> QuoteStore:
    return QuoteStore(store)


def get_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)] = None,
    session_token: Annotated[str | None, Cookie(alias="session")] = None,
) -> Optional[str]:
    """Bearer token if present, otherwise the session cookie."""
    if credentials:
        return credentials.credentials
    return session_token or None


async def get_optional_user(
    auth: Annotated[AuthService, Depends(get_auth_service)],
    token: Annotated[Optional[str], Depends(get_token)],
) -> Optional[AuthUser]:
    if not token:
        return None
    return await auth.get_current_user(token)


async def get_current_user(
    user: Annotated[Optional[AuthUser], Depends(get_optional_user)],
) -> AuthUser:
    """
    Current user from JWT token or session cookie.

    SECURITY:
    - Same response for missing, invalid, expired and revoked tokens
    - JWT payloads are NOT logged to prevent credential leakage
    """
    if user is None:
        raise UnauthorizedError("Could not validate credentials")

    set_user_context(user.id, role=user.role)
    logger.debug("User authenticated", extra={"user_id": user.id})
    return user


# Type aliases for dependency injection
Store = Annotated[RecordStore, Depends(get_record_store)]
Auth = Annotated[AuthService, Depends(get_auth_service)]
Directory = Annotated[PartnerDirectory, Depends(get_partner_directory)]
Quotes = Annotated[QuoteStore, Depends(get_quote_store)]
Token = Annotated[Optional[str], Depends(get_token)]
CurrentUser = Annotated[AuthUser, Depends(get_current_user)]
OptionalUser = Annotated[Optional[AuthUser], Depends(get_optional_user)]
