"""Credential service.

Password sign-in against the ``users`` table, HS256 JWT session tokens, and
an ``auth_sessions`` row per token so a signed-out token stops working before
it expires.

SECURITY:
- Tokens and JWT payloads are never logged
- Failed sign-ins return the same error for unknown email and bad password
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

import bcrypt
from jose import JWTError, jwt

from app.config import Settings
from app.exceptions import UnauthorizedError, ValidationError
from app.models.auth_session import AuthSession
from app.models.user import User
from app.schemas.auth import AuthUser, SessionInfo
from app.services.record_store import RecordStore

logger = logging.getLogger(__name__)

ROLES = ("super_admin", "partner_user")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AuthService:
    """Sign-in, sign-out and session lookup for the API."""

    def __init__(self, store: RecordStore, settings: Settings):
        self.store = store
        self.settings = settings

    def create_access_token(self, data: dict, expires_delta: Optional[timedelta] = None) -> Tuple[str, datetime]:
        """Create a JWT access token and return it with its expiry."""
        to_encode = data.copy()
        expire = datetime.now(timezone.utc) + (
            expires_delta or timedelta(minutes=self.settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        )
        to_encode.update({"exp": expire})
        token = jwt.encode(to_encode, self.settings.SECRET_KEY, algorithm=self.settings.ALGORITHM)
        return token, expire

    def _decode(self, token: str, verify_exp: bool = True) -> Optional[dict]:
        try:
            return jwt.decode(
                token,
                self.settings.SECRET_KEY,
                algorithms=[self.settings.ALGORITHM],
                options={"verify_exp": verify_exp},
            )
        except JWTError:
            # SECURITY: Don't log token decode errors with details
            logger.warning("JWT validation failed")
            return None

    @staticmethod
    def _session_id(payload: dict) -> Optional[uuid.UUID]:
        try:
            return uuid.UUID(str(payload.get("jti")))
        except ValueError:
            return None

    async def sign_in(self, email: str, password: str) -> Tuple[SessionInfo, AuthUser]:
        """Verify credentials and open a session."""
        user = await self.store.get(User, email=email.strip().lower())
        if user is None or not verify_password(password, user.hashed_password):
            logger.warning("Rejected sign-in attempt")
            raise UnauthorizedError("Incorrect email or password")
        if not user.is_active:
            logger.warning(f"Sign-in attempt for disabled user {user.id}")
            raise UnauthorizedError("User account is disabled")

        session_id = uuid.uuid4()
        token, expires_at = self.create_access_token(
            data={
                "sub": str(user.id),
                "email": user.email,
                "role": user.role,
                "partner_code": user.partner_code,
                "jti": str(session_id),
            }
        )
        await self.store.insert(
            AuthSession,
            {"id": session_id, "user_id": user.id, "expires_at": expires_at},
        )
        logger.info(f"User {user.id} signed in")
        return SessionInfo(access_token=token, expires_at=expires_at), AuthUser.from_db_user(user)

    async def sign_out(self, token: str) -> None:
        """Revoke the session behind ``token``. Signing out twice is a no-op."""
        payload = self._decode(token, verify_exp=False)
        if payload is None:
            return
        session_id = self._session_id(payload)
        if session_id is None:
            return
        session = await self.store.get(AuthSession, id=session_id)
        if session is None or session.revoked_at is not None:
            return
        await self.store.update(AuthSession, session_id, {"revoked_at": datetime.now(timezone.utc)})
        logger.info(f"User {session.user_id} signed out")

    async def get_session(self, token: str) -> Optional[SessionInfo]:
        """The live session for ``token``; ``None`` if invalid, expired or revoked."""
        payload = self._decode(token)
        if payload is None:
            return None
        session_id = self._session_id(payload)
        if session_id is None:
            return None
        session = await self.store.get(AuthSession, id=session_id)
        if session is None or session.revoked_at is not None:
            return None
        expires_at = _as_utc(session.expires_at)
        if expires_at <= datetime.now(timezone.utc):
            return None
        return SessionInfo(access_token=token, expires_at=expires_at)

    async def get_current_user(self, token: str) -> Optional[AuthUser]:
        if await self.get_session(token) is None:
            return None
        payload = self._decode(token)
        try:
            user_id = uuid.UUID(str(payload.get("sub")))
        except ValueError:
            logger.warning("Invalid token format")
            return None
        user = await self.store.get(User, id=user_id)
        if user is None or not user.is_active:
            return None
        return AuthUser.from_db_user(user)

    async def create_user(
        self,
        email: str,
        password: str,
        role: str = "partner_user",
        partner_code: Optional[str] = None,
    ) -> AuthUser:
        """Provision a user. Partner users must be scoped to a partner code."""
        if role not in ROLES:
            raise ValidationError(f"Unknown role '{role}'")
        if role == "partner_user" and not partner_code:
            raise ValidationError("Partner users need a partner_code")
        user = await self.store.insert(
            User,
            {
                "email": email.strip().lower(),
                "hashed_password": get_password_hash(password),
                "role": role,
                "partner_code": partner_code.strip().upper() if partner_code else None,
            },
        )
        logger.info(f"Created {role} user {user.id}")
        return AuthUser.from_db_user(user)
