from fastapi import APIRouter, Response

from app.api.deps import Auth, CurrentUser, Token
from app.config import settings
from app.exceptions import UnauthorizedError
from app.schemas.auth import AuthUser, LoginRequest, LoginResponse, SessionInfo

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(
    response: Response,
    login_data: LoginRequest,
    auth: Auth,
):
    """Authenticate user and return JWT token."""
    session, user = await auth.sign_in(login_data.email, login_data.password)

    # Set session cookie
    response.set_cookie(
        key="session",
        value=session.access_token,
        httponly=True,
        secure=settings.ENVIRONMENT != "development",
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )

    return LoginResponse(**session.model_dump(), user=user)


@router.post("/logout")
async def logout(response: Response, auth: Auth, token: Token):
    """Revoke the current session and clear the session cookie."""
    if token:
        await auth.sign_out(token)
    response.delete_cookie(key="session")
    return {"message": "Successfully logged out"}


@router.get("/session", response_model=SessionInfo)
async def get_session(auth: Auth, token: Token):
    """The caller's live session."""
    session = await auth.get_session(token) if token else None
    if session is None:
        raise UnauthorizedError("No active session")
    return session


@router.get("/me", response_model=AuthUser)
async def get_current_user_info(current_user: CurrentUser):
    """Get current authenticated user information."""
    return current_user
