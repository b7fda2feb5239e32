"""
Authentication routes for join, login, and logout.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Response, status
from blog.api.dependencies import get_session_token, get_sessions, unwrap
from blog.core.config import settings
from blog.core.sessions import SessionIdentity
from blog.db.session import get_store
from blog.db.store import EntityStore
from blog.schemas.user import Login, Register, UserResponse
from blog.services import user_service

router = APIRouter(tags=["auth"])


@router.post("/join", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def join(payload: Register, store: EntityStore = Depends(get_store)):
    """Register a new user."""
    return unwrap(user_service.register(payload, store))


@router.post("/login", response_model=UserResponse)
def login(
    payload: Login,
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    store: EntityStore = Depends(get_store),
    sessions: SessionIdentity = Depends(get_sessions),
):
    """Login and bind the user to a fresh session token."""
    new_token = sessions.store()
    outcome = user_service.login(payload, new_token, store, sessions)
    if not outcome.is_ok:
        sessions.invalidate(new_token)
    principal = unwrap(outcome)
    # Drop the pre-login token only once the new one is authenticated
    if token and token != new_token:
        sessions.invalidate(token)
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        new_token,
        max_age=sessions.cookie_max_age,
        httponly=True,
        samesite="lax",
    )
    return principal


@router.post("/logout")
def logout(
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    sessions: SessionIdentity = Depends(get_sessions),
):
    """Logout and invalidate the session."""
    unwrap(user_service.logout(token, sessions))
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"message": "Logged out successfully"}
