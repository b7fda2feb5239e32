"""
User management routes.
"""
from typing import Optional
from fastapi import APIRouter, Depends
from blog.api.dependencies import get_session_token, get_sessions, unwrap
from blog.core.sessions import SessionIdentity
from blog.db.session import get_store
from blog.db.store import EntityStore
from blog.schemas.user import UpdateUserPassword, UserResponse
from blog.services import user_service

router = APIRouter(prefix="/user", tags=["users"])


@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    token: Optional[str] = Depends(get_session_token),
    sessions: SessionIdentity = Depends(get_sessions),
):
    """Get current user information."""
    return unwrap(user_service.current_principal(token, sessions))


@router.post("/update", response_model=UserResponse)
def update_user(
    payload: UpdateUserPassword,
    token: Optional[str] = Depends(get_session_token),
    store: EntityStore = Depends(get_store),
    sessions: SessionIdentity = Depends(get_sessions),
):
    """Change the current user's password."""
    return unwrap(user_service.update_password(payload, token, store, sessions))
