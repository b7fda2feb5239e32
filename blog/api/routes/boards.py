"""
Board routes for listing, reading, creating, updating and deleting posts.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, status
from blog.api.dependencies import get_session_token, get_sessions, unwrap
from blog.core.sessions import SessionIdentity
from blog.db.session import get_store
from blog.db.store import EntityStore
from blog.schemas.board import BoardResponse, CreateBoard, UpdateBoard
from blog.services import board_service

router = APIRouter(prefix="/boards", tags=["boards"])


@router.get("", response_model=List[BoardResponse])
def list_boards(store: EntityStore = Depends(get_store)):
    """List all boards, newest first."""
    return board_service.list_boards(store)


@router.post("", response_model=BoardResponse, status_code=status.HTTP_201_CREATED)
def create_board(
    payload: CreateBoard,
    token: Optional[str] = Depends(get_session_token),
    store: EntityStore = Depends(get_store),
    sessions: SessionIdentity = Depends(get_sessions),
):
    """Create a new board owned by the current user."""
    return unwrap(board_service.create_board(payload, token, store, sessions))


@router.get("/{board_id}", response_model=BoardResponse)
def get_board(board_id: int, store: EntityStore = Depends(get_store)):
    """Get board details."""
    return unwrap(board_service.get_board(board_id, store))


@router.get("/{board_id}/update-form", response_model=BoardResponse)
def update_form(
    board_id: int,
    token: Optional[str] = Depends(get_session_token),
    store: EntityStore = Depends(get_store),
    sessions: SessionIdentity = Depends(get_sessions),
):
    """Get a board for editing; owner only."""
    return unwrap(board_service.get_board_for_update(board_id, token, store, sessions))


@router.post("/{board_id}/update", response_model=BoardResponse)
def update_board(
    board_id: int,
    payload: UpdateBoard,
    token: Optional[str] = Depends(get_session_token),
    store: EntityStore = Depends(get_store),
    sessions: SessionIdentity = Depends(get_sessions),
):
    """Update a board's title and/or content."""
    return unwrap(board_service.update_board(board_id, payload, token, store, sessions))


@router.post("/{board_id}/delete")
def delete_board(
    board_id: int,
    token: Optional[str] = Depends(get_session_token),
    store: EntityStore = Depends(get_store),
    sessions: SessionIdentity = Depends(get_sessions),
):
    """Delete a board owned by the current user."""
    deleted = unwrap(board_service.delete_board(board_id, token, store, sessions))
    return {"deleted": deleted}
