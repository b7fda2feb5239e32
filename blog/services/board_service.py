"""
Board service for post-related business logic.

Every mutating operation runs the same checks in order: the session must be
authenticated, the board must exist, and the requester must own it. Only
then is a field written or the row deleted.
"""
import logging
from typing import List, Optional
from blog.core.outcomes import Outcome
from blog.core.sessions import Principal, SessionIdentity
from blog.db.store import EntityNotFoundError, EntityStore
from blog.models.board import BOARD, Board, boards
from blog.schemas.board import CreateBoard, UpdateBoard
from blog.services.authorization import can_mutate

logger = logging.getLogger(__name__)


def list_boards(store: EntityStore) -> List[Board]:
    """All boards, newest first."""
    return store.find_all(BOARD, order_by=boards.c.id.desc())


def get_board(board_id: int, store: EntityStore) -> Outcome[Board]:
    board = store.load(BOARD, board_id)
    if board is None:
        return Outcome.not_found("Board not found")
    return Outcome.ok(board)


def _load_owned(board_id: int, principal: Principal, store: EntityStore) -> Outcome[Board]:
    """Load a board and check the principal may mutate it."""
    board = store.load(BOARD, board_id)
    if board is None:
        return Outcome.not_found("Board not found")
    if not can_mutate(principal.id, board.owner_id):
        logger.warning(f"User {principal.id} denied access to board {board_id} owned by {board.owner_id}")
        return Outcome.forbidden("You are not the owner of this board")
    return Outcome.ok(board)


def create_board(
    payload: CreateBoard,
    token: Optional[str],
    store: EntityStore,
    sessions: SessionIdentity,
) -> Outcome[Board]:
    """Create a board owned by the session's user."""
    principal = sessions.get(token)
    if principal is None:
        return Outcome.unauthenticated()

    board = Board(title=payload.title, content=payload.content, owner_id=principal.id)
    store.insert(BOARD, board)
    store.commit()
    logger.info(f"User {principal.id} created board {board.id}")
    return Outcome.ok(board)


def get_board_for_update(board_id: int, token: Optional[str], store: EntityStore, sessions: SessionIdentity) -> Outcome[Board]:
    """Fetch a board for editing, only for its owner."""
    principal = sessions.get(token)
    if principal is None:
        return Outcome.unauthenticated()
    return _load_owned(board_id, principal, store)


def update_board(
    board_id: int,
    payload: UpdateBoard,
    token: Optional[str],
    store: EntityStore,
    sessions: SessionIdentity,
) -> Outcome[Board]:
    """Apply title/content changes; only changed columns are written."""
    principal = sessions.get(token)
    if principal is None:
        return Outcome.unauthenticated()

    checked = _load_owned(board_id, principal, store)
    if not checked.is_ok:
        return checked

    def apply(board: Board) -> None:
        if payload.title is not None:
            board.title = payload.title
        if payload.content is not None:
            board.content = payload.content

    # Same tracked instance as the one checked above
    board = store.tracked_update(BOARD, board_id, apply)
    store.commit()
    return Outcome.ok(board)


def delete_board(board_id: int, token: Optional[str], store: EntityStore, sessions: SessionIdentity) -> Outcome[int]:
    """Delete a board owned by the session's user."""
    principal = sessions.get(token)
    if principal is None:
        return Outcome.unauthenticated()

    checked = _load_owned(board_id, principal, store)
    if not checked.is_ok:
        return checked

    try:
        store.delete_by_key(BOARD, board_id)
    except EntityNotFoundError:
        # Removed by another request after the ownership check
        store.rollback()
        return Outcome.not_found("Board already deleted")
    store.commit()
    logger.info(f"User {principal.id} deleted board {board_id}")
    return Outcome.ok(board_id)
