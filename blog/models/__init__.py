"""Models package - Import all models so their tables register on the metadata."""
from blog.models.user import User, USER, users
from blog.models.board import Board, BOARD, boards

__all__ = [
    "User",
    "USER",
    "users",
    "Board",
    "BOARD",
    "boards",
]
