"""
Board model for blog posts.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, Text
from blog.db.base import metadata
from blog.db.store import EntityMapping


boards = Table(
    "boards",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(100), nullable=False),
    Column("content", Text, nullable=False),
    Column("owner_id", Integer, ForeignKey("users.id"), nullable=False, index=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(eq=False)
class Board:
    """A post. Owner and creation time are fixed at creation."""
    title: str
    content: str
    owner_id: int
    created_at: datetime = field(default_factory=_utcnow)
    id: Optional[int] = None


BOARD = EntityMapping(table=boards, entity_type=Board, key="id", updatable=("title", "content"))
