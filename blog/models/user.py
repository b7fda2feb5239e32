"""
User model for authentication and user management.
"""
from dataclasses import dataclass
from typing import Optional
from sqlalchemy import Column, Integer, String, Table
from blog.db.base import metadata
from blog.db.store import EntityMapping


users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(50), unique=True, nullable=False, index=True),
    Column("password", String(255), nullable=False),
    Column("email", String(100), nullable=False),
)


@dataclass(eq=False)
class User:
    """Registered user. Username is immutable, only the password may change."""
    username: str
    password: str
    email: str
    id: Optional[int] = None


USER = EntityMapping(table=users, entity_type=User, key="id", updatable=("password",))
