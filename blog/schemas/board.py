"""
Pydantic schemas for Board entity.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from blog.core.config import settings


class CreateBoard(BaseModel):
    """Schema for board creation."""
    title: str = Field(min_length=1, max_length=settings.TITLE_MAX_LENGTH)
    content: str = Field(min_length=1)

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class UpdateBoard(BaseModel):
    """Schema for board update. Omitted fields keep their current value."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=settings.TITLE_MAX_LENGTH)
    content: Optional[str] = Field(default=None, min_length=1)

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError("must not be blank")
        return v


class BoardResponse(BaseModel):
    """Schema for board response."""
    id: int
    title: str
    content: str
    owner_id: int
    created_at: datetime

    class Config:
        from_attributes = True
