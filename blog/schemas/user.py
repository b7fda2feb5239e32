"""
Pydantic schemas for User entity.
"""
from pydantic import BaseModel, EmailStr, Field, field_validator
from blog.core.config import settings


class Register(BaseModel):
    """Schema for user registration."""
    username: str = Field(min_length=1, max_length=settings.USERNAME_MAX_LENGTH)
    password: str = Field(min_length=1)
    email: EmailStr

    @field_validator("username", "password")
    @classmethod
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class Login(BaseModel):
    """Schema for user login."""
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UpdateUserPassword(BaseModel):
    """Schema for the self-service password change."""
    password: str = Field(min_length=1)

    @field_validator("password")
    @classmethod
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class UserResponse(BaseModel):
    """Schema for user response."""
    id: int
    username: str
    email: str

    class Config:
        from_attributes = True
