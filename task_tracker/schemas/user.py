from datetime import datetime

from pydantic import EmailStr, Field

from ..validation import InputSchema
from .common import ApiModel


class UserCreate(InputSchema):
    name: str = Field(min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=255)


class UserLogin(InputSchema):
    email: EmailStr
    password: str = Field(min_length=1)


class User(ApiModel):
    """Public view of a user; the password hash never leaves the service."""
    id: str
    name: str
    email: str
    created_at: datetime
    updated_at: datetime


class RegisterResponse(ApiModel):
    message: str
    user: User


class AuthResponse(ApiModel):
    message: str
    token: str
    token_type: str = "bearer"
    user: User
