from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime
from typing import List
from uuid import uuid4

from .task import utc_now


class User(SQLModel, table=True):
    """User model for authentication and task ownership."""
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str = Field(max_length=100)
    email: str = Field(unique=True, index=True, max_length=255)
    hashed_password: str
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))

    # Relationship to tasks
    tasks: List["Task"] = Relationship(back_populates="owner")
