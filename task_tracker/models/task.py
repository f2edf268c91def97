from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4
import enum


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TaskStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Task(SQLModel, table=True):
    """Task model for todo items, owned by exactly one user."""
    __tablename__ = "tasks"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    title: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    # Stored as the plain value so ordering by status sorts on what clients see
    status: str = Field(default=TaskStatus.PENDING.value, max_length=20, index=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True), index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    owner_id: str = Field(foreign_key="users.id", index=True)

    # Relationship back to user
    owner: Optional["User"] = Relationship(back_populates="tasks")
