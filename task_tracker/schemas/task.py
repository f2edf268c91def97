import re
from datetime import datetime
from typing import ClassVar, List, Literal, Optional, Sequence
from uuid import UUID

from pydantic import Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from ..config import MAX_PAGE_LIMIT
from ..models import TaskStatus
from ..validation import AtLeastOneOf, InputSchema
from .common import ApiModel

SortField = Literal["createdAt", "updatedAt", "title", "status"]
SortOrder = Literal["asc", "desc"]

_SORT_ORDER_WORDS = {"ascending": "asc", "descending": "desc"}

_INTEGER = re.compile(r"-?[0-9]+")

# Largest page whose row offset still fits a signed 64-bit SQL integer at any allowed limit
MAX_PAGE = (2**63 - 1) // MAX_PAGE_LIMIT + 1


class TaskCreate(InputSchema):
    """Body of POST /tasks."""
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    status: TaskStatus = TaskStatus.PENDING


class TaskUpdate(InputSchema):
    """Body of PUT /tasks/{id}; a partial update of the mutable fields."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    status: Optional[TaskStatus] = None

    cross_field_rules: ClassVar[Sequence[AtLeastOneOf]] = (
        AtLeastOneOf(
            fields=("title", "description", "status"),
            message="At least one field (title, description or status) must be provided for update",
        ),
    )

    @field_validator("title", "status", mode="before")
    @classmethod
    def _reject_null(cls, value, info: ValidationInfo):
        if value is None:
            raise PydanticCustomError("null_not_allowed", "{field} cannot be null", {"field": info.field_name})
        return value


class TaskListQuery(InputSchema):
    """Query string of GET /tasks. Every value arrives as a string."""
    page: int = 1
    limit: int = 10
    status: Optional[TaskStatus] = None
    search: Optional[str] = Field(default=None, max_length=255)
    sort_by: SortField = "createdAt"
    sort_order: SortOrder = "desc"

    @field_validator("page", "limit", mode="before")
    @classmethod
    def _positive_number(cls, value, info: ValidationInfo):
        name = info.field_name
        if isinstance(value, str):
            text = value.strip()
            try:
                if not _INTEGER.fullmatch(text):
                    raise ValueError(text)
                value = int(text)
            except ValueError:
                raise PydanticCustomError("int_parsing", "{field} must be a number", {"field": name}) from None
        if isinstance(value, bool) or not isinstance(value, int):
            raise PydanticCustomError("int_parsing", "{field} must be a number", {"field": name})
        if value <= 0:
            raise PydanticCustomError("positive_number", "{field} must be a positive number", {"field": name})
        if name == "limit" and value > MAX_PAGE_LIMIT:
            raise PydanticCustomError(
                "limit_too_large", "limit must not exceed {maximum}", {"maximum": MAX_PAGE_LIMIT}
            )
        if name == "page" and value > MAX_PAGE:
            raise PydanticCustomError("page_too_large", "page must not exceed {maximum}", {"maximum": MAX_PAGE})
        return value

    @field_validator("status", "search", mode="before")
    @classmethod
    def _blank_is_absent(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("sort_by", mode="before")
    @classmethod
    def _default_sort_field(cls, value):
        if isinstance(value, str) and not value.strip():
            return "createdAt"
        return value

    @field_validator("sort_order", mode="before")
    @classmethod
    def _normalize_sort_order(cls, value):
        if isinstance(value, str):
            text = value.strip().lower()
            if not text:
                return "desc"
            return _SORT_ORDER_WORDS.get(text, text)
        return value


class TaskIdPath(InputSchema):
    id: str

    @field_validator("id")
    @classmethod
    def _canonical_uuid(cls, value: str) -> str:
        try:
            return str(UUID(value))
        except ValueError:
            raise PydanticCustomError("uuid_parsing", "Task id must be a valid UUID") from None


class Task(ApiModel):
    """Task as returned to its owner."""
    id: str
    title: str
    description: Optional[str] = None
    status: str
    owner_id: str
    created_at: datetime
    updated_at: datetime


class TaskEnvelope(ApiModel):
    message: str
    task: Task


class TaskPageResponse(ApiModel):
    tasks: List[Task]
    total_tasks: int
    total_pages: int
    current_page: int
    limit: int
