"""Task query planner: turns validated list parameters into one bounded query.

Composition order is fixed: ownership and filters, then sort, then page. The
primary sort key is always followed by ``id ASC`` so rows sharing a key keep
the same relative order on every request and across page boundaries.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import StoreFailure
from .models import Task
from .schemas.task import TaskListQuery


SORT_COLUMNS = {
    "createdAt": Task.created_at,
    "updatedAt": Task.updated_at,
    "title": Task.title,
    "status": Task.status,
}


@dataclass(frozen=True)
class TaskQueryPlan:
    owner_id: str
    page: int
    limit: int
    sort_by: str = "createdAt"
    sort_order: str = "desc"
    status: Optional[str] = None
    search: Optional[str] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def criteria(self) -> List[Any]:
        clauses = [Task.owner_id == self.owner_id]
        if self.status is not None:
            clauses.append(Task.status == self.status)
        if self.search:
            clauses.append(or_(
                Task.title.icontains(self.search, autoescape=True),
                Task.description.icontains(self.search, autoescape=True),
            ))
        return clauses

    def ordering(self) -> List[Any]:
        column = SORT_COLUMNS[self.sort_by]
        primary = column.asc() if self.sort_order == "asc" else column.desc()
        return [primary, Task.id.asc()]


@dataclass
class TaskPage:
    tasks: List[Task]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)

    def to_response(self) -> Dict[str, Any]:
        return {
            "tasks": self.tasks,
            "total_tasks": self.total,
            "total_pages": self.total_pages,
            "current_page": self.page,
            "limit": self.limit,
        }


def plan_task_query(owner_id: str, params: TaskListQuery) -> TaskQueryPlan:
    """Build the plan for listing ``owner_id``'s tasks."""
    return TaskQueryPlan(
        owner_id=owner_id,
        page=params.page,
        limit=params.limit,
        sort_by=params.sort_by,
        sort_order=params.sort_order,
        status=params.status.value if params.status is not None else None,
        search=params.search,
    )


def execute_task_query(db: Session, plan: TaskQueryPlan) -> TaskPage:
    """Count the matching tasks and fetch the requested page."""
    query = db.query(Task).filter(*plan.criteria())
    try:
        total = query.count()
        rows = query.order_by(*plan.ordering()).offset(plan.offset).limit(plan.limit).all()
    except SQLAlchemyError as exc:
        raise StoreFailure() from exc
    return TaskPage(tasks=rows, total=total, page=plan.page, limit=plan.limit)
