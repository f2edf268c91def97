import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import NotFound
from ..models import Task as TaskModel, TaskStatus, utc_now
from ..schemas.common import MessageResponse
from ..schemas.task import (
    Task as TaskSchema,
    TaskCreate,
    TaskEnvelope,
    TaskIdPath,
    TaskListQuery,
    TaskPageResponse,
    TaskUpdate,
)
from ..security import Identity
from ..task_query import execute_task_query, plan_task_query
from ..validation import valid_body, valid_path, valid_query
from .auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()

# Same message whether the task is missing or owned by someone else
TASK_NOT_FOUND = "Task not found."


def _get_owned_task(db: Session, task_id: str, current_user: Identity) -> TaskModel:
    task = (
        db.query(TaskModel)
        .filter(TaskModel.id == task_id, TaskModel.owner_id == current_user.user_id)
        .first()
    )
    if not task:
        raise NotFound(TASK_NOT_FOUND)
    return task


@router.get("/tasks", response_model=TaskPageResponse)
def get_tasks(
    params: TaskListQuery = Depends(valid_query(TaskListQuery)),
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List the caller's tasks with filtering, sorting and pagination."""
    plan = plan_task_query(current_user.user_id, params)
    return execute_task_query(db, plan).to_response()


@router.post("/tasks", response_model=TaskEnvelope, status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskCreate = Depends(valid_body(TaskCreate)),
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a new task owned by the caller."""
    db_task = TaskModel(
        title=task.title,
        description=task.description,
        status=task.status.value,
        owner_id=current_user.user_id,
    )
    db.add(db_task)
    db.commit()
    db.refresh(db_task)
    return {"message": "Task created successfully.", "task": db_task}


@router.get("/tasks/{id}", response_model=TaskSchema)
def get_task(
    path: TaskIdPath = Depends(valid_path(TaskIdPath)),
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get a specific task by ID."""
    return _get_owned_task(db, path.id, current_user)


@router.put("/tasks/{id}", response_model=TaskEnvelope)
def update_task(
    path: TaskIdPath = Depends(valid_path(TaskIdPath)),
    task_update: TaskUpdate = Depends(valid_body(TaskUpdate)),
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Partially update a specific task."""
    task = _get_owned_task(db, path.id, current_user)

    for field, value in task_update.model_dump(exclude_unset=True).items():
        setattr(task, field, value.value if isinstance(value, TaskStatus) else value)

    task.updated_at = utc_now()

    db.commit()
    db.refresh(task)
    return {"message": "Task updated successfully.", "task": task}


@router.delete("/tasks/{id}", response_model=MessageResponse)
def delete_task(
    path: TaskIdPath = Depends(valid_path(TaskIdPath)),
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete a specific task."""
    task = _get_owned_task(db, path.id, current_user)

    db.delete(task)
    db.commit()
    logger.info(f"Deleted task {path.id}")
    return {"message": "Task deleted successfully."}
