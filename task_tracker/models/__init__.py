from .task import Task, TaskStatus, utc_now
from .user import User

# Export all models for easy importing
__all__ = ["Task", "TaskStatus", "User", "utc_now"]
