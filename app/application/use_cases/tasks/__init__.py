"""Daily task use cases."""

from app.application.use_cases.tasks.task_operations import TaskService

__all__ = ["TaskService"]
