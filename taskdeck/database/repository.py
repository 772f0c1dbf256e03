"""Repository layer for task instance database operations."""

import logging
from datetime import date, datetime
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy import desc

from taskdeck.models.task import Task, TaskStatus
from taskdeck.database.models import TaskDB, enum_to_value

logger = logging.getLogger(__name__)


class DuplicateInstanceError(Exception):
    """An instance already exists for this (parent_task_id, due_date) pair."""

    def __init__(self, parent_task_id: Optional[str], due_date: Optional[date]):
        super().__init__(f"Instance already exists for template {parent_task_id} on {due_date}")
        self.parent_task_id = parent_task_id
        self.due_date = due_date


class TaskRepository:
    """Repository for task instance database operations (rows with is_recurring = false)."""

    def __init__(self, db: Session):
        self.db = db

    def _instances(self):
        return self.db.query(TaskDB).filter(TaskDB.is_recurring.is_(False))

    def create(self, task: Task) -> Task:
        """Create a new task."""
        try:
            task_db = TaskDB.from_pydantic(task)
            self.db.add(task_db)
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Created task {task.id}: {task.title[:50]}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create task {task.id}: {type(e).__name__}: {str(e)}")
            raise

    def create_instance(self, task: Task) -> Task:
        """Insert a generated instance.

        Raises:
            DuplicateInstanceError: if the storage-level uniqueness constraint on
                (parent_task_id, due_date) rejects the row (e.g. a racing run).
        """
        try:
            task_db = TaskDB.from_pydantic(task)
            self.db.add(task_db)
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Created instance {task.id} of template {task.parent_task_id} due {task.due_date}")
            return task_db.to_pydantic()
        except IntegrityError as e:
            self.db.rollback()
            if self.find_instance(task.parent_task_id, task.due_date) is not None:
                raise DuplicateInstanceError(task.parent_task_id, task.due_date) from e
            logger.error(f"Failed to create instance {task.id}: {type(e).__name__}: {str(e)}")
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create instance {task.id}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, user_id: str, task_id: str) -> Optional[Task]:
        """Get task by ID for a specific user."""
        task_db = self._instances().filter(
            TaskDB.id == task_id,
            TaskDB.user_id == user_id,
        ).first()
        return task_db.to_pydantic() if task_db else None

    def get_all(self, user_id: str, statuses: Optional[List[TaskStatus]] = None) -> List[Task]:
        """Get a user's tasks (optionally limited to some buckets), newest first."""
        query = self._instances().filter(TaskDB.user_id == user_id)
        if statuses:
            query = query.filter(TaskDB.status.in_([enum_to_value(s) for s in statuses]))
        tasks_db = query.order_by(desc(TaskDB.created_at)).all()
        return [task_db.to_pydantic() for task_db in tasks_db]

    def find_instance(self, parent_task_id: str, due_date: date) -> Optional[Task]:
        """Find the instance generated from a template for a due date, if any."""
        task_db = self._instances().filter(
            TaskDB.parent_task_id == parent_task_id,
            TaskDB.due_date == due_date,
        ).first()
        return task_db.to_pydantic() if task_db else None

    def list_instances(self, user_id: str, parent_task_id: str) -> List[Task]:
        """Instances generated from a template, by due date."""
        tasks_db = self._instances().filter(
            TaskDB.user_id == user_id,
            TaskDB.parent_task_id == parent_task_id,
        ).order_by(TaskDB.due_date).all()
        return [task_db.to_pydantic() for task_db in tasks_db]

    def set_status(self, user_id: str, task_id: str, status: TaskStatus, *, now: Optional[datetime] = None) -> Optional[Task]:
        """Move a task to another bucket. Moving to `done` stamps `completed_at`."""
        task_db = self._instances().filter(
            TaskDB.id == task_id,
            TaskDB.user_id == user_id,
        ).first()
        if not task_db:
            return None

        now = now or datetime.utcnow()
        status_value = enum_to_value(status)
        task_db.status = status_value
        task_db.completed_at = now if status_value == TaskStatus.DONE.value else None
        task_db.updated_at = now
        try:
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Moved task {task_id} to {status_value}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update status of task {task_id}: {type(e).__name__}: {str(e)}")
            raise

    def complete(self, user_id: str, task_id: str, *, now: Optional[datetime] = None) -> Optional[Task]:
        """Mark a task done."""
        return self.set_status(user_id, task_id, TaskStatus.DONE, now=now)

    def delete(self, user_id: str, task_id: str) -> bool:
        """Permanently delete a task by ID for a specific user."""
        task_db = self._instances().filter(
            TaskDB.id == task_id,
            TaskDB.user_id == user_id,
        ).first()
        if not task_db:
            return False

        try:
            self.db.delete(task_db)
            self.db.commit()
            logger.debug(f"Deleted task {task_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete task {task_id}: {type(e).__name__}: {str(e)}")
            raise
