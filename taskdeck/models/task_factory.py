"""Task creation factory for taskdeck.

This module centralizes task creation logic to eliminate duplication
and ensure consistent default values across the application.
"""

import uuid
from datetime import date, datetime
from typing import Optional, Dict, Any

from taskdeck.models.task import Task, TaskStatus, TaskCategory, TaskPriority
from taskdeck.models.recurrence import RecurringTemplate
from taskdeck.models.constants import (
    DEFAULT_TASK_STATUS,
    DEFAULT_TASK_PRIORITY,
    DEFAULT_TEMPLATE_STATUS,
)


def create_task_defaults() -> Dict[str, Any]:
    """Get default task values as a dictionary.

    Returns:
        Dictionary with default task field values using constants
    """
    return {
        "description": None,
        "category": None,
        "client_id": None,
        "priority": DEFAULT_TASK_PRIORITY,
        "status": DEFAULT_TASK_STATUS,
        "due_date": None,
        "parent_task_id": None,
        "time_block_start": None,
        "time_block_end": None,
    }


def create_task_base(
    user_id: str,
    title: str,
    description: Optional[str] = None,
    category: Optional[TaskCategory] = None,
    client_id: Optional[str] = None,
    priority: Optional[TaskPriority] = None,
    status: Optional[TaskStatus] = None,
    due_date: Optional[date] = None,
    parent_task_id: Optional[str] = None,
    time_block_start: Optional[datetime] = None,
    time_block_end: Optional[datetime] = None,
) -> Task:
    """Create a task with defaults, allowing overrides.

    Args:
        user_id: User ID who owns this task (required)
        title: Task title (required)
        description: Task details
        category: Task category (client/personal/idea)
        client_id: Owning client reference
        priority: Task priority (defaults to normal)
        status: Planning bucket (defaults to inbox)
        due_date: Calendar due date
        parent_task_id: Recurring template that generated this task
        time_block_start: Scheduled start time
        time_block_end: Scheduled end time

    Returns:
        Task object with defaults applied
    """
    now = datetime.utcnow()
    defaults = create_task_defaults()

    return Task(
        id=str(uuid.uuid4()),
        user_id=user_id,
        title=title,
        description=description if description is not None else defaults["description"],
        category=category if category is not None else defaults["category"],
        client_id=client_id if client_id is not None else defaults["client_id"],
        priority=priority if priority is not None else defaults["priority"],
        status=status if status is not None else defaults["status"],
        due_date=due_date if due_date is not None else defaults["due_date"],
        parent_task_id=parent_task_id if parent_task_id is not None else defaults["parent_task_id"],
        is_recurring=False,
        completed_at=None,
        time_block_start=time_block_start if time_block_start is not None else defaults["time_block_start"],
        time_block_end=time_block_end if time_block_end is not None else defaults["time_block_end"],
        created_at=now,
        updated_at=now,
    )


def create_instance_from_template(template: RecurringTemplate, *, due_date: date, status: TaskStatus) -> Task:
    """Create a concrete task instance mirroring a template's fields."""
    return create_task_base(
        user_id=template.user_id,
        title=template.title,
        description=template.description,
        category=template.category,
        client_id=template.client_id,
        priority=template.priority,
        status=status,
        due_date=due_date,
        parent_task_id=template.id,
        time_block_start=template.time_block_start,
        time_block_end=template.time_block_end,
    )


def create_template_base(
    user_id: str,
    title: str,
    recurrence_rule: str,
    description: Optional[str] = None,
    category: Optional[TaskCategory] = None,
    client_id: Optional[str] = None,
    priority: Optional[TaskPriority] = None,
    status: Optional[TaskStatus] = None,
    is_paused: bool = False,
    time_block_start: Optional[datetime] = None,
    time_block_end: Optional[datetime] = None,
) -> RecurringTemplate:
    """Create a recurring template with defaults applied."""
    now = datetime.utcnow()
    return RecurringTemplate(
        id=str(uuid.uuid4()),
        user_id=user_id,
        title=title,
        description=description,
        category=category,
        client_id=client_id,
        priority=priority if priority is not None else DEFAULT_TASK_PRIORITY,
        recurrence_rule=recurrence_rule,
        is_paused=bool(is_paused),
        status=status if status is not None else DEFAULT_TEMPLATE_STATUS,
        time_block_start=time_block_start,
        time_block_end=time_block_end,
        created_at=now,
        updated_at=now,
    )
