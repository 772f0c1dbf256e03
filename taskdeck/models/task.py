"""Task data models for taskdeck."""

from datetime import date, datetime
from typing import Optional
from enum import Enum
from pydantic import BaseModel, Field


class TaskStatus(str, Enum):
    """Planning bucket a task currently belongs to."""
    INBOX = "inbox"
    TODAY = "today"
    TOMORROW = "tomorrow"
    THIS_WEEK = "this_week"
    NEXT_WEEK = "next_week"
    BACKBURNER = "backburner"
    DONE = "done"


class TaskCategory(str, Enum):
    """Task category enumeration."""
    CLIENT = "client"
    PERSONAL = "personal"
    IDEA = "idea"


class TaskPriority(str, Enum):
    """Task priority enumeration."""
    NORMAL = "normal"
    URGENT = "urgent"


class Task(BaseModel):
    """Concrete actionable task (a generated instance or a one-off task)."""

    id: str = Field(..., description="Unique task identifier (UUID v4)")
    user_id: str = Field(..., description="User ID who owns this task")
    title: str = Field(..., description="Task title")
    description: Optional[str] = Field(None, description="Task details")
    category: Optional[TaskCategory] = Field(None, description="Task category")
    client_id: Optional[str] = Field(None, description="Owning client (for client tasks)")
    priority: TaskPriority = Field(TaskPriority.NORMAL, description="Task priority")
    status: TaskStatus = Field(TaskStatus.INBOX, description="Planning bucket")
    due_date: Optional[date] = Field(None, description="Calendar due date (no time)")
    parent_task_id: Optional[str] = Field(
        None, description="Recurring template that generated this task (null for one-off tasks)"
    )
    is_recurring: bool = Field(False, description="Always false for instances")
    completed_at: Optional[datetime] = Field(None, description="Completion timestamp")
    time_block_start: Optional[datetime] = Field(None, description="Scheduled start time")
    time_block_end: Optional[datetime] = Field(None, description="Scheduled end time")
    created_at: datetime = Field(..., description="Task creation timestamp")
    updated_at: datetime = Field(..., description="Task last update timestamp")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
