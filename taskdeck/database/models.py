"""SQLAlchemy database models for taskdeck."""

from datetime import datetime
from typing import Optional, Union, TypeVar, Type
import uuid
from sqlalchemy import Column, String, Boolean, Date, DateTime, ForeignKey, UniqueConstraint

from taskdeck.database.database import Base
from taskdeck.models.task import TaskStatus, TaskCategory, TaskPriority

T = TypeVar('T')


def enum_to_value(enum_obj: Union[str, T, None]) -> Optional[str]:
    """Convert enum to string value (handles enum, string and None).

    Args:
        enum_obj: Enum instance, string value or None

    Returns:
        String value of the enum, the string itself if already a string, or None
    """
    if enum_obj is None:
        return None
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


def value_to_enum(value: Optional[str], enum_class: Type[T], default: Optional[T]) -> Optional[T]:
    """Convert string to enum with fallback to default.

    Args:
        value: String value to convert
        enum_class: Enum class to convert to
        default: Default enum value if conversion fails

    Returns:
        Enum instance, or default if conversion fails
    """
    if not value:
        return default
    try:
        return enum_class(value.lower())
    except (ValueError, AttributeError):
        return default


class TaskDB(Base):
    """Database model for both recurring templates and task instances.

    Templates are rows with `is_recurring = true`; instances point back at their
    template through `parent_task_id`.
    """

    __tablename__ = "tasks"
    __table_args__ = (
        # At most one generated instance per template per due date.
        # NULL values do not participate (one-off tasks and templates are unaffected).
        UniqueConstraint("parent_task_id", "due_date", name="uq_task_parent_due_date"),
    )

    # Primary key
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # User association
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Basic fields
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    category = Column(String, nullable=True)
    client_id = Column(String, nullable=True, index=True)
    priority = Column(String, nullable=False, default=TaskPriority.NORMAL.value)
    status = Column(String, nullable=False, default=TaskStatus.INBOX.value, index=True)

    # Scheduling
    due_date = Column(Date, nullable=True, index=True)
    time_block_start = Column(DateTime, nullable=True)
    time_block_end = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)

    # Recurrence
    is_recurring = Column(Boolean, nullable=False, default=False, index=True)
    is_paused = Column(Boolean, nullable=False, default=False)
    recurrence_rule = Column(String, nullable=True)
    parent_task_id = Column(String, ForeignKey("tasks.id", ondelete="SET NULL"), nullable=True, index=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database row to a Task instance model."""
        from taskdeck.models.task import Task

        return Task(
            id=self.id,
            user_id=self.user_id,
            title=self.title,
            description=self.description,
            category=value_to_enum(self.category, TaskCategory, None),
            client_id=self.client_id,
            priority=value_to_enum(self.priority, TaskPriority, TaskPriority.NORMAL),
            status=value_to_enum(self.status, TaskStatus, TaskStatus.INBOX),
            due_date=self.due_date,
            parent_task_id=self.parent_task_id,
            is_recurring=False,
            completed_at=self.completed_at,
            time_block_start=self.time_block_start,
            time_block_end=self.time_block_end,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def to_template(self):
        """Convert database row to a RecurringTemplate model."""
        from taskdeck.models.recurrence import RecurringTemplate

        return RecurringTemplate(
            id=self.id,
            user_id=self.user_id,
            title=self.title,
            description=self.description,
            category=value_to_enum(self.category, TaskCategory, None),
            client_id=self.client_id,
            priority=value_to_enum(self.priority, TaskPriority, TaskPriority.NORMAL),
            recurrence_rule=self.recurrence_rule or "",
            is_paused=bool(self.is_paused),
            status=value_to_enum(self.status, TaskStatus, TaskStatus.TODAY),
            time_block_start=self.time_block_start,
            time_block_end=self.time_block_end,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, task):
        """Create database row from a Task instance model."""
        # Pydantic with use_enum_values=True returns strings
        return cls(
            id=task.id,
            user_id=task.user_id,
            title=task.title,
            description=task.description,
            category=enum_to_value(task.category),
            client_id=task.client_id,
            priority=enum_to_value(task.priority),
            status=enum_to_value(task.status),
            due_date=task.due_date,
            time_block_start=task.time_block_start,
            time_block_end=task.time_block_end,
            completed_at=task.completed_at,
            is_recurring=False,
            is_paused=False,
            recurrence_rule=None,
            parent_task_id=task.parent_task_id,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )

    @classmethod
    def from_template(cls, template):
        """Create database row from a RecurringTemplate model."""
        return cls(
            id=template.id,
            user_id=template.user_id,
            title=template.title,
            description=template.description,
            category=enum_to_value(template.category),
            client_id=template.client_id,
            priority=enum_to_value(template.priority),
            status=enum_to_value(template.status),
            due_date=None,
            time_block_start=template.time_block_start,
            time_block_end=template.time_block_end,
            completed_at=None,
            is_recurring=True,
            is_paused=bool(template.is_paused),
            recurrence_rule=template.recurrence_rule,
            parent_task_id=None,
            created_at=template.created_at,
            updated_at=template.updated_at,
        )


class UserDB(Base):
    """Database model for User."""

    __tablename__ = "users"

    # Primary key
    id = Column(String, primary_key=True)

    # User profile
    email = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from taskdeck.models.user import User
        return User(
            id=self.id,
            email=self.email,
            name=self.name,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
