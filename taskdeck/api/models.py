"""Request/response models for the taskdeck API."""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from taskdeck.models.recurrence import RecurringTemplate
from taskdeck.models.task import Task, TaskCategory, TaskPriority, TaskStatus
from taskdeck.recurrence.evaluator import render_label
from taskdeck.recurrence.rules import is_valid_recurrence_rule


def _check_rule(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip().lower()
    if not is_valid_recurrence_rule(v):
        raise ValueError("recurrence_rule must be 'daily', 'weekly-<weekday>', 'monthly-<1..31>' or 'monthly-last'")
    return v


def _check_title(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    if not v:
        raise ValueError("title is required")
    return v


class RecurringTemplateCreateRequest(BaseModel):
    title: str = Field(..., description="Title copied onto each instance")
    description: Optional[str] = None
    category: Optional[TaskCategory] = None
    client_id: Optional[str] = None
    priority: TaskPriority = TaskPriority.NORMAL
    recurrence_rule: str = Field(..., description="daily | weekly-<weekday> | monthly-<n> | monthly-last")
    status: TaskStatus = Field(TaskStatus.TODAY, description="Bucket for instances (exact-day engine mode)")
    time_block_start: Optional[datetime] = None
    time_block_end: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def _validate_title(cls, v):
        return _check_title(v)

    @field_validator("recurrence_rule")
    @classmethod
    def _validate_recurrence_rule(cls, v):
        return _check_rule(v)


class TaskCreateRequest(BaseModel):
    """One-off task; lands in the inbox unless a bucket is given."""

    title: str
    description: Optional[str] = None
    category: Optional[TaskCategory] = None
    client_id: Optional[str] = None
    priority: TaskPriority = TaskPriority.NORMAL
    status: TaskStatus = TaskStatus.INBOX
    due_date: Optional[date] = None
    time_block_start: Optional[datetime] = None
    time_block_end: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def _validate_title(cls, v):
        return _check_title(v)


class RecurringTemplateUpdateRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[TaskCategory] = None
    client_id: Optional[str] = None
    priority: Optional[TaskPriority] = None
    recurrence_rule: Optional[str] = None
    status: Optional[TaskStatus] = None
    time_block_start: Optional[datetime] = None
    time_block_end: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def _validate_title(cls, v):
        return _check_title(v)

    @field_validator("recurrence_rule")
    @classmethod
    def _validate_recurrence_rule(cls, v):
        return _check_rule(v)


class RecurringTemplateResponse(BaseModel):
    template: RecurringTemplate
    recurrence_label: str

    @classmethod
    def from_template(cls, template: RecurringTemplate) -> "RecurringTemplateResponse":
        return cls(template=template, recurrence_label=render_label(template.recurrence_rule))


class RecurringTemplateListResponse(BaseModel):
    templates: List[RecurringTemplateResponse]


class TemplateDeleteResponse(BaseModel):
    deleted: bool = True
    instances_deleted: int = 0
    instances_orphaned: int = 0


class GenerateInstancesResponse(BaseModel):
    created_count: int
    ran_at: datetime
    today: Optional[date] = None


class TaskListResponse(BaseModel):
    tasks: List[Task]


class MoveTaskRequest(BaseModel):
    status: TaskStatus
