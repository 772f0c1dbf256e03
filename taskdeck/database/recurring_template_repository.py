"""Repository for recurring template database operations."""

import logging
import os
from datetime import datetime
from typing import List, NamedTuple, Optional

from dotenv import load_dotenv
from sqlalchemy.orm import Session

from taskdeck.database.models import TaskDB, enum_to_value
from taskdeck.models.constants import (
    DEFAULT_TEMPLATE_DELETE_POLICY,
    TEMPLATE_DELETE_CASCADE,
    TEMPLATE_DELETE_ORPHAN,
)
from taskdeck.models.recurrence import RecurringTemplate

load_dotenv()

logger = logging.getLogger(__name__)

# Fields a user may edit on an existing template.
_EDITABLE_FIELDS = (
    "title",
    "description",
    "category",
    "client_id",
    "priority",
    "recurrence_rule",
    "status",
    "time_block_start",
    "time_block_end",
)
_ENUM_FIELDS = ("category", "priority", "status")


class TemplateDeletion(NamedTuple):
    instances_deleted: bool  # False means the instances were orphaned
    instances_affected: int


def template_delete_policy() -> str:
    """Configured default for what happens to instances when a template is deleted."""
    policy = os.getenv("TEMPLATE_DELETE_POLICY", DEFAULT_TEMPLATE_DELETE_POLICY).lower()
    if policy not in (TEMPLATE_DELETE_ORPHAN, TEMPLATE_DELETE_CASCADE):
        logger.warning(f"Unknown TEMPLATE_DELETE_POLICY {policy!r}; using {DEFAULT_TEMPLATE_DELETE_POLICY!r}")
        return DEFAULT_TEMPLATE_DELETE_POLICY
    return policy


class RecurringTemplateRepository:
    def __init__(self, db: Session):
        self.db = db

    def _templates(self):
        return self.db.query(TaskDB).filter(TaskDB.is_recurring.is_(True))

    def _get_row(self, user_id: str, template_id: str) -> Optional[TaskDB]:
        return self._templates().filter(
            TaskDB.user_id == user_id,
            TaskDB.id == template_id,
        ).first()

    def create(self, template: RecurringTemplate) -> RecurringTemplate:
        row = TaskDB.from_template(template)
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            logger.debug(f"Created recurring template {template.id} ({template.recurrence_rule})")
            return row.to_template()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create recurring template: {type(e).__name__}: {str(e)}")
            raise

    def get(self, user_id: str, template_id: str) -> Optional[RecurringTemplate]:
        row = self._get_row(user_id, template_id)
        return row.to_template() if row else None

    def list_all(self, user_id: str) -> List[RecurringTemplate]:
        rows = (
            self._templates()
            .filter(TaskDB.user_id == user_id)
            .order_by(TaskDB.created_at.desc())
            .all()
        )
        return [row.to_template() for row in rows]

    def list_active(self, user_id: str) -> List[RecurringTemplate]:
        """Templates the engine should expand: recurring and not paused."""
        rows = (
            self._templates()
            .filter(
                TaskDB.user_id == user_id,
                TaskDB.is_paused.is_(False),
            )
            .order_by(TaskDB.created_at)
            .all()
        )
        return [row.to_template() for row in rows]

    def update(self, user_id: str, template_id: str, **fields) -> Optional[RecurringTemplate]:
        """Update editable fields. Existing instances are left untouched."""
        unknown = set(fields) - set(_EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update template fields: {', '.join(sorted(unknown))}")

        row = self._get_row(user_id, template_id)
        if row is None:
            return None
        for name, value in fields.items():
            setattr(row, name, enum_to_value(value) if name in _ENUM_FIELDS else value)
        row.updated_at = datetime.utcnow()
        try:
            self.db.commit()
            self.db.refresh(row)
            return row.to_template()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update recurring template {template_id}: {type(e).__name__}: {str(e)}")
            raise

    def set_paused(self, user_id: str, template_id: str, paused: bool) -> Optional[RecurringTemplate]:
        row = self._get_row(user_id, template_id)
        if row is None:
            return None
        row.is_paused = bool(paused)
        row.updated_at = datetime.utcnow()
        try:
            self.db.commit()
            self.db.refresh(row)
            logger.debug(f"{'Paused' if paused else 'Resumed'} recurring template {template_id}")
            return row.to_template()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to set paused on recurring template {template_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, user_id: str, template_id: str, *, delete_instances: Optional[bool] = None) -> Optional[TemplateDeletion]:
        """Delete a template, cascading to or orphaning its instances.

        Args:
            delete_instances: True deletes instances, False orphans them (clears
                parent_task_id). None uses TEMPLATE_DELETE_POLICY.

        Returns:
            Which policy was applied and how many instances it touched, or None
            if the template was not found.
        """
        row = self._get_row(user_id, template_id)
        if row is None:
            return None
        if delete_instances is None:
            delete_instances = template_delete_policy() == TEMPLATE_DELETE_CASCADE

        instances = self.db.query(TaskDB).filter(TaskDB.parent_task_id == template_id)
        try:
            if delete_instances:
                affected = instances.delete(synchronize_session=False)
            else:
                affected = instances.update({TaskDB.parent_task_id: None}, synchronize_session=False)
            self.db.delete(row)
            self.db.commit()
            logger.debug(
                f"Deleted recurring template {template_id}; "
                f"{'deleted' if delete_instances else 'orphaned'} {affected} instances"
            )
            return TemplateDeletion(instances_deleted=bool(delete_instances), instances_affected=int(affected))
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete recurring template {template_id}: {type(e).__name__}: {str(e)}")
            raise
