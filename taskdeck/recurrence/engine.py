"""Expand recurring templates into concrete dated task instances.

A run is a single idempotent pass over the owner's active templates. Running it
any number of times on the same day creates at most one instance per
(template, due date): the existence check prevents duplicates in the normal
case and the storage-level unique constraint catches racing runs.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Callable, Dict, Optional

from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from taskdeck.database.recurring_template_repository import RecurringTemplateRepository
from taskdeck.database.repository import DuplicateInstanceError, TaskRepository
from taskdeck.models.recurrence import MonthlyOverflowPolicy, RecurringTemplate
from taskdeck.models.task_factory import create_instance_from_template
from taskdeck.recurrence.buckets import classify_bucket
from taskdeck.recurrence.evaluator import next_due_date_on_or_after, occurs_on
from taskdeck.recurrence.settings import EngineMode, EngineSettings, load_engine_settings

logger = logging.getLogger(__name__)


class TemplateOutcome(str, Enum):
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"
    BEYOND_HORIZON = "beyond_horizon"
    MALFORMED_RULE = "malformed_rule"
    NOT_DUE = "not_due"
    FAILED = "failed"


class EngineRunResult(BaseModel):
    """Outcome of one engine pass."""

    created_count: int = 0
    ran_at: datetime = Field(..., description="When this pass ran (callers may keep it as their last-run marker)")
    today: Optional[date] = Field(None, description="Calendar day the pass was evaluated for")
    outcomes: Dict[str, TemplateOutcome] = Field(default_factory=dict, description="Outcome per template id")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


def should_run(last_run_at: Optional[datetime], now: datetime, *, min_interval: timedelta = timedelta(minutes=5)) -> bool:
    """Optional caller-side gate for skipping redundant runs.

    Purely an optimization: the engine is idempotent without it, so a missing or
    reset marker only costs an extra pass.
    """
    if last_run_at is None:
        return True
    if last_run_at.date() != now.date():
        return True
    return now - last_run_at >= min_interval


class RecurringTaskEngine:
    """Runs idempotent expansion passes over a user's recurring templates."""

    def __init__(
        self,
        template_repo: RecurringTemplateRepository,
        task_repo: TaskRepository,
        *,
        horizon_days: Optional[int] = None,
        overflow_policy: Optional[MonthlyOverflowPolicy] = None,
        mode: Optional[EngineMode] = None,
        clock: Optional[Callable[[], datetime]] = None,
        settings: Optional[EngineSettings] = None,
    ):
        settings = settings or EngineSettings()
        self.template_repo = template_repo
        self.task_repo = task_repo
        self.horizon_days = settings.horizon_days if horizon_days is None else horizon_days
        self.overflow_policy = MonthlyOverflowPolicy(overflow_policy or settings.overflow_policy)
        self.mode = EngineMode(mode or settings.mode)
        self.clock = clock or datetime.now

    def run(self, user_id: Optional[str], *, today: Optional[date] = None) -> int:
        """Run one pass; returns the number of instances created."""
        return self.run_detailed(user_id, today=today).created_count

    def run_detailed(self, user_id: Optional[str], *, today: Optional[date] = None) -> EngineRunResult:
        now = self.clock()
        result = EngineRunResult(ran_at=now)

        if not user_id:
            # Invoked opportunistically on page loads; no actor means nothing to do.
            logger.debug("Recurring task engine skipped: no authenticated user")
            return result

        today = today or now.date()
        result.today = today

        try:
            templates = self.template_repo.list_active(user_id)
        except Exception as e:
            logger.error(f"Failed to load recurring templates for user {user_id}: {type(e).__name__}: {str(e)}")
            self._rollback()
            return result

        logger.debug(f"Recurring task engine: {len(templates)} active templates for user {user_id} on {today}")

        for template in templates:
            try:
                outcome = self._process_template(template, today)
            except Exception as e:
                # Isolated per template; it is retried on the next run.
                logger.error(
                    f"Failed to expand recurring template {template.id}: {type(e).__name__}: {str(e)}"
                )
                self._rollback()
                outcome = TemplateOutcome.FAILED
            result.outcomes[template.id] = outcome
            if outcome == TemplateOutcome.CREATED:
                result.created_count += 1

        logger.info(f"Recurring task engine created {result.created_count} instances for user {user_id}")
        return result

    def _rollback(self) -> None:
        """Discard the failed transaction so later templates start on a clean session."""
        sessions = {id(repo.db): repo.db for repo in (self.template_repo, self.task_repo)}
        for db in sessions.values():
            try:
                db.rollback()
            except Exception as e:
                logger.error(f"Failed to roll back session after template error: {type(e).__name__}: {str(e)}")

    def _process_template(self, template: RecurringTemplate, today: date) -> TemplateOutcome:
        rule = template.parsed_rule()
        if rule is None:
            logger.warning(f"Skipping recurring template {template.id}: malformed rule {template.recurrence_rule!r}")
            return TemplateOutcome.MALFORMED_RULE

        if self.mode == EngineMode.EXACT_DAY:
            return self._process_exact_day(template, rule, today)

        due_date = next_due_date_on_or_after(rule, today, overflow_policy=self.overflow_policy)
        if due_date is None:
            logger.warning(f"Skipping recurring template {template.id}: no due date for {template.recurrence_rule!r}")
            return TemplateOutcome.MALFORMED_RULE

        if (due_date - today).days > self.horizon_days:
            return TemplateOutcome.BEYOND_HORIZON

        if self.task_repo.find_instance(template.id, due_date) is not None:
            return TemplateOutcome.ALREADY_EXISTS

        status = classify_bucket(due_date, today)
        instance = create_instance_from_template(template, due_date=due_date, status=status)
        return self._insert(instance)

    def _process_exact_day(self, template: RecurringTemplate, rule, today: date) -> TemplateOutcome:
        if not occurs_on(rule, today, overflow_policy=self.overflow_policy):
            return TemplateOutcome.NOT_DUE

        # due_date is the local day of creation, so it doubles as the per-day dedupe key.
        # created_at stays UTC like every other row.
        if self.task_repo.find_instance(template.id, today) is not None:
            return TemplateOutcome.ALREADY_EXISTS

        instance = create_instance_from_template(template, due_date=today, status=template.status)
        return self._insert(instance)

    def _insert(self, instance) -> TemplateOutcome:
        try:
            self.task_repo.create_instance(instance)
        except DuplicateInstanceError:
            logger.info(
                f"Instance of template {instance.parent_task_id} due {instance.due_date} was created concurrently"
            )
            return TemplateOutcome.ALREADY_EXISTS
        return TemplateOutcome.CREATED


def engine_for_session(db: Session, *, clock: Optional[Callable[[], datetime]] = None) -> RecurringTaskEngine:
    """Engine over SQLAlchemy repositories with settings from the environment."""
    return RecurringTaskEngine(
        RecurringTemplateRepository(db),
        TaskRepository(db),
        settings=load_engine_settings(),
        clock=clock,
    )


def run_recurring_task_engine(
    db: Session,
    *,
    user_id: Optional[str],
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> int:
    """Create missing instances for the user's active recurring templates.

    Returns number of tasks created (0 when there is no authenticated user).
    """
    clock = (lambda: now) if now is not None else None
    return engine_for_session(db, clock=clock).run(user_id, today=today)
