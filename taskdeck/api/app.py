"""FastAPI web application for taskdeck."""

from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from sqlalchemy.orm import Session

from taskdeck.api.models import (
    GenerateInstancesResponse,
    MoveTaskRequest,
    RecurringTemplateCreateRequest,
    RecurringTemplateListResponse,
    RecurringTemplateResponse,
    RecurringTemplateUpdateRequest,
    TaskCreateRequest,
    TaskListResponse,
    TemplateDeleteResponse,
)
from taskdeck.auth.dependencies import get_current_user, get_optional_user_id
from taskdeck.database.database import get_db, init_db
from taskdeck.database.recurring_template_repository import RecurringTemplateRepository
from taskdeck.database.repository import TaskRepository
from taskdeck.models.task import Task, TaskStatus
from taskdeck.models.task_factory import create_task_base, create_template_base
from taskdeck.models.user import User
from taskdeck.recurrence.engine import engine_for_session

VERSION = "0.1.0"

# Fields that may be explicitly cleared with null on update.
_CLEARABLE_TEMPLATE_FIELDS = {"description", "category", "client_id", "time_block_start", "time_block_end"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title="taskdeck API",
    description="Tasks, planning buckets and recurring task generation",
    version=VERSION,
    lifespan=lifespan,
)


def _template_or_404(repo: RecurringTemplateRepository, user_id: str, template_id: str):
    template = repo.get(user_id, template_id)
    if template is None:
        raise HTTPException(status_code=404, detail="Recurring task not found")
    return template


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": VERSION}


@app.post("/recurring-tasks/generate", response_model=GenerateInstancesResponse)
def generate_instances(
    user_id: Optional[str] = Depends(get_optional_user_id),
    db: Session = Depends(get_db),
):
    """Expand active recurring tasks into instances.

    Safe to call on every page load: unauthenticated calls and repeated calls
    simply create nothing.
    """
    result = engine_for_session(db).run_detailed(user_id)
    return GenerateInstancesResponse(
        created_count=result.created_count,
        ran_at=result.ran_at,
        today=result.today,
    )


@app.get("/recurring-tasks", response_model=RecurringTemplateListResponse)
def list_recurring_tasks(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    templates = RecurringTemplateRepository(db).list_all(current_user.id)
    return RecurringTemplateListResponse(
        templates=[RecurringTemplateResponse.from_template(t) for t in templates]
    )


@app.post("/recurring-tasks", response_model=RecurringTemplateResponse, status_code=201)
def create_recurring_task(
    request: RecurringTemplateCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    template = create_template_base(
        user_id=current_user.id,
        title=request.title,
        recurrence_rule=request.recurrence_rule,
        description=request.description,
        category=request.category,
        client_id=request.client_id,
        priority=request.priority,
        status=request.status,
        time_block_start=request.time_block_start,
        time_block_end=request.time_block_end,
    )
    try:
        created = RecurringTemplateRepository(db).create(template)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to create recurring task: {str(e)}")
    return RecurringTemplateResponse.from_template(created)


@app.get("/recurring-tasks/{template_id}", response_model=RecurringTemplateResponse)
def get_recurring_task(
    template_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    template = _template_or_404(RecurringTemplateRepository(db), current_user.id, template_id)
    return RecurringTemplateResponse.from_template(template)


@app.patch("/recurring-tasks/{template_id}", response_model=RecurringTemplateResponse)
def update_recurring_task(
    template_id: str,
    request: RecurringTemplateUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Edit a recurring task. Changes affect future instances, not existing ones."""
    fields = {
        name: value
        for name, value in request.model_dump(exclude_unset=True).items()
        if value is not None or name in _CLEARABLE_TEMPLATE_FIELDS
    }
    repo = RecurringTemplateRepository(db)
    try:
        updated = repo.update(current_user.id, template_id, **fields)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if updated is None:
        raise HTTPException(status_code=404, detail="Recurring task not found")
    return RecurringTemplateResponse.from_template(updated)


@app.post("/recurring-tasks/{template_id}/pause", response_model=RecurringTemplateResponse)
def pause_recurring_task(
    template_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    updated = RecurringTemplateRepository(db).set_paused(current_user.id, template_id, True)
    if updated is None:
        raise HTTPException(status_code=404, detail="Recurring task not found")
    return RecurringTemplateResponse.from_template(updated)


@app.post("/recurring-tasks/{template_id}/resume", response_model=RecurringTemplateResponse)
def resume_recurring_task(
    template_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    updated = RecurringTemplateRepository(db).set_paused(current_user.id, template_id, False)
    if updated is None:
        raise HTTPException(status_code=404, detail="Recurring task not found")
    return RecurringTemplateResponse.from_template(updated)


@app.delete("/recurring-tasks/{template_id}", response_model=TemplateDeleteResponse)
def delete_recurring_task(
    template_id: str,
    delete_instances: Optional[bool] = Query(None, description="Also delete generated instances (default: server policy)"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    deletion = RecurringTemplateRepository(db).delete(current_user.id, template_id, delete_instances=delete_instances)
    if deletion is None:
        raise HTTPException(status_code=404, detail="Recurring task not found")
    if deletion.instances_deleted:
        return TemplateDeleteResponse(instances_deleted=deletion.instances_affected)
    return TemplateDeleteResponse(instances_orphaned=deletion.instances_affected)


@app.get("/recurring-tasks/{template_id}/instances", response_model=TaskListResponse)
def list_recurring_task_instances(
    template_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _template_or_404(RecurringTemplateRepository(db), current_user.id, template_id)
    return TaskListResponse(tasks=TaskRepository(db).list_instances(current_user.id, template_id))


@app.get("/tasks", response_model=TaskListResponse)
def list_tasks(
    status: Optional[List[TaskStatus]] = Query(None, description="Limit to these buckets"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return TaskListResponse(tasks=TaskRepository(db).get_all(current_user.id, statuses=status))


@app.post("/tasks", response_model=Task, status_code=201)
def create_task(
    request: TaskCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    task = create_task_base(
        user_id=current_user.id,
        title=request.title,
        description=request.description,
        category=request.category,
        client_id=request.client_id,
        priority=request.priority,
        status=request.status,
        due_date=request.due_date,
        time_block_start=request.time_block_start,
        time_block_end=request.time_block_end,
    )
    try:
        return TaskRepository(db).create(task)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to create task: {str(e)}")


@app.delete("/tasks/{task_id}")
def delete_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not TaskRepository(db).delete(current_user.id, task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    return {"deleted": True}


@app.post("/tasks/{task_id}/complete", response_model=Task)
def complete_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    task = TaskRepository(db).complete(current_user.id, task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@app.post("/tasks/{task_id}/move", response_model=Task)
def move_task(
    task_id: str,
    request: MoveTaskRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    task = TaskRepository(db).set_status(current_user.id, task_id, request.status)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return task
