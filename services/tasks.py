"""
Task operations for authenticated callers.

Every lookup goes through the access scope, so a task outside the caller's
scope and a task that does not exist both raise the same NotFoundError.
"""

from sqlmodel import Session, select
from errors import NotFoundError
from models import Task, utcnow
from schemas import TaskCreate, TaskUpdate
from services.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, Page, fetch_page
from services.scope import Caller, TaskFilters, TaskSort, resolve_task_scope, task_id_scope, task_order_by

TASK_NOT_FOUND = "Task not found"


def list_tasks(
    session: Session,
    caller: Caller,
    filters: TaskFilters = TaskFilters(),
    sort: TaskSort = TaskSort(),
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_LIMIT,
) -> Page:
    """List the tasks visible to the caller"""
    return fetch_page(
        session,
        Task,
        resolve_task_scope(caller, filters),
        task_order_by(sort),
        page=page,
        limit=limit,
    )


def get_task(session: Session, caller: Caller, task_id: int) -> Task:
    """
    Fetch one task within the caller's scope

    Raises:
        NotFoundError: If the task is missing or belongs to someone else
    """
    task = session.exec(select(Task).where(*task_id_scope(caller, task_id))).first()
    if task is None:
        raise NotFoundError(TASK_NOT_FOUND)
    return task


def create_task(session: Session, caller: Caller, data: TaskCreate) -> Task:
    """Create a task owned and created by the caller"""
    task = Task(
        user_id=caller.user_id,
        created_by=caller.user_id,
        title=data.title,
        description=data.description.strip() if data.description else None,
        priority=data.priority,
        due_date=data.due_date,
        completed=False,
    )

    session.add(task)
    session.commit()
    session.refresh(task)
    return task


def apply_task_update(task: Task, data: TaskUpdate) -> Task:
    """Copy the fields present in the payload onto the task"""
    updates = data.model_dump(exclude_unset=True)

    # Title and completion cannot be cleared, only changed
    for field in ("title", "priority", "completed"):
        if updates.get(field) is not None:
            setattr(task, field, updates[field])
    if "description" in updates:
        description = updates["description"]
        task.description = description.strip() if description else None
    if "due_date" in updates:
        task.due_date = updates["due_date"]

    task.updated_at = utcnow()
    return task


def update_task(session: Session, caller: Caller, task_id: int, data: TaskUpdate) -> Task:
    """Update a task within the caller's scope"""
    task = apply_task_update(get_task(session, caller, task_id), data)

    session.add(task)
    session.commit()
    session.refresh(task)
    return task


def delete_task(session: Session, caller: Caller, task_id: int) -> None:
    """Delete a task within the caller's scope"""
    task = get_task(session, caller, task_id)
    session.delete(task)
    session.commit()


def toggle_task(session: Session, caller: Caller, task_id: int) -> Task:
    """Flip a task between pending and completed"""
    task = get_task(session, caller, task_id)
    task.completed = not task.completed
    task.updated_at = utcnow()

    session.add(task)
    session.commit()
    session.refresh(task)
    return task
