"""
Administrative operations: unrestricted user and task management plus
aggregate statistics. Callers must already be verified as admins.
"""

import re
from sqlmodel import Session, col, select
from errors import NotFoundError, PolicyError, ValidationError
from models import MAX_TASK_ID, Task, User, UserRole, utcnow
from schemas import AdminUserUpdate, DashboardStats, TaskStats, TaskTotals, TaskUpdate, UserTotals
from services.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, Page, count_rows, fetch_page
from services.scope import Caller, TaskFilters, UserFilters, resolve_task_scope, resolve_user_filters, task_order_by
from services.tasks import TASK_NOT_FOUND, apply_task_update
from services.users import ensure_unique, get_user
from utils.logger import logger

TASK_ID_PATTERN = re.compile(r"[1-9][0-9]*")


def list_users(
    session: Session,
    filters: UserFilters = UserFilters(),
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_LIMIT,
) -> Page:
    """Page through all users, newest first"""
    return fetch_page(
        session,
        User,
        resolve_user_filters(filters),
        [col(User.created_at).desc(), col(User.id).desc()],
        page=page,
        limit=limit,
    )


def task_stats_for_user(session: Session, user_id: str) -> TaskStats:
    owned = [col(Task.user_id) == user_id]
    total = count_rows(session, Task, owned)
    completed = count_rows(session, Task, owned + [col(Task.completed) == True])  # noqa: E712
    return TaskStats(total=total, completed=completed, pending=total - completed)


def get_user_with_stats(session: Session, user_id: str):
    """
    Fetch a user together with counts of their tasks

    Returns:
        Tuple of (user, TaskStats)
    """
    user = get_user(session, user_id)
    return user, task_stats_for_user(session, user.id)


def update_user(session: Session, admin: Caller, user_id: str, data: AdminUserUpdate) -> User:
    """
    Update any account; the schema has no password or id fields

    Raises:
        PolicyError: If the admin tries to deactivate their own account
        ConflictError: If the new username or email is taken
    """
    updates = data.model_dump(exclude_unset=True, exclude_none=True)
    if user_id == admin.user_id and updates.get("is_active") is False:
        raise PolicyError("Cannot deactivate your own account")

    user = get_user(session, user_id)

    ensure_unique(
        session,
        username=updates.get("username"),
        email=updates.get("email"),
        exclude_id=user.id,
    )

    for field, value in updates.items():
        setattr(user, field, value)
    user.updated_at = utcnow()

    session.add(user)
    session.commit()
    session.refresh(user)

    logger.info("Admin %s updated user %s fields %s", admin.user_id, user.id, sorted(updates))
    return user


def delete_user(session: Session, admin: Caller, user_id: str) -> None:
    """
    Delete a user and every task they own

    Raises:
        PolicyError: If the admin targets their own account
        NotFoundError: If the user does not exist
    """
    if user_id == admin.user_id:
        raise PolicyError("Cannot delete your own account")

    user = get_user(session, user_id)
    tasks = session.exec(select(Task).where(Task.user_id == user.id)).all()
    for task in tasks:
        session.delete(task)
    session.delete(user)
    # Tasks and user go in the same transaction
    session.commit()

    logger.info("Admin %s deleted user %s and %d tasks", admin.user_id, user_id, len(tasks))


def toggle_user_status(session: Session, admin: Caller, user_id: str) -> User:
    """Activate or deactivate an account other than the admin's own"""
    if user_id == admin.user_id:
        raise PolicyError("Cannot deactivate your own account")

    user = get_user(session, user_id)
    user.is_active = not user.is_active
    user.updated_at = utcnow()

    session.add(user)
    session.commit()
    session.refresh(user)

    logger.info("Admin %s set user %s active=%s", admin.user_id, user.id, user.is_active)
    return user


def dashboard_stats(session: Session) -> DashboardStats:
    """Global user and task counts"""
    total_tasks = count_rows(session, Task)
    completed_tasks = count_rows(session, Task, [col(Task.completed) == True])  # noqa: E712

    return DashboardStats(
        users=UserTotals(
            total_users=count_rows(session, User),
            active_users=count_rows(session, User, [col(User.is_active) == True]),  # noqa: E712
            admin_users=count_rows(session, User, [col(User.role) == UserRole.ADMIN]),
        ),
        tasks=TaskTotals(
            total_tasks=total_tasks,
            completed_tasks=completed_tasks,
            pending_tasks=total_tasks - completed_tasks,
        ),
    )


def list_all_tasks(
    session: Session,
    admin: Caller,
    filters: TaskFilters = TaskFilters(),
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_LIMIT,
) -> Page:
    """Page through every task, newest first"""
    return fetch_page(
        session,
        Task,
        resolve_task_scope(admin, filters),
        task_order_by(),
        page=page,
        limit=limit,
    )


def parse_task_id(raw_id: str) -> int:
    """
    Validate a task id taken from the URL

    Raises:
        ValidationError: If the id is not a positive integer
    """
    raw_id = (raw_id or "").strip()
    if (
        len(raw_id) > len(str(MAX_TASK_ID))
        or not TASK_ID_PATTERN.fullmatch(raw_id)
        or int(raw_id) > MAX_TASK_ID
    ):
        raise ValidationError("Invalid task ID format")
    return int(raw_id)


def _get_any_task(session: Session, raw_id: str) -> Task:
    task = session.get(Task, parse_task_id(raw_id))
    if task is None:
        raise NotFoundError(TASK_NOT_FOUND)
    return task


def update_any_task(session: Session, admin: Caller, raw_id: str, data: TaskUpdate) -> Task:
    """Update any task; id, owner and creator are not part of the payload"""
    task = apply_task_update(_get_any_task(session, raw_id), data)

    session.add(task)
    session.commit()
    session.refresh(task)

    logger.info("Admin %s updated task %s", admin.user_id, task.id)
    return task


def delete_any_task(session: Session, admin: Caller, raw_id: str) -> None:
    task = _get_any_task(session, raw_id)
    task_id = task.id
    session.delete(task)
    session.commit()

    logger.info("Admin %s deleted task %s", admin.user_id, task_id)
