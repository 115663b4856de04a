"""
Access scope for task and user queries.

Every task lookup, listing and mutation builds its WHERE clauses here so the
ownership rule lives in one place: admins see every task, everyone else sees
only the tasks they own, whatever filters they send.
"""

from dataclasses import dataclass
from typing import List, Optional
from sqlalchemy import ColumnElement, or_
from sqlmodel import col
from models import Task, TaskPriority, User, UserRole

# sortBy values accepted from clients, mapped to task columns
TASK_SORT_FIELDS = {
    "createdAt": Task.created_at,
    "updatedAt": Task.updated_at,
    "dueDate": Task.due_date,
    "title": Task.title,
    "priority": Task.priority,
    "completed": Task.completed,
}

TASK_SEARCH_FIELDS = (Task.title, Task.description)
USER_SEARCH_FIELDS = (User.username, User.email, User.first_name, User.last_name)


@dataclass(frozen=True)
class Caller:
    """Authenticated identity performing a request"""
    user_id: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


@dataclass(frozen=True)
class TaskFilters:
    """Optional task filters; None means the filter was not requested"""
    completed: Optional[bool] = None
    priority: Optional[TaskPriority] = None
    user_id: Optional[str] = None
    search: Optional[str] = None


@dataclass(frozen=True)
class UserFilters:
    """Optional user filters; None means the filter was not requested"""
    search: Optional[str] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


@dataclass(frozen=True)
class TaskSort:
    field: str = "createdAt"
    order: str = "desc"


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def search_clause(term: str, columns) -> ColumnElement[bool]:
    """Case-insensitive substring match on any of the columns"""
    pattern = f"%{_escape_like(term)}%"
    return or_(*[col(column).ilike(pattern, escape="\\") for column in columns])


def resolve_task_scope(caller: Caller, filters: TaskFilters = TaskFilters()) -> List[ColumnElement[bool]]:
    """
    Build the WHERE clauses for a task query

    Args:
        caller: Identity and role of the requester
        filters: Filters requested by the client

    Returns:
        Clauses to AND together; an empty list means every task
    """
    clauses: List[ColumnElement[bool]] = []

    # Added regardless of filters.user_id so callers cannot widen their scope
    if not caller.is_admin:
        clauses.append(col(Task.user_id) == caller.user_id)

    if filters.user_id is not None:
        clauses.append(col(Task.user_id) == filters.user_id)
    if filters.completed is not None:
        clauses.append(col(Task.completed) == filters.completed)
    if filters.priority is not None:
        clauses.append(col(Task.priority) == filters.priority)
    if filters.search:
        clauses.append(search_clause(filters.search, TASK_SEARCH_FIELDS))

    return clauses


def task_id_scope(caller: Caller, task_id: int) -> List[ColumnElement[bool]]:
    """Clauses selecting a single task, restricted to the caller's scope"""
    return [col(Task.id) == task_id, *resolve_task_scope(caller)]


def resolve_user_filters(filters: UserFilters) -> List[ColumnElement[bool]]:
    """WHERE clauses for the admin user listing"""
    clauses: List[ColumnElement[bool]] = []
    if filters.search:
        clauses.append(search_clause(filters.search, USER_SEARCH_FIELDS))
    if filters.role is not None:
        clauses.append(col(User.role) == filters.role)
    if filters.is_active is not None:
        clauses.append(col(User.is_active) == filters.is_active)
    return clauses


def task_order_by(sort: TaskSort = TaskSort()) -> list:
    """ORDER BY clauses for a task listing, with id as a stable tiebreaker"""
    column = col(TASK_SORT_FIELDS.get(sort.field, Task.created_at))
    if sort.order == "asc":
        return [column.asc(), col(Task.id).asc()]
    return [column.desc(), col(Task.id).desc()]
