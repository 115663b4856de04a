from fastapi import APIRouter, Depends, Query
from sqlmodel import Session
from typing import Optional
from database import get_session
from middleware.auth import require_admin
from models import TaskPriority, UserRole
from schemas import AdminUserUpdate, TaskUpdate, ApiResponse, dump, dump_task, dump_user, dump_users
from services import admin as admin_service
from services.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT
from services.scope import Caller, TaskFilters, UserFilters

# Every route requires an authenticated admin
router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/dashboard")
async def get_dashboard_stats(session: Session = Depends(get_session)) -> ApiResponse:
    """Global user and task counts"""
    stats = admin_service.dashboard_stats(session)
    return ApiResponse(success=True, data=dump(stats))


@router.get("/users")
async def list_users(
    session: Session = Depends(get_session),
    search: Optional[str] = Query(None, max_length=100),
    role: Optional[UserRole] = None,
    is_active: Optional[bool] = Query(None, alias="isActive"),
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
) -> ApiResponse:
    """
    List all users with pagination and filtering

    Args:
        session: Database session
        search: Match on username, email, first or last name
        role: Filter by role
        is_active: Filter by active flag
        page: 1-based page number
        limit: Page size

    Returns:
        ApiResponse with users and pagination metadata
    """
    result = admin_service.list_users(
        session,
        UserFilters(search=search, role=role, is_active=is_active),
        page=page,
        limit=limit,
    )

    return ApiResponse(
        success=True,
        data={"users": dump_users(result.items), **result.meta()}
    )


@router.get("/users/{user_id}")
async def get_user(user_id: str, session: Session = Depends(get_session)) -> ApiResponse:
    """Get a user with their task statistics"""
    user, stats = admin_service.get_user_with_stats(session, user_id)

    return ApiResponse(
        success=True,
        data={"user": dump_user(user), "taskStats": dump(stats)}
    )


@router.put("/users/{user_id}")
async def update_user(
    user_id: str,
    data: AdminUserUpdate,
    admin: Caller = Depends(require_admin),
    session: Session = Depends(get_session)
) -> ApiResponse:
    """Update user information; password changes are ignored"""
    user = admin_service.update_user(session, admin, user_id, data)

    return ApiResponse(
        success=True,
        data={"message": "User updated successfully", "user": dump_user(user)}
    )


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: str,
    admin: Caller = Depends(require_admin),
    session: Session = Depends(get_session)
) -> ApiResponse:
    """Delete a user and their tasks"""
    admin_service.delete_user(session, admin, user_id)

    return ApiResponse(
        success=True,
        data={"message": "User and associated tasks deleted successfully"}
    )


@router.patch("/users/{user_id}/toggle-status")
async def toggle_user_status(
    user_id: str,
    admin: Caller = Depends(require_admin),
    session: Session = Depends(get_session)
) -> ApiResponse:
    """Toggle a user between active and inactive"""
    user = admin_service.toggle_user_status(session, admin, user_id)
    state = "activated" if user.is_active else "deactivated"

    return ApiResponse(
        success=True,
        data={"message": f"User {state} successfully", "user": dump_user(user)}
    )


@router.get("/tasks")
async def list_all_tasks(
    admin: Caller = Depends(require_admin),
    session: Session = Depends(get_session),
    completed: Optional[bool] = None,
    priority: Optional[TaskPriority] = None,
    user_id: Optional[str] = Query(None, alias="userId"),
    search: Optional[str] = Query(None, max_length=100),
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
) -> ApiResponse:
    """
    List every task with pagination and filtering

    Args:
        admin: Authenticated admin
        session: Database session
        completed: Filter by completion state
        priority: Filter by priority
        user_id: Filter by owner
        search: Match on title or description
        page: 1-based page number
        limit: Page size

    Returns:
        ApiResponse with tasks and pagination metadata
    """
    result = admin_service.list_all_tasks(
        session,
        admin,
        TaskFilters(completed=completed, priority=priority, user_id=user_id, search=search),
        page=page,
        limit=limit,
    )

    return ApiResponse(
        success=True,
        data={"tasks": [dump_task(task) for task in result.items], **result.meta()}
    )


@router.put("/tasks/{task_id}")
async def update_any_task(
    task_id: str,
    task_data: TaskUpdate,
    admin: Caller = Depends(require_admin),
    session: Session = Depends(get_session)
) -> ApiResponse:
    """Update any task; id, owner and creator cannot be changed"""
    task = admin_service.update_any_task(session, admin, task_id, task_data)

    return ApiResponse(
        success=True,
        data={"message": "Task updated successfully", "task": dump_task(task)}
    )


@router.delete("/tasks/{task_id}")
async def delete_any_task(
    task_id: str,
    admin: Caller = Depends(require_admin),
    session: Session = Depends(get_session)
) -> ApiResponse:
    """Delete any task"""
    admin_service.delete_any_task(session, admin, task_id)

    return ApiResponse(
        success=True,
        data={"message": "Task deleted successfully"}
    )
