from fastapi import APIRouter, Depends, Path, Query, status
from sqlmodel import Session
from typing import Annotated, Literal, Optional
from database import get_session
from middleware.auth import get_caller
from models import MAX_TASK_ID, TaskPriority
from schemas import TaskCreate, TaskUpdate, ApiResponse, dump_task
from services import tasks as task_service
from services.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT
from services.scope import Caller, TaskFilters, TaskSort

router = APIRouter()

SortField = Literal["createdAt", "updatedAt", "dueDate", "title", "priority", "completed"]
TaskId = Annotated[int, Path(ge=1, le=MAX_TASK_ID)]


@router.get("/tasks")
async def list_tasks(
    caller: Caller = Depends(get_caller),
    session: Session = Depends(get_session),
    completed: Optional[bool] = None,
    priority: Optional[TaskPriority] = None,
    search: Optional[str] = Query(None, max_length=100),
    sort_by: SortField = Query("createdAt", alias="sortBy"),
    order: Literal["asc", "desc"] = "desc",
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
) -> ApiResponse:
    """
    List tasks visible to the caller

    Regular users only ever see their own tasks; admins see every task.

    Args:
        caller: Authenticated identity
        session: Database session
        completed: Filter by completion state
        priority: Filter by priority
        search: Case-insensitive match on title or description
        sort_by: Field to sort on
        order: Sort direction
        page: 1-based page number
        limit: Page size

    Returns:
        ApiResponse with tasks and pagination metadata
    """
    result = task_service.list_tasks(
        session,
        caller,
        filters=TaskFilters(completed=completed, priority=priority, search=search),
        sort=TaskSort(field=sort_by, order=order),
        page=page,
        limit=limit,
    )

    return ApiResponse(
        success=True,
        data={
            "tasks": [dump_task(task) for task in result.items],
            "isAdmin": caller.is_admin,
            **result.meta(),
        }
    )


@router.post("/tasks", status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(get_session)
) -> ApiResponse:
    """
    Create a new task owned by the caller

    Args:
        task_data: Task creation data
        caller: Authenticated identity
        session: Database session

    Returns:
        ApiResponse with created task
    """
    task = task_service.create_task(session, caller, task_data)

    return ApiResponse(
        success=True,
        data={"message": "Task created successfully", "task": dump_task(task)}
    )


@router.get("/tasks/{task_id}")
async def get_task(
    task_id: TaskId,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(get_session)
) -> ApiResponse:
    """
    Get task details

    Args:
        task_id: Task ID
        caller: Authenticated identity
        session: Database session

    Returns:
        ApiResponse with task details
    """
    task = task_service.get_task(session, caller, task_id)

    return ApiResponse(success=True, data={"task": dump_task(task)})


@router.put("/tasks/{task_id}")
async def update_task(
    task_id: TaskId,
    task_data: TaskUpdate,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(get_session)
) -> ApiResponse:
    """
    Update a task

    Args:
        task_id: Task ID
        task_data: Task update data
        caller: Authenticated identity
        session: Database session

    Returns:
        ApiResponse with updated task
    """
    task = task_service.update_task(session, caller, task_id, task_data)

    return ApiResponse(
        success=True,
        data={"message": "Task updated successfully", "task": dump_task(task)}
    )


@router.delete("/tasks/{task_id}")
async def delete_task(
    task_id: TaskId,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(get_session)
) -> ApiResponse:
    """Delete a task"""
    task_service.delete_task(session, caller, task_id)

    return ApiResponse(
        success=True,
        data={"message": "Task deleted successfully"}
    )


@router.patch("/tasks/{task_id}/toggle")
async def toggle_task_completion(
    task_id: TaskId,
    caller: Caller = Depends(get_caller),
    session: Session = Depends(get_session)
) -> ApiResponse:
    """Toggle task completion status"""
    task = task_service.toggle_task(session, caller, task_id)
    state = "completed" if task.completed else "incomplete"

    return ApiResponse(
        success=True,
        data={"message": f"Task marked as {state}", "task": dump_task(task)}
    )
