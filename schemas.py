from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, Any, List
from datetime import datetime
import re
from models import TaskPriority, UserRole, as_utc

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")


def _normalize_email(value: str) -> str:
    return value.strip().lower()


def _strip_required(value: str, message: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(message)
    return value


class CamelModel(BaseModel):
    """Accepts and emits camelCase field names"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# Auth

class RegisterRequest(CamelModel):
    """Schema for registering a new account"""
    username: str = Field(..., min_length=3, max_length=30)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str) -> str:
        v = v.strip()
        if not USERNAME_PATTERN.match(v):
            raise ValueError("Username can only contain letters, numbers, and underscores")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        if not (re.search(r"[a-z]", v) and re.search(r"[A-Z]", v) and re.search(r"\d", v)):
            raise ValueError(
                "Password must contain at least one lowercase letter, one uppercase letter, and one number"
            )
        return v

    @field_validator("first_name", "last_name")
    @classmethod
    def check_names(cls, v: str) -> str:
        return _strip_required(v, "Name is required")


class LoginRequest(CamelModel):
    """Schema for logging in"""
    email: str = Field(..., max_length=320)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _normalize_email(v)


class ProfileUpdate(CamelModel):
    """Schema for a user editing their own profile"""
    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(None, min_length=1, max_length=50)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_email(v) if v is not None else v

    @field_validator("first_name", "last_name")
    @classmethod
    def check_names(cls, v: Optional[str]) -> Optional[str]:
        return _strip_required(v, "Name cannot be empty") if v is not None else v


class AdminUserUpdate(ProfileUpdate):
    """Schema for an admin updating any account (no password, no id)"""
    username: Optional[str] = Field(None, min_length=3, max_length=30)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None

    @field_validator("username")
    @classmethod
    def check_username(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not USERNAME_PATTERN.match(v):
            raise ValueError("Username can only contain letters, numbers, and underscores")
        return v


# Tasks

class TaskCreate(CamelModel):
    """Schema for creating a new task"""
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        return _strip_required(v, "Title is required")

    @field_validator("due_date")
    @classmethod
    def check_due_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)


class TaskUpdate(CamelModel):
    """Schema for updating a task; owner, creator and id are not accepted"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    priority: Optional[TaskPriority] = None
    completed: Optional[bool] = None
    due_date: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, v: Optional[str]) -> Optional[str]:
        return _strip_required(v, "Title cannot be empty") if v is not None else v

    @field_validator("due_date")
    @classmethod
    def check_due_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)


# Responses

class UserSummary(CamelModel):
    """Public fields embedded in task responses"""
    id: str
    username: str
    first_name: str
    last_name: str
    email: str


class UserResponse(CamelModel):
    """Schema for user response"""
    id: str
    username: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime


class TaskResponse(CamelModel):
    """Schema for task response"""
    id: int
    user_id: str
    created_by: Optional[str]
    title: str
    description: Optional[str]
    priority: TaskPriority
    completed: bool
    due_date: Optional[datetime]
    created_at: datetime
    updated_at: datetime
    owner: Optional[UserSummary] = None
    creator: Optional[UserSummary] = None


class TaskStats(CamelModel):
    """Per-user task counts"""
    total: int = 0
    completed: int = 0
    pending: int = 0


class UserTotals(CamelModel):
    total_users: int = 0
    active_users: int = 0
    admin_users: int = 0


class TaskTotals(CamelModel):
    total_tasks: int = 0
    completed_tasks: int = 0
    pending_tasks: int = 0


class DashboardStats(CamelModel):
    """Global counts for the admin dashboard"""
    users: UserTotals
    tasks: TaskTotals


class PageMeta(CamelModel):
    """Pagination metadata for list endpoints"""
    total: int
    total_pages: int
    current_page: int
    count: int


class ApiResponse(BaseModel):
    """Standard API response wrapper"""
    success: bool
    data: Optional[Any] = None
    error: Optional[dict] = None


def dump(model: BaseModel) -> dict:
    """Serialize a response schema with its camelCase names"""
    return model.model_dump(by_alias=True, mode="json")


def dump_task(task) -> dict:
    return dump(TaskResponse.model_validate(task))


def dump_user(user) -> dict:
    return dump(UserResponse.model_validate(user))


def dump_users(users) -> List[dict]:
    return [dump_user(user) for user in users]
