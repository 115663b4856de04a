from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
import uuid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes and convert aware ones to UTC"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Largest value an integer primary key can hold
MAX_TASK_ID = 2**63 - 1


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class User(SQLModel, table=True):
    """Registered account; role decides task visibility"""
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, primary_key=True)
    username: str = Field(max_length=30, unique=True, index=True)
    email: str = Field(max_length=320, unique=True, index=True)
    password_hash: str
    role: UserRole = Field(default=UserRole.USER)
    is_active: bool = Field(default=True)
    first_name: str = Field(max_length=50)
    last_name: str = Field(max_length=50)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class Task(SQLModel, table=True):
    """Task model for todo items"""
    __tablename__ = "tasks"

    id: Optional[int] = Field(default=None, primary_key=True)
    # Owner never changes after creation
    user_id: str = Field(foreign_key="users.id", index=True)
    created_by: Optional[str] = Field(default=None, foreign_key="users.id")
    title: str = Field(max_length=200)
    description: Optional[str] = None
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    completed: bool = Field(default=False, index=True)
    due_date: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True), index=True)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

    owner: Optional[User] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[Task.user_id]", "lazy": "joined"}
    )
    creator: Optional[User] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[Task.created_by]", "lazy": "joined"}
    )
