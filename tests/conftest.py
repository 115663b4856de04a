import os

# Configure before the app modules read the environment
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session

from database import engine
from main import app
from models import Task, TaskPriority, User, UserRole
from utils.jwt import create_jwt
from utils.security import hash_password

DEFAULT_PASSWORD = "Passw0rd"


@pytest.fixture(autouse=True)
def reset_database():
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield


@pytest.fixture
def session():
    # Objects stay readable after the API deletes their rows
    with Session(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user(session):
    def _make_user(
        username: str,
        role: UserRole = UserRole.USER,
        is_active: bool = True,
        password: str = DEFAULT_PASSWORD,
        first_name: str = "Test",
        last_name: str = "User",
    ) -> User:
        user = User(
            username=username,
            email=f"{username}@example.com",
            password_hash=hash_password(password),
            role=role,
            is_active=is_active,
            first_name=first_name,
            last_name=last_name,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_task(session):
    def _make_task(
        owner: User,
        title: str = "Task",
        description: str = None,
        priority: TaskPriority = TaskPriority.MEDIUM,
        completed: bool = False,
        age_minutes: int = 0,
    ) -> Task:
        created = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc) - timedelta(minutes=age_minutes)
        task = Task(
            user_id=owner.id,
            created_by=owner.id,
            title=title,
            description=description,
            priority=priority,
            completed=completed,
            created_at=created,
            updated_at=created,
        )
        session.add(task)
        session.commit()
        session.refresh(task)
        return task

    return _make_task


@pytest.fixture
def alice(make_user):
    return make_user("alice", first_name="Alice", last_name="Anders")


@pytest.fixture
def bob(make_user):
    return make_user("bob", first_name="Bob", last_name="Brown")


@pytest.fixture
def admin(make_user):
    return make_user("root", role=UserRole.ADMIN, first_name="Ada", last_name="Admin")


def auth_headers(user: User) -> dict:
    token = create_jwt(user.id, user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    return auth_headers
