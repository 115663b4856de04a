from typing import Optional
from sqlalchemy import or_
from sqlmodel import Session, select
from errors import ConflictError, NotFoundError
from models import User, UserRole, utcnow
from schemas import ProfileUpdate, RegisterRequest
from utils.logger import logger
from utils.security import hash_password, verify_password

USER_NOT_FOUND = "User not found"


def get_user(session: Session, user_id: str) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise NotFoundError(USER_NOT_FOUND)
    return user


def get_user_by_email(session: Session, email: str) -> Optional[User]:
    return session.exec(select(User).where(User.email == email.strip().lower())).first()


def ensure_unique(
    session: Session,
    username: Optional[str] = None,
    email: Optional[str] = None,
    exclude_id: Optional[str] = None,
    message: str = "Username or email already in use",
) -> None:
    """
    Reject a username or email already held by another user

    Raises:
        ConflictError: If either value is taken
    """
    conditions = []
    if username is not None:
        conditions.append(User.username == username)
    if email is not None:
        conditions.append(User.email == email)
    if not conditions:
        return

    statement = select(User).where(or_(*conditions))
    if exclude_id is not None:
        statement = statement.where(User.id != exclude_id)
    if session.exec(statement).first() is not None:
        raise ConflictError(message)


def register_user(session: Session, data: RegisterRequest) -> User:
    """Create a regular account"""
    ensure_unique(
        session,
        username=data.username,
        email=data.email,
        message="User with this email or username already exists",
    )

    user = User(
        username=data.username,
        email=data.email,
        password_hash=hash_password(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
        role=UserRole.USER,
    )
    session.add(user)
    session.commit()
    session.refresh(user)

    logger.info("Registered user %s", user.id)
    return user


def authenticate(session: Session, email: str, password: str) -> Optional[User]:
    """
    Check credentials

    Returns:
        The user if the password matches, None otherwise
    """
    user = get_user_by_email(session, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Login failed for %s", email)
        return None
    return user


def update_profile(session: Session, user: User, data: ProfileUpdate) -> User:
    """Apply a self-service profile edit"""
    updates = data.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in updates:
        ensure_unique(session, email=updates["email"], exclude_id=user.id, message="Email already in use")

    for field, value in updates.items():
        setattr(user, field, value)
    user.updated_at = utcnow()

    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def seed_admin(session: Session, email: str, password: str, username: str = "admin") -> Optional[User]:
    """Create the bootstrap admin account unless its email or username is taken"""
    email = email.strip().lower()
    if get_user_by_email(session, email) is not None:
        return None
    try:
        ensure_unique(session, username=username)
    except ConflictError:
        logger.warning("Skipping admin seed: username %s is already registered", username)
        return None

    admin = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        first_name="Admin",
        last_name="User",
        role=UserRole.ADMIN,
    )
    session.add(admin)
    session.commit()
    session.refresh(admin)

    logger.info("Seeded admin account %s", admin.id)
    return admin
