from fastapi import Depends, Request, HTTPException, status
from sqlmodel import Session
from database import get_session
from models import User
from services.scope import Caller
from utils.jwt import verify_jwt
from utils.logger import logger


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def verify_jwt_middleware(request: Request, session: Session = Depends(get_session)) -> User:
    """
    Middleware to verify JWT token in Authorization header

    Args:
        request: FastAPI request object
        session: Database session used to load the caller

    Returns:
        The authenticated, active user

    Raises:
        HTTPException: If token is missing, invalid, or expired, or the
            account no longer exists or is deactivated
    """
    auth_header = request.headers.get("Authorization")

    if not auth_header:
        raise _unauthorized("Missing Authorization header")

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise _unauthorized("Invalid Authorization header format. Expected: Bearer <token>")

    payload = verify_jwt(parts[1])

    if not payload or not payload.get("sub"):
        raise _unauthorized("Invalid or expired token")

    user = session.get(User, payload["sub"])
    if user is None:
        raise _unauthorized("User not found")
    if not user.is_active:
        logger.warning("Rejected token for deactivated user %s", user.id)
        raise _unauthorized("Account is deactivated")

    # Picked up by error logging
    request.state.user_id = user.id
    return user


async def get_caller(user: User = Depends(verify_jwt_middleware)) -> Caller:
    """Identity passed into the service layer"""
    return Caller(user_id=user.id, role=user.role)


async def require_admin(caller: Caller = Depends(get_caller)) -> Caller:
    if not caller.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return caller
