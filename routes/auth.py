from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session
from database import get_session
from middleware.auth import verify_jwt_middleware
from models import User
from schemas import RegisterRequest, LoginRequest, ProfileUpdate, ApiResponse, dump_user
from services import users as user_service
from utils.jwt import create_jwt

router = APIRouter()


def _token_response(user: User, message: str) -> ApiResponse:
    return ApiResponse(
        success=True,
        data={
            "message": message,
            "token": create_jwt(user.id, user.role.value),
            "user": dump_user(user),
        }
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    session: Session = Depends(get_session)
) -> ApiResponse:
    """
    Register a new account

    Args:
        data: Registration form
        session: Database session

    Returns:
        ApiResponse with an access token and the new user
    """
    user = user_service.register_user(session, data)
    return _token_response(user, "User registered successfully")


@router.post("/login")
async def login(
    data: LoginRequest,
    session: Session = Depends(get_session)
) -> ApiResponse:
    """
    Exchange email and password for an access token

    Raises:
        HTTPException: 401 on bad credentials or a deactivated account
    """
    user = user_service.authenticate(session, data.email, data.password)

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is deactivated"
        )

    return _token_response(user, "Login successful")


@router.get("/profile")
async def get_profile(user: User = Depends(verify_jwt_middleware)) -> ApiResponse:
    """Return the authenticated user's profile"""
    return ApiResponse(success=True, data={"user": dump_user(user)})


@router.put("/profile")
async def update_profile(
    data: ProfileUpdate,
    user: User = Depends(verify_jwt_middleware),
    session: Session = Depends(get_session)
) -> ApiResponse:
    """Edit the authenticated user's names or email"""
    user = user_service.update_profile(session, user, data)

    return ApiResponse(
        success=True,
        data={"message": "Profile updated successfully", "user": dump_user(user)}
    )
