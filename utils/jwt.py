import jwt
import os
from datetime import datetime, timedelta, timezone
from typing import Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

SECRET_KEY = os.getenv("JWT_SECRET")

if not SECRET_KEY:
    raise ValueError("JWT_SECRET environment variable is not set")

ALGORITHM = "HS256"
EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", str(7 * 24 * 60)))


def create_jwt(user_id: str, role: str, expires_minutes: Optional[int] = None) -> str:
    """
    Issue a signed access token

    Args:
        user_id: User ID stored as the token subject
        role: Role at issue time (informational; requests re-read it)
        expires_minutes: Override for the configured lifetime

    Returns:
        Encoded JWT string
    """
    now = datetime.now(timezone.utc)
    lifetime = EXPIRES_MINUTES if expires_minutes is None else expires_minutes
    payload = {
        "sub": user_id,
        "role": role,
        "iat": now,
        "exp": now + timedelta(minutes=lifetime),
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def verify_jwt(token: str) -> Optional[dict]:
    """
    Verify JWT token and return payload

    Args:
        token: JWT token string

    Returns:
        Decoded payload if valid, None otherwise
    """
    try:
        # PyJWT rejects expired tokens itself
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.InvalidTokenError:
        return None

