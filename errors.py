from fastapi import FastAPI, Request, status
from starlette.exceptions import HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional
from utils.logger import logger


class TodoAPIError(Exception):
    """Base class for errors raised by the service layer"""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(TodoAPIError):
    """Record is missing or outside the caller's scope"""

    status_code = status.HTTP_404_NOT_FOUND


class PolicyError(TodoAPIError):
    """Operation forbidden by an admin self-protection rule"""


class ConflictError(TodoAPIError):
    """Unique username or email already taken"""


class ValidationError(TodoAPIError):
    """Malformed input that reached the service layer"""


def error_response(status_code: int, message: str, errors: Optional[list] = None) -> JSONResponse:
    error = {"message": message}
    if errors:
        error["errors"] = errors
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "data": None, "error": error},
    )


async def todo_api_error_handler(request: Request, exc: TodoAPIError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    response = error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report field-level validation failures as 400"""
    errors = []
    for err in exc.errors():
        # Drop the "body"/"query"/"path" prefix from the location
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc) or None, "message": err.get("msg")})
    return error_response(status.HTTP_400_BAD_REQUEST, "Validation failed", errors)


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception(
        "Database error on %s %s (user %s)",
        request.method,
        request.url.path,
        getattr(request.state, "user_id", None),
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Database error")


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error on %s %s (user %s)",
        request.method,
        request.url.path,
        getattr(request.state, "user_id", None),
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """Convert every failure into the JSON error envelope"""
    app.add_exception_handler(TodoAPIError, todo_api_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
