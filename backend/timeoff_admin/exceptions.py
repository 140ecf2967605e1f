from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None
    status_code: int


class AppError(Exception):
    """Base application exception."""

    show_to_user: bool = False

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundError(AppError):
    """A token or entity lookup missed."""

    show_to_user = True

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND)


class DomainConflictError(AppError):
    """An operation conflicts with the current state of the company's data.

    The message is safe to show to the user as is.
    """

    show_to_user = True

    def __init__(self, message: str, *, system_message: str | None = None) -> None:
        super().__init__(message, status_code=status.HTTP_409_CONFLICT)
        self.system_message = system_message or message


class ExternalDependencyError(AppError):
    """A collaborator outside the service (directory server, database) failed."""

    def __init__(self, message: str, *, show_to_user: bool = False) -> None:
        super().__init__(message, status_code=status.HTTP_502_BAD_GATEWAY)
        self.show_to_user = show_to_user


def extract_user_error_message(exc: BaseException, default: str = "Please contact customer service") -> str:
    """Return the part of an error that may be shown to the end user."""
    if isinstance(exc, AppError) and exc.show_to_user:
        return exc.message
    return default


def extract_system_error_message(exc: BaseException) -> str:
    """Return the full error text meant for logs."""
    if isinstance(exc, DomainConflictError):
        return exc.system_message
    if isinstance(exc, AppError):
        return exc.message
    return f"{type(exc).__name__}: {exc}"


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=type(exc).__name__,
            detail=exc.message,
            status_code=exc.status_code,
        ).model_dump(),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="ValidationError",
            detail=str(exc.errors()),
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        ).model_dump(),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
