"""
collabhub/errors.py

Domain errors raised by the service layer and their HTTP translation.

Services never import FastAPI response types; they raise one of the errors
below and the handlers registered in main.py turn them into JSON bodies of the
form {"detail": "..."} with the matching status code.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

try:
    from collabhub.config import IS_DEV
except ModuleNotFoundError:
    from config import IS_DEV


class AppError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Malformed identifier, unknown sort key or missing required field."""

    status_code = 400


class PermissionDeniedError(AppError):
    """No membership, or the membership lacks the required permission."""

    status_code = 403


class NotFoundError(AppError):
    """A referenced entity does not exist."""

    status_code = 404


class ConflictError(AppError):
    """The write could not be applied consistently (duplicate or partial)."""

    status_code = 409


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if IS_DEV:
        print(f"[ERROR] {request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Report body/query validation failures as 400 like any other invalid input
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
    message = first.get("msg", "Invalid input")
    detail = f"Invalid input: {field}: {message}" if field else f"Invalid input: {message}"
    if IS_DEV:
        print(f"[ERROR] {request.method} {request.url.path} -> 400: {detail}")
    return JSONResponse(status_code=400, content={"detail": detail})


async def database_error_handler(request: Request, exc: PyMongoError) -> JSONResponse:
    # Log error but don't expose internal details
    print(f"[DB] Error on {request.method} {request.url.path}: {type(exc).__name__}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Database error"})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(PyMongoError, database_error_handler)
