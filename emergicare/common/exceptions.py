# emergicare/common/exceptions.py
"""Domain errors raised by services and their HTTP rendering."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from emergicare.common.utils.global_messages import GlobalMessages


class DomainError(Exception):
    """Base class for errors a service raises to abort an operation."""

    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthorizationError(DomainError):
    """Caller is not permitted to perform the operation on the row."""

    code = "forbidden"


class NotFound(DomainError):
    """Row does not exist (or is not visible to the caller)."""

    code = "not_found"


class ValidationError(DomainError):
    """Malformed input, such as empty symptoms or an unknown enum value."""

    code = "validation_error"


class ConflictError(DomainError):
    """State changed concurrently, e.g. a lost claim race."""

    code = "conflict"


class InvalidTransition(DomainError):
    """Requested transition is not reachable from the current status."""

    code = "invalid_transition"


class ProfileRequired(DomainError):
    """Caller is authenticated but has not completed signup."""

    code = "profile_required"


def _error_response(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": message, "code": code})


async def _hidden_handler(request: Request, exc: DomainError) -> JSONResponse:
    # AuthorizationError and NotFound look the same so other users' rows stay opaque
    return _error_response(status.HTTP_404_NOT_FOUND, GlobalMessages.NOT_FOUND, NotFound.code)


async def _validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, exc.message, exc.code)


async def _conflict_handler(request: Request, exc: DomainError) -> JSONResponse:
    return _error_response(status.HTTP_409_CONFLICT, exc.message, exc.code)


async def _profile_required_handler(request: Request, exc: ProfileRequired) -> JSONResponse:
    return _error_response(status.HTTP_403_FORBIDDEN, exc.message, exc.code)


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain errors to JSON responses."""
    app.add_exception_handler(AuthorizationError, _hidden_handler)
    app.add_exception_handler(NotFound, _hidden_handler)
    app.add_exception_handler(ValidationError, _validation_handler)
    app.add_exception_handler(ConflictError, _conflict_handler)
    app.add_exception_handler(InvalidTransition, _conflict_handler)
    app.add_exception_handler(ProfileRequired, _profile_required_handler)
