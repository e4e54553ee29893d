"""Request-scoped error taxonomy.

Every failure is scoped to the request that hit it; nothing here is fatal to the
process. Handlers raise these, `install_error_handlers` turns them into
`{"detail": ...}` JSON with the matching status.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class ApiError(Exception):
    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class MalformedRequest(ApiError):
    status_code = 400
    default_message = "Bad Request"


class Unauthorized(ApiError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(ApiError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not Found"


class ServerFailure(ApiError):
    status_code = 500
    default_message = "Internal Server Error"


class StoreError(ServerFailure):
    """A store call failed or timed out. Not retried."""


class HashingError(ServerFailure):
    """The password hashing primitive rejected its input or the stored hash."""


class SigningError(ServerFailure):
    """A token could not be signed."""


class CreationError(ServerFailure):
    """A new row could not be inserted (includes uniqueness violations)."""


def _api_error_response(request: Request, exc: ApiError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


def _validation_error_response(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": "Bad Request"})


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, _api_error_response)
    # Bad path ids and undecodable bodies are the caller's fault, not a 422.
    app.add_exception_handler(RequestValidationError, _validation_error_response)
