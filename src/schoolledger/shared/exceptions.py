from __future__ import annotations

import functools
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from schoolledger.shared.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


# ───────────────────────── Base & Domain Exceptions ─────────────────────────
class DomainError(Exception):
    """Base class for domain-level errors. Services raise these, never HTTPException."""
    code: str = "domain_error"
    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str
    details: Optional[Dict[str, Any]]

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message or self.__class__.__name__)
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.message = message or self.__class__.__name__
        self.details = details


class NotFoundError(DomainError):
    # generic; pass a specific code when useful (e.g. "student_not_found")
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(DomainError):
    code = "validation_error"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class InvalidPaymentError(ValidationError):
    code = "invalid_payment"


class InvalidExpenseError(ValidationError):
    code = "invalid_expense"


class InvalidStatusError(ValidationError):
    code = "invalid_status"


class InvalidAttendanceError(ValidationError):
    code = "invalid_attendance"


class OutstandingBalanceError(DomainError):
    code = "outstanding_balance"
    status_code = status.HTTP_409_CONFLICT


class UnsupportedFormatError(DomainError):
    code = "unsupported_format"
    status_code = status.HTTP_400_BAD_REQUEST


class StoreError(DomainError):
    code = "store_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


# ───────────────────────────── Helpers ──────────────────────────────────────

def wrap_store_errors(prefix: str) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Re-raise StoreError from the wrapped coroutine with ``"<prefix>: <cause>"``.
    Domain errors (NotFound, validation, ...) pass through unchanged.
    """
    def decorator(fn: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return await fn(*args, **kwargs)
            except StoreError as exc:
                logger.error("store_failure", operation=fn.__qualname__, error=exc.message)
                raise StoreError(f"{prefix}: {exc.message}", details=exc.details) from exc
        return wrapper
    return decorator


def _problem(code: str, message: str, details: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    body: Dict[str, Any] = {"code": code, "message": message}
    if details:
        body["details"] = details
    return body


# ─────────────────────────── Registration ───────────────────────────

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def handle_domain_error(req: Request, exc: DomainError):
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(_problem(exc.code, exc.message, exc.details)),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(req: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_problem("validation_error", "Request validation failed", {"errors": jsonable_encoder(exc.errors())}),
        )
