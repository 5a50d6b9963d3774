"""Application error types and classification of database errors."""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import Iterable

UNKNOWN_ERROR_CODE = "UNKNOWN"
DUPLICATE_ERROR_CODE = "DUPLICATE"
_UNIQUE_VIOLATION_SQLSTATE = "23505"


@dataclass(frozen=True)
class ErrorDetails:
    """One problem found while validating input; falsy when there is none."""

    message: str = ""
    field: str = ""

    def __bool__(self) -> bool:
        return bool(self.message)


class AppError(Exception):
    """Base of every error the application reports to a caller."""

    status: HTTPStatus = HTTPStatus.BAD_REQUEST

    def __init__(
        self,
        message: str,
        code: str = UNKNOWN_ERROR_CODE,
        details: Iterable[ErrorDetails] = (),
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = tuple(details)


class BadRequestError(AppError):
    """The request could not be carried out as given."""

    status = HTTPStatus.BAD_REQUEST


class NotFoundError(AppError):
    """The requested record does not exist."""

    status = HTTPStatus.NOT_FOUND


class ValidationError(AppError):
    """Input failed validation; ``details`` lists each failing field."""

    status = HTTPStatus.BAD_REQUEST

    def __init__(self, message: str, details: Iterable[ErrorDetails] = ()) -> None:
        super().__init__(message, details=details)


class UnauthorizedError(AppError):
    """The caller is not authenticated as a valid user."""

    status = HTTPStatus.UNAUTHORIZED


class ForbiddenError(AppError):
    """The caller lacks a permission the operation needs."""

    status = HTTPStatus.FORBIDDEN

    def __init__(self, message: str, permission: str = "") -> None:
        super().__init__(message)
        self.permission = permission


class InternalServerError(AppError):
    """Something failed on the server side."""

    status = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)


def _database_state(err: BaseException) -> str | None:
    for attr in ("pgcode", "sqlstate"):
        value = getattr(err, attr, None)
        if isinstance(value, str):
            return value
    return None


def get_error_code_from_error(err: BaseException | None) -> str:
    """Map a database error, or one it caused, to an application error code."""
    seen: set[int] = set()
    current = err
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        state = _database_state(current)
        if state is not None:
            if state == _UNIQUE_VIOLATION_SQLSTATE:
                return DUPLICATE_ERROR_CODE
            return UNKNOWN_ERROR_CODE
        current = current.__cause__
    return UNKNOWN_ERROR_CODE