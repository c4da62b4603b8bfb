"""Failure taxonomy and the Result type returned across the core/UI boundary.

Inside the engine failures travel as exceptions (WorkflowError subclasses
and the store's StoreError). Public operations are wrapped with
returns_result, which turns every such exception into a tagged
Result.fail so callers never see an uncaught exception.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from functools import wraps
from typing import Any, Callable, Generic, TypeVar

from reviewdesk_store.base import StaleWriteError, StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorKind(StrEnum):
    NOT_FOUND = "not_found"
    ACCESS_DENIED = "access_denied"
    CONFLICT = "conflict"
    STORE_FAILURE = "store_failure"
    VALIDATION = "validation"


class WorkflowError(Exception):
    kind: ErrorKind = ErrorKind.STORE_FAILURE

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(WorkflowError):
    kind = ErrorKind.NOT_FOUND


class AccessDeniedError(WorkflowError):
    kind = ErrorKind.ACCESS_DENIED


class ConflictError(WorkflowError):
    kind = ErrorKind.CONFLICT


class ValidationError(WorkflowError):
    kind = ErrorKind.VALIDATION


@dataclass
class Failure:
    kind: ErrorKind
    message: str
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


@dataclass
class Result(Generic[T]):
    """Either a success value or a tagged Failure, never both."""

    value: T | None = None
    failure: Failure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, value: T | None = None) -> Result[T]:
        return cls(value=value)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str, **details: Any) -> Result[T]:
        return cls(failure=Failure(kind=kind, message=message, details=details))


def to_failure(exc: Exception) -> Failure:
    """Map an engine or store exception onto the failure taxonomy."""
    if isinstance(exc, WorkflowError):
        return Failure(kind=exc.kind, message=exc.message, details=dict(exc.details))
    if isinstance(exc, StaleWriteError):
        return Failure(
            kind=ErrorKind.CONFLICT,
            message="Review already submitted, please reload.",
            details={"article_id": exc.article_id, "expected": exc.expected, "actual": exc.actual},
        )
    # The underlying message is attached for diagnostics.
    return Failure(kind=ErrorKind.STORE_FAILURE, message=str(exc), details={"error": type(exc).__name__})


def returns_result(func: Callable[..., T]) -> Callable[..., Result[T]]:
    """Run func and wrap its return value (or its failure) in a Result."""

    @wraps(func)
    def wrapper(*args, **kwargs) -> Result[T]:
        try:
            return Result.success(func(*args, **kwargs))
        except (WorkflowError, StoreError) as e:
            failure = to_failure(e)
            log = logger.error if failure.kind == ErrorKind.STORE_FAILURE else logger.warning
            log("%s failed (%s): %s", func.__name__, failure.kind, failure.message)
            return Result(failure=failure)

    return wrapper
