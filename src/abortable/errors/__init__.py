"""Abortable task error hierarchy."""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorCategory(StrEnum):
    """Category of error for classification and handling."""

    ABORTED = "aborted"
    CANCELLED = "cancelled"
    TIMEOUT = "timeout"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"


class TaskError(Exception):
    """Base error for all abortable task exceptions."""

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory = ErrorCategory.INTERNAL,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.category = category
        self.details: dict[str, Any] = details or {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r}, category={self.category!r})"


class AbortError(TaskError):
    """Task was aborted.

    Used as the default abort reason and to carry abort reasons that are
    not exceptions themselves (``reason`` keeps the original value).
    """

    def __init__(self, reason: Any = None) -> None:
        message = "Task aborted" if reason is None else f"Task aborted: {reason!r}"
        super().__init__(message, category=ErrorCategory.ABORTED)
        self.reason = reason


class TaskCancelledError(TaskError):
    """Task was cancelled by its caller."""

    def __init__(self, message: str = "Task cancelled") -> None:
        super().__init__(message, category=ErrorCategory.CANCELLED)


class TaskTimeoutError(TaskError):
    """Task did not settle before its timeout elapsed.

    ``timeout`` is in seconds, the unit of asyncio timers, not milliseconds.
    """

    def __init__(self, timeout: float) -> None:
        super().__init__(
            f"Task timed out after {timeout}s",
            category=ErrorCategory.TIMEOUT,
            details={"timeout": timeout},
        )
        self.timeout = timeout


class ConfigurationError(TaskError):
    """Invalid task options."""

    def __init__(self, message: str) -> None:
        super().__init__(message, category=ErrorCategory.CONFIGURATION)


def as_exception(reason: Any) -> BaseException:
    """Return *reason* if it can be raised, otherwise wrap it in AbortError."""
    if isinstance(reason, BaseException):
        return reason
    return AbortError(reason)
