"""Cancellable asyncio tasks with abort signals, timeouts and chain-wide control."""

from abortable.cleanup import CleanupRegistry
from abortable.config import TaskOptions, load_options
from abortable.context import TaskContext
from abortable.errors import (
    AbortError,
    ConfigurationError,
    ErrorCategory,
    TaskCancelledError,
    TaskError,
    TaskTimeoutError,
)
from abortable.resolve import (
    ResolvedMarker,
    is_resolved_marker,
    tag_resolved,
    unwrap_resolved_marker,
)
from abortable.signal import AbortController, AbortSignal
from abortable.task import Task
from abortable.timeout import TimeoutGuard

__version__ = "0.1.0"

__all__ = [
    # task
    "Task",
    "TaskContext",
    "TaskOptions",
    "load_options",
    # signal
    "AbortController",
    "AbortSignal",
    # internals exposed for composition
    "CleanupRegistry",
    "TimeoutGuard",
    "ResolvedMarker",
    "is_resolved_marker",
    "tag_resolved",
    "unwrap_resolved_marker",
    # errors
    "AbortError",
    "ConfigurationError",
    "ErrorCategory",
    "TaskCancelledError",
    "TaskError",
    "TaskTimeoutError",
]
