"""Execution context handed to a task's executor."""

from __future__ import annotations

from typing import Any, Callable

from abortable.resolve import is_resolved_marker, unwrap_resolved_marker
from abortable.signal import AbortListener, AbortSignal


class TaskContext:
    """Read-only view of a task's abort state.

    Listeners registered through ``on_aborted`` / ``on_resolved`` are
    detached automatically when the task settles.
    """

    def __init__(
        self,
        signal: AbortSignal,
        register: Callable[[AbortListener], Callable[[], None]],
    ) -> None:
        self._signal = signal
        self._register = register

    @property
    def abort_signal(self) -> AbortSignal:
        return self._signal

    @property
    def abort_reason(self) -> Any:
        return self._signal.reason

    @property
    def is_aborted(self) -> bool:
        return self._signal.aborted

    @property
    def is_resolved(self) -> bool:
        """True when the abort was caused by the task fulfilling."""
        return is_resolved_marker(self._signal.reason)

    @property
    def resolved(self) -> Any:
        """Fulfilled value, or None if the task has not fulfilled."""
        reason = self._signal.reason
        return unwrap_resolved_marker(reason) if is_resolved_marker(reason) else None

    def on_aborted(self, listener: AbortListener) -> Callable[[], None]:
        return self._register(listener)

    def on_resolved(self, listener: Callable[[Any], Any]) -> Callable[[], None]:
        """Call *listener* with the fulfilled value if the task fulfils."""

        def forward(reason: Any) -> None:
            if is_resolved_marker(reason):
                listener(unwrap_resolved_marker(reason))

        return self._register(forward)

    def raise_if_aborted(self) -> None:
        self._signal.raise_if_aborted()
