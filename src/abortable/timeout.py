"""Deferred abort after a fixed duration."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from abortable.errors import TaskTimeoutError

logger = logging.getLogger(__name__)


class TimeoutGuard:
    """Calls ``on_timeout(TaskTimeoutError(timeout))`` after *timeout* seconds.

    The pending call is dropped by ``cancel()``, which tasks register as a
    cleanup action so the guard never outlives settlement.
    """

    def __init__(
        self,
        timeout: float,
        on_timeout: Callable[[TaskTimeoutError], Any],
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.timeout = timeout
        self._on_timeout = on_timeout
        loop = loop or asyncio.get_running_loop()
        self._handle: asyncio.TimerHandle | None = loop.call_later(timeout, self._fire)

    @property
    def active(self) -> bool:
        """Whether the timeout is still scheduled."""
        return self._handle is not None

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        logger.debug("Timeout of %ss elapsed", self.timeout)
        self._on_timeout(TaskTimeoutError(self.timeout))
