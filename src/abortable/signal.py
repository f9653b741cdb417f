"""Abort signal and controller.

An ``AbortController`` owns one ``AbortSignal``. The signal holds a single,
first-write-wins abort reason and notifies its listeners exactly once when
the controller aborts it. Listeners registered after the abort are called
immediately, since the aborted state is final.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Any, Callable

from abortable.errors import AbortError, TaskTimeoutError, as_exception

logger = logging.getLogger(__name__)

AbortListener = Callable[[Any], Any]


def _noop() -> None:
    return None


class AbortSignal:
    """Observable abort state.

    Only the owning ``AbortController`` can abort a signal; everyone else
    can inspect it, wait for it, or subscribe to it.
    """

    def __init__(self) -> None:
        self._aborted = False
        self._reason: Any = None
        self._listeners: list[AbortListener] = []

    @property
    def aborted(self) -> bool:
        return self._aborted

    @property
    def reason(self) -> Any:
        """Abort reason, or None while not aborted."""
        return self._reason

    def add_listener(self, listener: AbortListener) -> Callable[[], None]:
        """Call *listener* with the abort reason once the signal aborts.

        Returns a function that detaches the listener. If the signal is
        already aborted the listener runs right away and nothing is kept.
        """
        if self._aborted:
            self._notify(listener)
            return _noop
        self._listeners.append(listener)

        def unsubscribe() -> None:
            self.remove_listener(listener)

        return unsubscribe

    def remove_listener(self, listener: AbortListener) -> None:
        """Detach *listener* (first matching registration only)."""
        for i, registered in enumerate(self._listeners):
            if registered == listener:
                del self._listeners[i]
                return

    def raise_if_aborted(self) -> None:
        """Raise the abort reason if the signal is aborted."""
        if self._aborted:
            raise as_exception(self._reason)

    async def wait(self) -> Any:
        """Wait until the signal aborts and return the reason."""
        if self._aborted:
            return self._reason
        waiter = asyncio.get_running_loop().create_future()

        def wake(reason: Any) -> None:
            if not waiter.done():
                waiter.set_result(reason)

        unsubscribe = self.add_listener(wake)
        try:
            return await waiter
        finally:
            unsubscribe()

    def _abort(self, reason: Any) -> bool:
        if self._aborted:
            return False
        self._aborted = True
        self._reason = reason
        listeners = list(self._listeners)
        logger.debug("Signal aborted (%d listeners): %r", len(listeners), reason)
        for listener in listeners:
            # Skip listeners detached by an earlier listener in this dispatch.
            if not any(registered is listener for registered in self._listeners):
                continue
            self._notify(listener)
        self._listeners.clear()
        return True

    def _notify(self, listener: AbortListener) -> None:
        try:
            listener(self._reason)
        except Exception as exc:
            logger.warning("Abort listener %r failed: %s", listener, exc, exc_info=True)

    @classmethod
    def create_aborted(cls, reason: Any = None) -> AbortSignal:
        """Return a signal that is already aborted with *reason*."""
        controller = AbortController()
        controller.abort(reason)
        return controller.signal

    @classmethod
    def timeout(cls, seconds: float) -> AbortSignal:
        """Return a signal that aborts with TaskTimeoutError after *seconds*.

        Must be called from a running event loop.
        """
        controller = AbortController()
        asyncio.get_running_loop().call_later(
            seconds, controller.abort, TaskTimeoutError(seconds),
        )
        return controller.signal

    @classmethod
    def any(cls, signals: Iterable[AbortSignal]) -> AbortSignal:
        """Return a signal that aborts when the first of *signals* aborts."""
        controller = AbortController()
        sources = list(signals)
        for source in sources:
            if source.aborted:
                controller.abort(source.reason)
                return controller.signal

        unsubscribes: list[Callable[[], None]] = []

        def detach(_reason: Any) -> None:
            for unsubscribe in unsubscribes:
                unsubscribe()
            unsubscribes.clear()

        controller.signal.add_listener(detach)
        for source in sources:
            unsubscribes.append(source.add_listener(controller.abort))
        return controller.signal

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return (
            f"AbortSignal(aborted={self._aborted}, reason={self._reason!r}, "
            f"listeners={len(self._listeners)})"
        )


class AbortController:
    """Creates and aborts an ``AbortSignal``."""

    def __init__(self) -> None:
        self._signal = AbortSignal()

    @property
    def signal(self) -> AbortSignal:
        return self._signal

    def abort(self, reason: Any = None) -> None:
        """Abort the signal. Later calls are ignored.

        A missing reason is replaced by a fresh ``AbortError``.
        """
        if self._signal.aborted:
            return
        self._signal._abort(AbortError() if reason is None else reason)
