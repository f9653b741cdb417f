"""Cancellable asynchronous result container.

A ``Task`` wraps one ``asyncio.Future`` and adds cooperative cancellation:
callers can ``abort()``, ``reject()`` or ``cancel()`` it, an external
``AbortSignal`` or a timeout can abort it, and the executor observes all of
that through its ``TaskContext``.

Settling a task always aborts its signal too: fulfilment aborts with a
``ResolvedMarker`` carrying the value, rejection with the rejection reason.
The executor therefore answers "am I done, and how" through one channel.

Tasks derived with ``then`` / ``catch`` / ``finally_`` share the ``abort``
and ``reject`` of the task they came from, so holding the tail of a chain is
enough to stop it at its root.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Generator
from typing import Any, Callable, Generic, TypeVar

from abortable.cleanup import CleanupRegistry
from abortable.config import TaskOptions
from abortable.context import TaskContext
from abortable.errors import AbortError, TaskCancelledError, as_exception
from abortable.resolve import tag_resolved
from abortable.signal import AbortController, AbortListener
from abortable.timeout import TimeoutGuard

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

ResolveFn = Callable[[Any], None]
RejectFn = Callable[[Any], None]
Executor = Callable[[ResolveFn, RejectFn, TaskContext], Any]


def _bind_controls(child: Task[Any], parent: Task[Any]) -> Task[Any]:
    # Derived tasks never expose their own abort/reject; both lead to the root.
    child.reject = parent.reject  # type: ignore[method-assign]
    child.abort = parent.abort  # type: ignore[method-assign]
    return child


class Task(Generic[T]):
    """Awaitable result with abort, timeout and external-signal support.

    Construct with an executor ``executor(resolve, reject, context)`` and
    optional ``TaskOptions``, or with options only. Must be created inside
    a running event loop.
    """

    def __init__(
        self,
        executor: Executor | TaskOptions | None = None,
        options: TaskOptions | None = None,
    ) -> None:
        if isinstance(executor, TaskOptions):
            self._setup(None, executor)
        else:
            self._setup(executor, options or TaskOptions())

    def _setup(self, executor: Executor | None, options: TaskOptions) -> None:
        loop = asyncio.get_running_loop()
        self._future: asyncio.Future[T] = loop.create_future()
        self._controller = AbortController()
        self._cleanup = CleanupRegistry()
        self._runner: asyncio.Future[Any] | None = None
        self._adopted: asyncio.Future[Any] | None = None
        self._context = TaskContext(self._controller.signal, self._on_aborted)

        if not self._wire(options, loop):
            logger.debug("Task rejected on construction: %r", self._controller.signal.reason)

        if executor is None:
            return
        try:
            result = executor(self._resolve, self._reject, self._context)
        except Exception as exc:
            self._reject(exc)
            return
        if inspect.isawaitable(result):
            self._runner = asyncio.ensure_future(result)
            self._runner.add_done_callback(self._on_runner_done)

    def _wire(self, options: TaskOptions, loop: asyncio.AbstractEventLoop) -> bool:
        """Connect external signal, reject-on-abort and timeout.

        Returns False when the external signal was already aborted and the
        task was rejected straight away.
        """
        external = options.abort_signal
        if external is not None:
            if external.aborted:
                if options.reject_on_abort:
                    self._reject(external.reason)
                    return False
                self._controller.abort(external.reason)
            else:
                self._cleanup.add(external.add_listener(self._abort))

        if options.reject_on_abort:
            self._on_aborted(self._settle_rejected)

        if options.timeout is not None and options.timeout > 0:
            guard = TimeoutGuard(options.timeout, self._abort, loop=loop)
            self._cleanup.add(guard.cancel)
        return True

    def _on_aborted(self, listener: AbortListener) -> Callable[[], None]:
        unsubscribe = self._controller.signal.add_listener(listener)
        self._cleanup.add(unsubscribe)
        return unsubscribe

    def _resolve(self, value: Any = None) -> None:
        if inspect.isawaitable(value):
            self._adopt(value)
            return
        if not self._future.done():
            self._future.set_result(value)
        self._controller.abort(tag_resolved(value))
        self._cleanup.run()

    def _adopt(self, awaitable: Awaitable[Any]) -> None:
        """Settle with the outcome of *awaitable* once it completes."""
        if self._future.done() or self._adopted is not None:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return
        self._adopted = asyncio.ensure_future(awaitable)
        self._adopted.add_done_callback(self._on_adopted_done)

    def _on_adopted_done(self, adopted: asyncio.Future[Any]) -> None:
        if adopted.cancelled():
            self._reject(TaskCancelledError("Adopted awaitable was cancelled"))
        elif (exc := adopted.exception()) is not None:
            self._reject(exc)
        else:
            # The result may itself be awaitable; allow adopting it in turn.
            self._adopted = None
            self._resolve(adopted.result())

    def _reject(self, reason: Any = None) -> None:
        if reason is None:
            reason = AbortError()
        if not self._future.done():
            self._future.set_exception(as_exception(reason))
        self._controller.abort(reason)
        self._cleanup.run()

    def _settle_rejected(self, reason: Any) -> None:
        # Abort listener: settles only. Cleanup runs after the broadcast.
        if not self._future.done():
            self._future.set_exception(as_exception(reason))

    def _abort(self, reason: Any = None) -> None:
        self._controller.abort(reason)
        if self._future.done():
            self._cleanup.run()

    def _on_runner_done(self, runner: asyncio.Future[Any]) -> None:
        if runner.cancelled():
            self._reject(TaskCancelledError("Task executor was cancelled"))
        elif (exc := runner.exception()) is not None:
            self._reject(exc)

    # -- Control ---------------------------------------------------------

    def abort(self, reason: Any = None) -> None:
        """Abort the task with *reason*.

        The executor is notified through its context. The task is also
        rejected unless it was created with ``reject_on_abort=False``; use
        ``reject()`` to reject regardless of that option.
        """
        self._abort(reason)

    def reject(self, reason: Any = None) -> None:
        """Reject the task and abort its signal with the same reason."""
        self._reject(reason)

    def cancel(self) -> None:
        """Abort the task with TaskCancelledError."""
        self.abort(TaskCancelledError())

    # -- Observation -----------------------------------------------------

    def done(self) -> bool:
        """Whether the task has fulfilled or rejected."""
        return self._future.done()

    def __await__(self) -> Generator[Any, None, T]:
        # Cancelling an awaiter must not cancel the underlying future.
        return asyncio.shield(self._future).__await__()

    # -- Chaining --------------------------------------------------------

    def then(
        self,
        on_fulfilled: Callable[[T], Any] | None = None,
        on_rejected: Callable[[BaseException], Any] | None = None,
    ) -> Task[Any]:
        """Derive a task from this task's outcome."""

        async def follow(resolve: ResolveFn, _reject: RejectFn, _context: TaskContext) -> None:
            try:
                value = await self
            except Exception as exc:
                if on_rejected is None:
                    raise
                outcome = on_rejected(exc)
            else:
                outcome = on_fulfilled(value) if on_fulfilled is not None else value
            if inspect.isawaitable(outcome):
                outcome = await outcome
            resolve(outcome)

        return _bind_controls(Task(follow), self)

    def catch(self, on_rejected: Callable[[BaseException], Any] | None = None) -> Task[Any]:
        """Derive a task that recovers from this task's rejection."""
        return self.then(None, on_rejected)

    def finally_(self, on_finally: Callable[[], Any] | None = None) -> Task[T]:
        """Derive a task that runs *on_finally* whatever the outcome.

        The derived task settles like this one unless *on_finally* raises.
        """

        async def follow(resolve: ResolveFn, _reject: RejectFn, _context: TaskContext) -> None:
            try:
                value = await self
            finally:
                if on_finally is not None:
                    outcome = on_finally()
                    if inspect.isawaitable(outcome):
                        await outcome
            resolve(value)

        return _bind_controls(Task(follow), self)

    # -- Factories -------------------------------------------------------

    @classmethod
    def from_function(
        cls,
        fn: Callable[[TaskContext], R | Awaitable[R]],
        options: TaskOptions | None = None,
    ) -> Task[R]:
        """Create a task settled with the result of ``fn(context)``.

        *fn* may be sync or async; it runs on the next loop iteration.
        """

        async def run(resolve: ResolveFn, reject: RejectFn, context: TaskContext) -> None:
            try:
                result = fn(context)
                if inspect.isawaitable(result):
                    result = await result
            except Exception as exc:
                reject(exc)
            else:
                resolve(result)

        return cls(run, options)

    @classmethod
    def resolved(cls, value: Any = None) -> Task[Any]:
        """Create a task fulfilled with *value* (awaitables are adopted)."""
        return cls.from_function(lambda _context: value)

    @classmethod
    def rejected(cls, reason: Any = None) -> Task[Any]:
        """Create a task rejected with *reason*."""
        return cls(lambda _resolve, reject, _context: reject(reason))

    def __repr__(self) -> str:
        if not self._future.done():
            state = "pending"
        elif self._future.exception() is not None:
            state = f"rejected={self._future.exception()!r}"
        else:
            state = f"fulfilled={self._future.result()!r}"
        return f"Task({state}, aborted={self._controller.signal.aborted})"
