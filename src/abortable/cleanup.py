"""Ordered, run-once teardown actions for a task."""

from __future__ import annotations

from typing import Callable


class CleanupRegistry:
    """Collects zero-argument teardown actions.

    ``run()`` invokes every registered action once, in registration order,
    and closes the registry. Actions added after that run immediately.
    """

    def __init__(self) -> None:
        self._actions: list[Callable[[], None]] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def add(self, action: Callable[[], None]) -> None:
        """Register a teardown action."""
        if self._closed:
            action()
            return
        self._actions.append(action)

    def run(self) -> None:
        """Drain and invoke all pending actions."""
        self._closed = True
        actions, self._actions = self._actions, []
        for action in actions:
            action()

    def __len__(self) -> int:
        return len(self._actions)
