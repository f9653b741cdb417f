"""Tests for the cleanup registry."""

from __future__ import annotations

from abortable.cleanup import CleanupRegistry


class TestCleanupRegistry:
    def test_runs_in_registration_order(self) -> None:
        calls: list[int] = []
        registry = CleanupRegistry()
        registry.add(lambda: calls.append(1))
        registry.add(lambda: calls.append(2))
        registry.add(lambda: calls.append(3))
        assert len(registry) == 3

        registry.run()
        assert calls == [1, 2, 3]
        assert len(registry) == 0
        assert registry.closed

    def test_runs_exactly_once(self) -> None:
        calls: list[str] = []
        registry = CleanupRegistry()
        registry.add(lambda: calls.append("x"))
        registry.run()
        registry.run()
        registry.run()
        assert calls == ["x"]

    def test_add_after_run_executes_immediately(self) -> None:
        calls: list[str] = []
        registry = CleanupRegistry()
        registry.run()
        registry.add(lambda: calls.append("late"))
        assert calls == ["late"]
        assert len(registry) == 0

    def test_not_closed_initially(self) -> None:
        assert not CleanupRegistry().closed
