"""Shared test helpers."""

from __future__ import annotations

import asyncio


async def settle_loop(turns: int = 5) -> None:
    """Let pending callbacks and scheduled coroutines run."""
    for _ in range(turns):
        await asyncio.sleep(0)
