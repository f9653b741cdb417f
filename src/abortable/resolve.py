"""Tagging of abort reasons produced by a successful resolution.

A settled task always aborts its own signal. When the settlement was a
fulfilment, the abort reason is a ``ResolvedMarker`` holding the value, so
listeners can tell "finished" apart from "stopped for another reason".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class ResolvedMarker:
    """Abort reason used when a task fulfils."""

    value: Any


def tag_resolved(value: Any) -> ResolvedMarker:
    return ResolvedMarker(value)


def is_resolved_marker(reason: Any) -> bool:
    return isinstance(reason, ResolvedMarker)


def unwrap_resolved_marker(marker: ResolvedMarker) -> Any:
    """Return the fulfilled value carried by *marker*."""
    if not isinstance(marker, ResolvedMarker):
        raise TypeError(f"Expected ResolvedMarker, got {type(marker).__name__}")
    return marker.value
