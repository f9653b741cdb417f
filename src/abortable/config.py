"""Task options and option loading."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from abortable.errors import ConfigurationError
from abortable.signal import AbortSignal

ENV_TIMEOUT = "ABORTABLE_TIMEOUT"
ENV_REJECT_ON_ABORT = "ABORTABLE_REJECT_ON_ABORT"

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass(frozen=True, slots=True)
class TaskOptions:
    """Per-task configuration, immutable after construction.

    Attributes:
        abort_signal: External signal whose abort also aborts the task.
        reject_on_abort: Reject the task with the abort reason on any abort.
        timeout: Seconds after which the task aborts with TaskTimeoutError.
            Zero or negative values disable the timeout.
    """

    abort_signal: AbortSignal | None = None
    reject_on_abort: bool = True
    timeout: float | None = None

    def __post_init__(self) -> None:
        if self.abort_signal is not None and not isinstance(self.abort_signal, AbortSignal):
            raise ConfigurationError(
                f"abort_signal must be an AbortSignal, got {type(self.abort_signal).__name__}"
            )
        if self.timeout is not None and (
            isinstance(self.timeout, bool) or not isinstance(self.timeout, (int, float))
        ):
            raise ConfigurationError(f"timeout must be a number, got {self.timeout!r}")


def load_yaml_options(path: Path) -> dict[str, Any]:
    """Load option values from a YAML file, returning empty dict if not found."""
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid options file {path}: {exc}") from exc
    return data if isinstance(data, dict) else {}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _coerce_bool(name: str, raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        return _parse_bool(name, raw)
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _parse_timeout(name: str, raw: Any) -> float | None:
    if raw is None or raw == "":
        return None
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def load_options(
    path: str | Path | None = None,
    *,
    abort_signal: AbortSignal | None = None,
    **overrides: Any,
) -> TaskOptions:
    """Build TaskOptions from all sources.

    Priority: overrides > env vars (``.env`` included) > YAML file > defaults
    """
    values: dict[str, Any] = {}

    # 1. YAML file
    if path is not None:
        file_values = load_yaml_options(Path(path))
        if "reject_on_abort" in file_values:
            values["reject_on_abort"] = _coerce_bool(
                "reject_on_abort", file_values["reject_on_abort"],
            )
        if "timeout" in file_values:
            values["timeout"] = _parse_timeout("timeout", file_values["timeout"])

    # 2. Environment
    load_dotenv()
    if (raw := os.environ.get(ENV_REJECT_ON_ABORT)) is not None:
        values["reject_on_abort"] = _parse_bool(ENV_REJECT_ON_ABORT, raw)
    if (raw := os.environ.get(ENV_TIMEOUT)) is not None:
        values["timeout"] = _parse_timeout(ENV_TIMEOUT, raw)

    # 3. Explicit overrides
    unknown = set(overrides) - {"reject_on_abort", "timeout"}
    if unknown:
        raise ConfigurationError(f"Unknown task options: {', '.join(sorted(unknown))}")
    values.update(overrides)

    return TaskOptions(abort_signal=abort_signal, **values)
