"""Tests for task options and option loading."""

from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest

from abortable import AbortController, TaskOptions
from abortable.config import ENV_REJECT_ON_ABORT, ENV_TIMEOUT, load_options, load_yaml_options
from abortable.errors import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(ENV_TIMEOUT, raising=False)
    monkeypatch.delenv(ENV_REJECT_ON_ABORT, raising=False)


@pytest.fixture
def options_file(tmp_path: Path) -> Path:
    path = tmp_path / "abortable.yaml"
    path.write_text("timeout: 2.5\nreject_on_abort: false\n", encoding="utf-8")
    return path


class TestTaskOptions:
    def test_defaults(self) -> None:
        options = TaskOptions()
        assert options.abort_signal is None
        assert options.reject_on_abort is True
        assert options.timeout is None

    def test_is_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            TaskOptions().timeout = 1.0  # type: ignore[misc]

    @pytest.mark.parametrize("timeout", ["5", True, [1]])
    def test_rejects_non_numeric_timeout(self, timeout: object) -> None:
        with pytest.raises(ConfigurationError):
            TaskOptions(timeout=timeout)  # type: ignore[arg-type]

    def test_rejects_foreign_signal(self) -> None:
        with pytest.raises(ConfigurationError):
            TaskOptions(abort_signal=object())  # type: ignore[arg-type]

    def test_accepts_int_timeout(self) -> None:
        assert TaskOptions(timeout=3).timeout == 3


class TestLoadYamlOptions:
    def test_missing_file(self, tmp_path: Path) -> None:
        assert load_yaml_options(tmp_path / "missing.yaml") == {}

    def test_non_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")
        assert load_yaml_options(path) == {}

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("timeout: [1, 2\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_yaml_options(path)


class TestLoadOptions:
    def test_defaults(self) -> None:
        assert load_options() == TaskOptions()

    def test_from_file(self, options_file: Path) -> None:
        options = load_options(options_file)
        assert options.timeout == 2.5
        assert options.reject_on_abort is False

    @pytest.mark.parametrize(("raw", "expected"), [('"false"', False), ('"yes"', True), ("off", False)])
    def test_file_boolean_strings(self, tmp_path: Path, raw: str, expected: bool) -> None:
        path = tmp_path / "abortable.yaml"
        path.write_text(f"reject_on_abort: {raw}\n", encoding="utf-8")
        assert load_options(path).reject_on_abort is expected

    @pytest.mark.parametrize("raw", ["3", '"maybe"', "[true]"])
    def test_file_invalid_boolean(self, tmp_path: Path, raw: str) -> None:
        path = tmp_path / "abortable.yaml"
        path.write_text(f"reject_on_abort: {raw}\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_options(path)

    def test_env_overrides_file(
        self, options_file: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv(ENV_TIMEOUT, "0.5")
        monkeypatch.setenv(ENV_REJECT_ON_ABORT, "yes")
        options = load_options(options_file)
        assert options.timeout == 0.5
        assert options.reject_on_abort is True

    def test_overrides_beat_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ENV_TIMEOUT, "0.5")
        assert load_options(timeout=9.0).timeout == 9.0

    def test_empty_env_timeout_disables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ENV_TIMEOUT, "")
        assert load_options().timeout is None

    def test_invalid_env_bool(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ENV_REJECT_ON_ABORT, "maybe")
        with pytest.raises(ConfigurationError, match=ENV_REJECT_ON_ABORT):
            load_options()

    def test_invalid_env_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ENV_TIMEOUT, "soon")
        with pytest.raises(ConfigurationError, match=ENV_TIMEOUT):
            load_options()

    def test_unknown_override(self) -> None:
        with pytest.raises(ConfigurationError, match="retries"):
            load_options(retries=3)

    def test_abort_signal_passed_through(self) -> None:
        controller = AbortController()
        options = load_options(abort_signal=controller.signal)
        assert options.abort_signal is controller.signal
