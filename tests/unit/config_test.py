"""Unit tests for run configuration."""

from pathlib import Path

import pytest

from v8_wrench.config import WrenchConfig, load_config


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("WRENCH_OUTPUT_DIR", "WRENCH_EXTENSION", "WRENCH_SENTINEL", "WRENCH_NAMESPACE"):
        monkeypatch.delenv(var, raising=False)

    config = load_config()

    assert config.sentinel == "tq::Torque"
    assert config.reserved_namespace == "tq"
    assert config.field_template == "Field"
    assert config.output_dir == Path("src/objects")
    assert config.extension == "tq"
    assert config.include_dirs == []
    assert config.strict is False


def test_environment_is_read(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WRENCH_OUTPUT_DIR", "gen")
    monkeypatch.setenv("WRENCH_NAMESPACE", "meta")

    config = load_config()

    assert config.output_dir == Path("gen")
    assert config.reserved_namespace == "meta"


def test_overrides_win_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WRENCH_EXTENSION", "torque")

    config = load_config(extension="tq2", sentinel=None)

    assert config.extension == "tq2"
    assert config.sentinel == "tq::Torque"


def test_output_path_joins_stem_and_extension() -> None:
    config = WrenchConfig(output_dir=Path("out"), extension=".tq")

    assert config.output_path("heap_number") == Path("out") / "heap_number.tq"
