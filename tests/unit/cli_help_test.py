"""Tests that -h is accepted as a help flag on all CLI commands."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from v8_wrench.cli.app import app

runner = CliRunner()


@pytest.mark.parametrize(
    "args",
    [
        [],
        ["generate"],
        ["classes"],
    ],
    ids=["root", "generate", "classes"],
)
def test_short_help_flag(args: list[str]) -> None:
    result = runner.invoke(app, [*args, "-h"])
    assert result.exit_code == 0
    assert "Usage" in result.output


def test_generate_without_sources_fails() -> None:
    result = runner.invoke(app, ["generate"])

    assert result.exit_code == 1
    assert "No source files given" in result.output


def test_generate_with_missing_compilation_database(tmp_path: Path) -> None:
    result = runner.invoke(app, ["generate", "-p", str(tmp_path)])

    assert result.exit_code == 1
    assert "Compilation database not found" in result.output
