"""Unit tests for reading compilation databases."""

import json
from pathlib import Path

import pytest

from v8_wrench.compdb import load_compilation_database


def _write_db(directory: Path, entries: list[dict[str, object]]) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "compile_commands.json").write_text(json.dumps(entries), encoding="utf-8")
    return directory


def test_reads_arguments_form(tmp_path: Path) -> None:
    build = _write_db(
        tmp_path / "out",
        [
            {
                "directory": str(tmp_path),
                "file": "src/heap.cc",
                "arguments": ["clang++", "-I", "include", "-Isrc", "-c", "src/heap.cc"],
            }
        ],
    )

    (command,) = load_compilation_database(build)

    assert command.file == tmp_path / "src" / "heap.cc"
    assert command.include_dirs == (tmp_path / "include", tmp_path / "src")


def test_reads_command_form(tmp_path: Path) -> None:
    build = _write_db(
        tmp_path,
        [
            {
                "directory": str(tmp_path),
                "file": str(tmp_path / "a.cc"),
                "command": "clang++ -isystem third_party -iquote gen -DFOO=1 -c a.cc",
            }
        ],
    )

    (command,) = load_compilation_database(build)

    assert command.file == tmp_path / "a.cc"
    assert command.include_dirs == (tmp_path / "third_party", tmp_path / "gen")


def test_accepts_database_file_path(tmp_path: Path) -> None:
    _write_db(tmp_path, [{"directory": str(tmp_path), "file": "a.cc", "command": "c++ a.cc"}])

    commands = load_compilation_database(tmp_path / "compile_commands.json")

    assert [c.file for c in commands] == [tmp_path / "a.cc"]


def test_missing_database(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="Compilation database not found"):
        load_compilation_database(tmp_path)
