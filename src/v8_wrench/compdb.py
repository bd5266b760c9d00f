"""Reading ``compile_commands.json`` compilation databases."""

import json
import shlex
from dataclasses import dataclass, field
from pathlib import Path

COMPILATION_DATABASE = "compile_commands.json"


@dataclass(frozen=True)
class CompileCommand:
    file: Path
    directory: Path
    include_dirs: tuple[Path, ...] = field(default=())


def _arguments(entry: dict) -> list[str]:
    if "arguments" in entry:
        return [str(argument) for argument in entry["arguments"]]
    return shlex.split(entry.get("command", ""))


def _include_dirs(arguments: list[str], directory: Path) -> tuple[Path, ...]:
    found: list[Path] = []
    pending = iter(arguments)
    for argument in pending:
        value: str | None = None
        if argument in ("-I", "-isystem", "-iquote"):
            value = next(pending, None)
        elif argument.startswith("-I"):
            value = argument[2:]
        elif argument.startswith("-isystem"):
            value = argument[len("-isystem") :]
        elif argument.startswith("-iquote"):
            value = argument[len("-iquote") :]
        if value:
            found.append(directory / value)
    return tuple(found)


def load_compilation_database(build_path: Path) -> list[CompileCommand]:
    """Load the compilation database in ``build_path`` (or the file itself)."""
    db_path = build_path if build_path.is_file() else build_path / COMPILATION_DATABASE
    try:
        entries = json.loads(db_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise FileNotFoundError(f"Compilation database not found: {db_path}") from None

    commands: list[CompileCommand] = []
    for entry in entries:
        directory = Path(entry.get("directory", db_path.parent))
        file_path = Path(entry["file"])
        if not file_path.is_absolute():
            file_path = directory / file_path
        commands.append(
            CompileCommand(
                file=file_path,
                directory=directory,
                include_dirs=_include_dirs(_arguments(entry), directory),
            )
        )
    return commands
