import sys
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from v8_wrench.analysis.cpp import TreeSitterCppForest
from v8_wrench.compdb import load_compilation_database
from v8_wrench.config import WrenchConfig, load_config
from v8_wrench.core.generate import run_generation
from v8_wrench.logging_config import setup_logging

console = Console()

SourcesArgument = Annotated[list[Path] | None, typer.Argument(help="C++ source files to scan.")]
BuildPathOption = Annotated[
    Path | None, typer.Option("--build-path", "-p", help="Build directory containing compile_commands.json.")
]
IncludeOption = Annotated[
    list[Path] | None, typer.Option("--include", "-I", help="Additional include directory (repeatable).")
]
StrictOption = Annotated[bool, typer.Option(help="Treat syntax errors in any translation unit as fatal.")]
SentinelOption = Annotated[str | None, typer.Option(help="Qualified name of the marker template (default tq::Torque).")]
NamespaceOption = Annotated[str | None, typer.Option(help="Namespace annotation types must live in (default tq).")]


def build_forest(sources: list[Path] | None, build_path: Path | None, config: WrenchConfig) -> TreeSitterCppForest:
    """Assemble the analysis forest from explicit sources and/or a compilation database."""
    files = list(sources or [])
    include_dirs = list(config.include_dirs)

    if build_path is not None:
        try:
            commands = load_compilation_database(build_path)
        except FileNotFoundError as exc:
            console.print(f"[red]{exc}[/red]")
            raise typer.Exit(1) from None
        wanted = {path.resolve() for path in files}
        for command in commands:
            if wanted and command.file.resolve() not in wanted:
                continue
            if not wanted:
                files.append(command.file)
            include_dirs.extend(d for d in command.include_dirs if d not in include_dirs)

    if not files:
        console.print("[red]No source files given.[/red] Pass sources or --build-path.")
        raise typer.Exit(1)

    return TreeSitterCppForest(files, include_dirs=include_dirs, strict=config.strict)


def generate(
    sources: SourcesArgument = None,
    build_path: BuildPathOption = None,
    include: IncludeOption = None,
    output_dir: Annotated[Path | None, typer.Option(help="Directory generated files are written to.")] = None,
    extension: Annotated[str | None, typer.Option(help="Extension of generated files (default tq).")] = None,
    sentinel: SentinelOption = None,
    namespace: NamespaceOption = None,
    strict: StrictOption = False,
    preview: Annotated[bool, typer.Option(help="Also print every generated declaration to stdout.")] = True,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Only log diagnostics, not the trace.")] = False,
) -> None:
    """Generate Torque class declarations for every torqueable class."""
    setup_logging(quiet=quiet)
    config = load_config(
        output_dir=output_dir,
        extension=extension,
        sentinel=sentinel,
        reserved_namespace=namespace,
        include_dirs=include,
        strict=strict,
    )
    forest = build_forest(sources, build_path, config)

    result = run_generation(forest, config, preview=sys.stdout if preview else None)

    console.print(f"[green]Generated[/green] {len(result.written)} file(s) in {config.output_dir}")
    if len(result.diagnostics):
        console.print(f"[yellow]{len(result.diagnostics)} diagnostic(s) reported[/yellow]")
    if result.exit_code:
        raise typer.Exit(result.exit_code)
