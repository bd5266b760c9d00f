from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from v8_wrench.cli.generate import (
    BuildPathOption,
    IncludeOption,
    NamespaceOption,
    SentinelOption,
    SourcesArgument,
    StrictOption,
    build_forest,
)
from v8_wrench.config import load_config
from v8_wrench.core.emit import render_annotation
from v8_wrench.core.generate import run_generation
from v8_wrench.logging_config import setup_logging
from v8_wrench.models import ClassRecord

console = Console()


def _render_table(records: list[ClassRecord]) -> None:
    table = Table(show_lines=False)
    for header in ("class", "extends", "annotations", "fields", "source"):
        table.add_column(header)
    for record in records:
        table.add_row(
            record.name,
            record.base_class or "",
            " ".join(render_annotation(annotation) for annotation in record.annotations),
            str(len(record.fields)),
            record.source_location,
        )
    console.print(table)
    console.print(f"({len(records)} classes)")


def classes(
    sources: SourcesArgument = None,
    build_path: BuildPathOption = None,
    include: IncludeOption = None,
    sentinel: SentinelOption = None,
    namespace: NamespaceOption = None,
    strict: StrictOption = False,
    quiet: Annotated[
        bool, typer.Option("--quiet/--verbose", "-q/-v", help="Hide or show the per-class trace.")
    ] = True,
) -> None:
    """List torqueable classes without writing any files."""
    setup_logging(quiet=quiet)
    config = load_config(sentinel=sentinel, reserved_namespace=namespace, include_dirs=include, strict=strict)
    forest = build_forest(sources, build_path, config)

    result = run_generation(forest, config, write=False)
    _render_table(result.records)
    if result.exit_code:
        raise typer.Exit(result.exit_code)
