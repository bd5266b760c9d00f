import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from v8_wrench.config import WrenchConfig
from v8_wrench.core.annotations import extract_annotations
from v8_wrench.core.emit import render_class, render_file
from v8_wrench.core.fields import reflect_base_class, reflect_fields
from v8_wrench.core.naming import snake_case
from v8_wrench.core.ports.analysis import AstForest
from v8_wrench.core.query import FriendMarkerRule, MarkerRule, collect_classes
from v8_wrench.diagnostics import Diagnostics
from v8_wrench.errors import AnalysisFailure, MultipleInheritanceError, OutputError
from v8_wrench.models import ClassRecord

logger = logging.getLogger(__name__)

_STARLINE = "*" * 40


@dataclass
class GenerationResult:
    records: list[ClassRecord]
    diagnostics: Diagnostics
    written: list[Path] = field(default_factory=list)
    exit_code: int = 0


def process_classes(
    forest: AstForest,
    records: list[ClassRecord],
    rule: MarkerRule,
    config: WrenchConfig,
    diagnostics: Diagnostics,
) -> list[ClassRecord]:
    """Populate annotations, base class, and fields of every collected record.

    Every record is processed even after a multiple inheritance error so that
    all of them are reported; the caller decides whether to continue.
    """
    logger.info(_STARLINE)
    logger.info("Processing torqueable classes...")
    for record in records:
        declaration = record.declaration
        logger.info("* Class '%s':", record.name)

        marker = rule.marker(forest, declaration)
        if marker is not None:
            record.annotations = extract_annotations(
                marker, diagnostics, config.reserved_namespace, location=record.source_location
            )

        try:
            record.base_class = reflect_base_class(
                forest.bases(declaration), record.name, location=record.source_location
            )
        except MultipleInheritanceError as exc:
            diagnostics.report(exc)

        record.fields = reflect_fields(
            forest.members(declaration), diagnostics, config.field_template, location=record.source_location
        )
    return records


def generate_classes(
    records: list[ClassRecord],
    config: WrenchConfig,
    diagnostics: Diagnostics,
    preview: TextIO | None = None,
) -> list[Path]:
    """Write one declaration file per record; a file that cannot be written is reported and skipped."""
    logger.info(_STARLINE)
    logger.info("Generating Torque classes...")
    written: list[Path] = []
    claimed: dict[Path, str] = {}
    try:
        config.output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.warning("Cannot create output directory %s: %s", config.output_dir, exc)

    for record in records:
        output_path = config.output_path(snake_case(record.name))
        logger.info("* Class '%s' (%s)", record.name, output_path)
        if output_path in claimed:
            diagnostics.report(
                OutputError(
                    f"Output file '{output_path}' of class '{record.name}' "
                    f"already written for class '{claimed[output_path]}'",
                    location=record.source_location,
                )
            )
            continue
        claimed[output_path] = record.name
        if preview is not None:
            preview.write(render_class(record))

        try:
            output_path.write_text(render_file(record, config.tool_name), encoding="utf-8")
        except OSError as exc:
            diagnostics.report(
                OutputError(f"Failed to open file '{output_path}': {exc}", location=record.source_location)
            )
            continue
        written.append(output_path)
    return written


def run_generation(
    forest: AstForest,
    config: WrenchConfig,
    rule: MarkerRule | None = None,
    preview: TextIO | None = None,
    write: bool = True,
) -> GenerationResult:
    """Collect, process, and emit every torqueable class in the forest."""
    diagnostics = Diagnostics()
    marker_rule = rule if rule is not None else FriendMarkerRule(config.sentinel)

    try:
        records = collect_classes(forest, marker_rule, diagnostics)
    except AnalysisFailure:
        logger.error("Collecting torqueable classes failed")
        return GenerationResult(records=[], diagnostics=diagnostics, exit_code=1)

    records = process_classes(forest, records, marker_rule, config, diagnostics)
    if diagnostics.of_kind(MultipleInheritanceError):
        return GenerationResult(records=records, diagnostics=diagnostics, exit_code=1)

    result = GenerationResult(records=records, diagnostics=diagnostics)
    if write:
        result.written = generate_classes(records, config, diagnostics, preview=preview)
    return result
