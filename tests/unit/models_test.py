"""Unit tests for Pydantic models and diagnostics."""

import pytest
from pydantic import ValidationError

from v8_wrench.core.ports.analysis import ClassDeclaration
from v8_wrench.diagnostics import Diagnostics
from v8_wrench.errors import (
    AnalysisFailure,
    AnnotationShapeError,
    DuplicateMatchError,
    FieldTypeError,
    MultipleInheritanceError,
    OutputError,
    WrenchError,
)
from v8_wrench.models import AnnotationDescriptor, ClassRecord, FieldDescriptor


def _declaration() -> ClassDeclaration:
    return ClassDeclaration(name="Foo", qualified_name="v8::Foo", path="foo.h", start_byte=10, end_byte=40)


class TestClassRecordModel:
    def test_declaration_is_kept_as_is(self) -> None:
        declaration = _declaration()
        record = ClassRecord(name="Foo", source_location="foo.h:1:7", declaration=declaration)

        assert record.declaration is declaration

    def test_declaration_is_not_serialized(self) -> None:
        record = ClassRecord(
            name="Foo",
            source_location="foo.h:1:7",
            declaration=_declaration(),
            annotations=[AnnotationDescriptor(name="Export")],
            fields=[FieldDescriptor(name="value", type="float64")],
        )

        assert record.model_dump() == {
            "name": "Foo",
            "source_location": "foo.h:1:7",
            "base_class": None,
            "annotations": [{"name": "Export", "arguments": []}],
            "fields": [{"name": "value", "type": "float64"}],
        }

    def test_field_requires_type(self) -> None:
        with pytest.raises(ValidationError):
            FieldDescriptor(name="value")  # type: ignore[call-arg]


class TestDiagnostics:
    def test_keeps_report_order(self) -> None:
        diagnostics = Diagnostics()
        first = FieldTypeError("first")
        second = FieldTypeError("second", location="foo.h:2:3")

        diagnostics.report(first)
        diagnostics.report(second)

        assert list(diagnostics) == [first, second]
        assert str(second) == "second (foo.h:2:3)"
        assert not diagnostics.has_fatal

    def test_fatal_errors(self) -> None:
        diagnostics = Diagnostics()

        diagnostics.report(AnalysisFailure("boom"))

        assert diagnostics.has_fatal
        assert diagnostics.of_kind(AnalysisFailure)[0].kind == "AnalysisFailure"


@pytest.mark.parametrize(
    ("error_type", "fatal"),
    [
        (DuplicateMatchError, False),
        (AnnotationShapeError, False),
        (FieldTypeError, False),
        (OutputError, False),
        (MultipleInheritanceError, True),
        (AnalysisFailure, True),
    ],
)
def test_error_taxonomy(error_type: type[WrenchError], fatal: bool) -> None:
    assert error_type.fatal is fatal
    assert error_type.__doc__
