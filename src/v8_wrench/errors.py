"""Error taxonomy for a generation run.

Every error is recoverable at the unit it affects (one annotation, one field,
one output file) unless ``fatal`` is set, in which case the run ends with a
non-zero exit status.
"""


class WrenchError(Exception):
    fatal = False

    def __init__(self, message: str, location: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.location = location

    @property
    def kind(self) -> str:
        return type(self).__name__

    def __str__(self) -> str:
        if self.location:
            return f"{self.message} ({self.location})"
        return self.message


class DuplicateMatchError(WrenchError):
    """The same class declaration was matched more than once."""


class AnnotationShapeError(WrenchError):
    """A marker argument is not a record, lives outside the reserved namespace, or has an unsupported argument."""


class FieldTypeError(WrenchError):
    """A reflected field has a type that cannot be mapped to a schema type."""


class OutputError(WrenchError):
    """An output file could not be written."""


class MultipleInheritanceError(WrenchError):
    """A matched class has more than one direct base class."""

    fatal = True


class AnalysisFailure(WrenchError):
    """A translation unit could not be read or traversed."""

    fatal = True
