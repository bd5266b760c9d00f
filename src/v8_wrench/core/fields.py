import logging
import re

from v8_wrench.core.naming import snake_case
from v8_wrench.core.ports.analysis import ArgumentKind, MemberDeclaration, MemberKind, TypeInfo
from v8_wrench.diagnostics import Diagnostics
from v8_wrench.errors import FieldTypeError, MultipleInheritanceError
from v8_wrench.models import FieldDescriptor

logger = logging.getLogger(__name__)

_OFFSET_NAME = re.compile(r"^k(\w+)Offset$")


def _wrapped_type(member: MemberDeclaration, field_template: str) -> TypeInfo | None:
    """Return ``T`` for a static member declared as ``Field<T>::...`` (or ``Field<T>``)."""
    if member.kind is not MemberKind.VARIABLE or not member.is_static or member.type is None:
        return None
    wrapper = member.type.qualifier or member.type
    if wrapper.name != field_template or not wrapper.arguments:
        return None
    first = wrapper.arguments[0]
    if first.kind is not ArgumentKind.TYPE:
        return None
    return first.type


def _schema_type(field_type: TypeInfo, member_name: str, location: str | None) -> str:
    if field_type.is_record:
        return field_type.name.removeprefix("_")
    if field_type.is_floating_point:
        return "float64"
    raise FieldTypeError(
        f"Type '{field_type.spelling}' of declaration '{member_name}' cannot be handled", location=location
    )


def reflect_fields(
    members: list[MemberDeclaration],
    diagnostics: Diagnostics,
    field_template: str = "Field",
    location: str | None = None,
) -> list[FieldDescriptor]:
    """Infer schema fields from static ``k<Name>Offset`` members typed as ``Field<T>``."""
    logger.info("Detected field offsets:")
    fields: list[FieldDescriptor] = []
    seen: set[str] = set()
    for member in members:
        name_match = _OFFSET_NAME.match(member.name)
        if name_match is None:
            continue
        wrapped = _wrapped_type(member, field_template)
        if wrapped is None:
            continue

        try:
            field_type = _schema_type(wrapped, member.name, location)
        except FieldTypeError as exc:
            diagnostics.report(exc)
            continue

        field = FieldDescriptor(name=snake_case(name_match.group(1)), type=field_type)
        if field.name in seen:
            diagnostics.report(
                FieldTypeError(
                    f"Field '{field.name}' of declaration '{member.name}' is declared twice", location=location
                )
            )
            continue
        seen.add(field.name)
        logger.info(" - '%s':", field.name)
        logger.info("  - type: %s", field.type)
        fields.append(field)
    return fields


def reflect_base_class(bases: list[TypeInfo], class_name: str, location: str | None = None) -> str | None:
    """Return the single direct base, or None. Raises MultipleInheritanceError for more than one."""
    if len(bases) > 1:
        names = ", ".join(base.spelling for base in bases)
        raise MultipleInheritanceError(
            f"Class '{class_name}' has multiple base classes ({names}); only single inheritance is supported",
            location=location,
        )
    base_class = bases[0].name if bases else None
    logger.info("Base class: %s", base_class or "")
    return base_class
