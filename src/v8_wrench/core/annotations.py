import logging

from v8_wrench.core.ports.analysis import ArgumentKind, TemplateArgument, TypeInfo
from v8_wrench.diagnostics import Diagnostics
from v8_wrench.errors import AnnotationShapeError
from v8_wrench.models import AnnotationDescriptor

logger = logging.getLogger(__name__)


def _annotation_arguments(
    argument_type: TypeInfo, location: str | None, diagnostics: Diagnostics
) -> list[str]:
    decoded: list[str] = []
    for index, argument in enumerate(argument_type.arguments or ()):
        if argument.kind is ArgumentKind.INTEGRAL and argument.value is not None:
            logger.info("   [%d]: %d (integral)", index, argument.value)
            decoded.append(str(argument.value))
        else:
            # keep what was decoded so far, the annotation is still emitted
            diagnostics.report(
                AnnotationShapeError(
                    f"Class annotation '{argument_type.spelling}' contains unexpected "
                    f"template argument kind '{argument.kind.value}': {argument.spelling}",
                    location=location,
                )
            )
    return decoded


def _annotation(
    argument: TemplateArgument, reserved_namespace: str, location: str | None, diagnostics: Diagnostics
) -> AnnotationDescriptor:
    argument_type = argument.type
    if argument.kind is not ArgumentKind.TYPE or argument_type is None or not argument_type.is_record:
        raise AnnotationShapeError(f"Class annotation '{argument.spelling}' is not a record", location=location)
    if not argument_type.namespace or argument_type.namespace[-1] != reserved_namespace:
        raise AnnotationShapeError(
            f"Class annotation '{argument.spelling}' is not in '{reserved_namespace}' namespace",
            location=location,
        )

    logger.info("  - name: %s", argument_type.name)
    return AnnotationDescriptor(
        name=argument_type.name,
        arguments=_annotation_arguments(argument_type, location, diagnostics),
    )


def extract_annotations(
    marker: TypeInfo,
    diagnostics: Diagnostics,
    reserved_namespace: str = "tq",
    location: str | None = None,
) -> list[AnnotationDescriptor]:
    """Decode the annotations carried by a marker instantiation such as ``tq::Torque<tq::Export>``.

    Arguments that are not records of the reserved namespace are reported and
    skipped. Only integral annotation arguments are understood.
    """
    if not marker.is_parametrized:
        diagnostics.report(
            AnnotationShapeError(f"Marker '{marker.spelling}' is not a template instantiation", location=location)
        )
        return []

    logger.info("Annotations:")
    annotations: list[AnnotationDescriptor] = []
    for argument in marker.arguments or ():
        logger.info(" - %s:", argument.spelling)
        try:
            annotations.append(_annotation(argument, reserved_namespace, location, diagnostics))
        except AnnotationShapeError as exc:
            diagnostics.report(exc)
    return annotations
