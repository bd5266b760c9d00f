from collections.abc import Iterable
from dataclasses import dataclass, field

from v8_wrench.core.ports.analysis import (
    ArgumentKind,
    ClassDeclaration,
    ClassPredicate,
    MemberDeclaration,
    MemberKind,
    TemplateArgument,
    TypeInfo,
    TypeKind,
)
from v8_wrench.errors import AnalysisFailure


def record_type(
    name: str,
    namespace: tuple[str, ...] = (),
    arguments: Iterable[TemplateArgument] | None = None,
    qualifier: TypeInfo | None = None,
) -> TypeInfo:
    qualified_name = "::".join((*namespace, name))
    args = tuple(arguments) if arguments is not None else None
    spelling = qualified_name
    if args is not None:
        spelling += f"<{', '.join(arg.spelling for arg in args)}>"
    return TypeInfo(
        kind=TypeKind.RECORD,
        name=name,
        spelling=spelling,
        qualified_name=qualified_name,
        namespace=namespace,
        arguments=args,
        qualifier=qualifier,
    )


def builtin_type(name: str) -> TypeInfo:
    return TypeInfo(kind=TypeKind.BUILTIN, name=name, spelling=name, qualified_name=name)


def type_argument(type_info: TypeInfo) -> TemplateArgument:
    return TemplateArgument(kind=ArgumentKind.TYPE, spelling=type_info.spelling, type=type_info)


def integral_argument(value: int) -> TemplateArgument:
    return TemplateArgument(kind=ArgumentKind.INTEGRAL, spelling=str(value), value=value)


def expression_argument(spelling: str) -> TemplateArgument:
    return TemplateArgument(kind=ArgumentKind.EXPRESSION, spelling=spelling)


def field_member(name: str, wrapped: TypeInfo, is_static: bool = True, template: str = "Field") -> MemberDeclaration:
    """A ``static constexpr Field<T>::Offset kNameOffset`` style member."""
    wrapper = TypeInfo(
        kind=TypeKind.UNRESOLVED,
        name=template,
        spelling=f"{template}<{wrapped.spelling}>",
        qualified_name=template,
        arguments=(type_argument(wrapped),),
    )
    offset_type = TypeInfo(
        kind=TypeKind.UNRESOLVED,
        name="Offset",
        spelling=f"{wrapper.spelling}::Offset",
        qualified_name=f"{template}::Offset",
        qualifier=wrapper,
    )
    return MemberDeclaration(name=name, kind=MemberKind.VARIABLE, is_static=is_static, type=offset_type)


@dataclass
class InMemoryClass:
    declaration: ClassDeclaration
    members: list[MemberDeclaration] = field(default_factory=list)
    bases: list[TypeInfo] = field(default_factory=list)
    friends: list[TypeInfo] = field(default_factory=list)


class InMemoryAstForest:
    """Hand-populated forest for tests and for callers that already hold declarations."""

    def __init__(self) -> None:
        self.units: dict[str, list[ClassDeclaration]] = {}
        self.classes: dict[ClassDeclaration, InMemoryClass] = {}
        self.failing_units: set[str] = set()
        self._next_offset = 0

    def add_class(
        self,
        name: str,
        unit: str = "main.cc",
        members: Iterable[MemberDeclaration] = (),
        bases: Iterable[TypeInfo] = (),
        friends: Iterable[TypeInfo] = (),
        qualified_name: str | None = None,
        line: int = 1,
        column: int = 1,
    ) -> ClassDeclaration:
        start = self._next_offset
        self._next_offset += 1
        declaration = ClassDeclaration(
            name=name,
            qualified_name=qualified_name or name,
            path=unit,
            start_byte=start,
            end_byte=start + 1,
            line=line,
            column=column,
        )
        self.classes[declaration] = InMemoryClass(
            declaration=declaration,
            members=list(members),
            bases=list(bases),
            friends=list(friends),
        )
        self.units.setdefault(unit, []).append(declaration)
        return declaration

    def include(self, unit: str, declaration: ClassDeclaration) -> None:
        """Make an already registered declaration visible from another unit, as a shared header would."""
        self.units.setdefault(unit, []).append(declaration)

    def fail(self, unit: str) -> None:
        self.units.setdefault(unit, [])
        self.failing_units.add(unit)

    def translation_units(self) -> list[str]:
        return list(self.units)

    def find_classes(self, translation_unit: str, predicate: ClassPredicate) -> list[ClassDeclaration]:
        if translation_unit in self.failing_units:
            raise AnalysisFailure(f"Traversal of '{translation_unit}' failed", location=translation_unit)
        return [decl for decl in self.units.get(translation_unit, []) if predicate(decl)]

    def members(self, declaration: ClassDeclaration) -> list[MemberDeclaration]:
        return list(self.classes[declaration].members)

    def bases(self, declaration: ClassDeclaration) -> list[TypeInfo]:
        return list(self.classes[declaration].bases)

    def friends(self, declaration: ClassDeclaration) -> list[TypeInfo]:
        return list(self.classes[declaration].friends)

    def source_location(self, declaration: ClassDeclaration) -> str:
        return f"{declaration.path}:{declaration.line}:{declaration.column}"
