from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

FLOATING_POINT_BUILTINS = frozenset({"float", "double", "long double"})


class TypeKind(str, Enum):
    RECORD = "record"
    BUILTIN = "builtin"
    UNRESOLVED = "unresolved"
    OTHER = "other"


class ArgumentKind(str, Enum):
    TYPE = "type"
    INTEGRAL = "integral"
    EXPRESSION = "expression"


class MemberKind(str, Enum):
    VARIABLE = "variable"
    METHOD = "method"
    OTHER = "other"


@dataclass(frozen=True)
class TemplateArgument:
    kind: ArgumentKind
    spelling: str
    type: "TypeInfo | None" = None
    value: int | None = None


@dataclass(frozen=True)
class TypeInfo:
    """A type as seen at one use site, resolved as far as the forest allows.

    ``arguments`` is ``None`` for a type that is not a template instantiation.
    ``qualifier`` is the type one qualification level up, so ``Field<double>``
    for ``Field<double>::Offset``. ``namespace`` is the enclosing namespace
    path of the resolved record declaration.
    """

    kind: TypeKind
    name: str
    spelling: str
    qualified_name: str = ""
    namespace: tuple[str, ...] = ()
    arguments: tuple[TemplateArgument, ...] | None = None
    qualifier: "TypeInfo | None" = None

    @property
    def is_record(self) -> bool:
        return self.kind is TypeKind.RECORD

    @property
    def is_floating_point(self) -> bool:
        return self.kind is TypeKind.BUILTIN and self.name in FLOATING_POINT_BUILTINS

    @property
    def is_parametrized(self) -> bool:
        return self.arguments is not None


@dataclass(frozen=True)
class ClassDeclaration:
    """Borrowed handle to a class definition inside an analysis forest."""

    name: str
    qualified_name: str
    path: str
    start_byte: int
    end_byte: int
    line: int = 1
    column: int = 1
    node: Any = field(default=None, compare=False, hash=False, repr=False)


@dataclass(frozen=True)
class MemberDeclaration:
    name: str
    kind: MemberKind
    is_static: bool = False
    type: TypeInfo | None = None


ClassPredicate = Callable[[ClassDeclaration], bool]


class AstForest(Protocol):
    def translation_units(self) -> list[str]: ...

    def find_classes(self, translation_unit: str, predicate: ClassPredicate) -> list[ClassDeclaration]: ...

    def members(self, declaration: ClassDeclaration) -> list[MemberDeclaration]: ...

    def bases(self, declaration: ClassDeclaration) -> list[TypeInfo]: ...

    def friends(self, declaration: ClassDeclaration) -> list[TypeInfo]: ...

    def source_location(self, declaration: ClassDeclaration) -> str: ...
