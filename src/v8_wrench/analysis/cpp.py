import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import cast

from tree_sitter import Node, Query, QueryCursor, Tree
from tree_sitter_language_pack import SupportedLanguage, get_language, get_parser

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

logger = logging.getLogger(__name__)

_LANGUAGE = "cpp"
_RECORD_TYPES = frozenset({"class_specifier", "struct_specifier", "union_specifier"})
_NAME_TYPES = frozenset({"type_identifier", "template_type", "qualified_identifier", "identifier"})
_BUILTIN_TYPES = frozenset({"primitive_type", "sized_type_specifier"})
_PREPROC_BLOCKS = frozenset({"preproc_if", "preproc_ifdef"})
_PREPROC_HEADER_FIELDS = ("condition", "name", "alternative")
_PREPROC_ALTERNATIVES = frozenset({"preproc_else", "preproc_elif", "preproc_elifdef"})
_IDENTIFIERS = frozenset({"field_identifier", "identifier", "qualified_identifier", "operator_name", "destructor_name"})
_INTEGER_SUFFIX = re.compile(r"[uUlLzZ]+$")


def _load_query(language: str, query_type: str) -> Query:
    queries_dir = Path(__file__).parent.parent / "queries"
    query_path = queries_dir / f"{language}_{query_type}.scm"
    if not query_path.exists():
        raise FileNotFoundError(f"Query file not found: {query_path}")
    query_text = query_path.read_text(encoding="utf-8")
    return Query(get_language(cast(SupportedLanguage, language)), query_text)


def _parse_integer(text: str) -> int | None:
    cleaned = _INTEGER_SUFFIX.sub("", text.replace("'", ""))
    try:
        if len(cleaned) > 1 and cleaned[0] == "0" and cleaned[1].isdigit():
            return int(cleaned, 8)
        return int(cleaned, 0)
    except ValueError:
        return None


def _display_path(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


@dataclass
class _ParsedFile:
    path: Path
    display_path: str
    source: bytes
    tree: Tree
    records: list[Node] = field(default_factory=list)
    includes: list[tuple[str, bool]] = field(default_factory=list)

    def text(self, node: Node) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


@dataclass(frozen=True)
class _Symbol:
    qualified_name: str
    namespace: tuple[str, ...]


class TreeSitterCppForest:
    """C++ analysis forest backed by tree-sitter.

    Every source is a translation unit. Quoted includes are followed relative
    to the including file and then the include directories; angle includes
    only through the include directories. Names are resolved against every
    record declaration seen in the run, innermost scope first.
    """

    def __init__(
        self,
        sources: Iterable[str | Path],
        include_dirs: Iterable[str | Path] = (),
        strict: bool = False,
    ) -> None:
        self._sources = [Path(source) for source in sources]
        self._include_dirs = [Path(directory) for directory in include_dirs]
        self._strict = strict
        self._parser = get_parser(cast(SupportedLanguage, _LANGUAGE))
        self._query = _load_query(_LANGUAGE, "records")
        self._files: dict[Path, _ParsedFile | None] = {}
        self._by_display: dict[str, _ParsedFile] = {}
        self._unit_files: dict[str, list[_ParsedFile]] = {}
        self._failures: dict[str, AnalysisFailure] = {}
        self._symbols: dict[str, _Symbol] = {}
        self._loaded = False

    # -- loading ---------------------------------------------------------

    def _parse(self, path: Path) -> _ParsedFile:
        source = path.read_bytes()
        tree = self._parser.parse(source)
        display = _display_path(path)
        parsed = _ParsedFile(path=path, display_path=display, source=source, tree=tree)

        cursor = QueryCursor(self._query)
        for _, captures in cursor.matches(tree.root_node):
            if "record" in captures:
                parsed.records.extend(captures["record"])
            for include in captures.get("include.path", []):
                text = parsed.text(include)
                parsed.includes.append((text.strip('"<>'), text.startswith("<")))
        parsed.records.sort(key=lambda node: node.start_byte)

        if tree.root_node.has_error:
            if self._strict:
                raise AnalysisFailure(f"Syntax errors in '{display}'", location=display)
            logger.warning("Syntax errors in %s, continuing with tree-sitter error recovery", display)
        return parsed

    def _resolve_include(self, including: Path, include: str, angled: bool) -> Path | None:
        search = [] if angled else [including.parent]
        search.extend(self._include_dirs)
        for directory in search:
            candidate = directory / include
            if candidate.is_file():
                return candidate.resolve()
        if angled:
            logger.debug("Skipping system include <%s> from %s", include, including)
        else:
            logger.warning("Include \"%s\" from %s not found", include, including)
        return None

    def _load_file(self, path: Path, unit_files: list[_ParsedFile], visited: set[Path], is_unit: bool) -> None:
        if path in visited:
            return
        visited.add(path)

        if path not in self._files:
            try:
                self._files[path] = self._parse(path)
            except OSError as exc:
                logger.warning("Cannot read %s: %s", path, exc)
                self._files[path] = None
        parsed = self._files[path]
        if parsed is None:
            if is_unit:
                raise AnalysisFailure(f"Cannot read translation unit '{path}'", location=str(path))
            return

        for include, angled in parsed.includes:
            resolved = self._resolve_include(path, include, angled)
            if resolved is not None:
                self._load_file(resolved, unit_files, visited, is_unit=False)
        unit_files.append(parsed)

    def _load(self) -> None:
        if self._loaded:
            return
        self._loaded = True
        for source in self._sources:
            unit = str(source)
            unit_files: list[_ParsedFile] = []
            try:
                self._load_file(source.resolve(), unit_files, set(), is_unit=True)
            except AnalysisFailure as exc:
                self._failures[unit] = exc
                continue
            self._unit_files[unit] = unit_files

        for parsed in self._files.values():
            if parsed is None:
                continue
            self._by_display[parsed.display_path] = parsed
            for record in parsed.records:
                name_node = record.child_by_field_name("name")
                if name_node is None:
                    continue
                namespace, scope = self._scope_of(parsed, record)
                qualified = "::".join((*scope, *self._name_components(parsed, name_node)))
                self._symbols.setdefault(qualified, _Symbol(qualified_name=qualified, namespace=namespace))

    # -- scopes and names ------------------------------------------------

    def _scope_of(self, parsed: _ParsedFile, node: Node) -> tuple[tuple[str, ...], tuple[str, ...]]:
        """Return (enclosing namespaces, enclosing namespaces and classes) of a node."""
        namespace: list[str] = []
        scope: list[str] = []
        current = node.parent
        while current is not None:
            if current.type == "namespace_definition":
                name_node = current.child_by_field_name("name")
                if name_node is not None:
                    parts = [part.strip() for part in parsed.text(name_node).split("::") if part.strip()]
                    namespace[:0] = parts
                    scope[:0] = parts
            elif current.type in _RECORD_TYPES:
                name_node = current.child_by_field_name("name")
                if name_node is not None:
                    scope[:0] = self._name_components(parsed, name_node)
            current = current.parent
        return tuple(namespace), tuple(scope)

    def _name_parts(self, node: Node) -> tuple[list[Node], bool]:
        """Split a possibly qualified name into its components; also report a leading ``::``."""
        parts: list[Node] = []
        absolute = False
        current: Node | None = node
        while current is not None and current.type == "qualified_identifier":
            scope = current.child_by_field_name("scope")
            if scope is None:
                absolute = True
            else:
                parts.append(scope)
            current = current.child_by_field_name("name")
        if current is not None:
            parts.append(current)
        return parts, absolute

    def _component_name(self, parsed: _ParsedFile, node: Node) -> str:
        if node.type == "template_type":
            name_node = node.child_by_field_name("name")
            if name_node is not None:
                return parsed.text(name_node)
        return parsed.text(node)

    def _name_components(self, parsed: _ParsedFile, node: Node) -> tuple[str, ...]:
        parts, _ = self._name_parts(node)
        return tuple(self._component_name(parsed, part) for part in parts)

    def _lookup(self, components: tuple[str, ...], scope: tuple[str, ...], absolute: bool) -> _Symbol | None:
        prefixes = [()] if absolute else [scope[:length] for length in range(len(scope), -1, -1)]
        for prefix in prefixes:
            symbol = self._symbols.get("::".join((*prefix, *components)))
            if symbol is not None:
                return symbol
        return None

    # -- types -----------------------------------------------------------

    def _named_type(
        self, parsed: _ParsedFile, parts: list[Node], absolute: bool, scope: tuple[str, ...]
    ) -> TypeInfo:
        last = parts[-1]
        spelling = parsed.source[parts[0].start_byte : last.end_byte].decode("utf-8", errors="replace")
        if absolute:
            spelling = "::" + spelling
        components = tuple(self._component_name(parsed, part) for part in parts)

        arguments: tuple[TemplateArgument, ...] | None = None
        if last.type == "template_type":
            arguments_node = last.child_by_field_name("arguments")
            arguments = ()
            if arguments_node is not None:
                arguments = tuple(
                    self._template_argument(parsed, argument, scope)
                    for argument in arguments_node.named_children
                    if argument.type != "comment"
                )

        qualifier = None
        if len(parts) > 1 and parts[-2].type == "template_type":
            qualifier = self._named_type(parsed, parts[:-1], absolute, scope)

        symbol = self._lookup(components, scope, absolute)
        if symbol is None:
            return TypeInfo(
                kind=TypeKind.UNRESOLVED,
                name=components[-1],
                spelling=spelling,
                qualified_name="::".join(components),
                arguments=arguments,
                qualifier=qualifier,
            )
        return TypeInfo(
            kind=TypeKind.RECORD,
            name=components[-1],
            spelling=spelling,
            qualified_name=symbol.qualified_name,
            namespace=symbol.namespace,
            arguments=arguments,
            qualifier=qualifier,
        )

    def _type_info(self, parsed: _ParsedFile, node: Node, scope: tuple[str, ...]) -> TypeInfo:
        spelling = parsed.text(node)
        if node.type == "type_descriptor":
            inner = node.child_by_field_name("type")
            # pointers, references and arrays are not schema types
            if inner is None or node.child_by_field_name("declarator") is not None:
                return TypeInfo(kind=TypeKind.OTHER, name=spelling, spelling=spelling)
            return self._type_info(parsed, inner, scope)
        if node.type in _BUILTIN_TYPES:
            name = " ".join(spelling.split())
            return TypeInfo(kind=TypeKind.BUILTIN, name=name, spelling=spelling, qualified_name=name)
        if node.type in _NAME_TYPES:
            parts, absolute = self._name_parts(node)
            if parts:
                return self._named_type(parsed, parts, absolute, scope)
        return TypeInfo(kind=TypeKind.OTHER, name=spelling, spelling=spelling)

    def _template_argument(self, parsed: _ParsedFile, node: Node, scope: tuple[str, ...]) -> TemplateArgument:
        spelling = parsed.text(node)
        if node.type == "type_descriptor":
            type_info = self._type_info(parsed, node, scope)
            return TemplateArgument(kind=ArgumentKind.TYPE, spelling=spelling, type=type_info)
        if node.type == "number_literal":
            value = _parse_integer(spelling)
            if value is not None:
                return TemplateArgument(kind=ArgumentKind.INTEGRAL, spelling=spelling, value=value)
        if node.type in ("true", "false"):
            return TemplateArgument(kind=ArgumentKind.INTEGRAL, spelling=spelling, value=int(node.type == "true"))
        if node.type == "unary_expression":
            operator = node.child_by_field_name("operator")
            operand = node.child_by_field_name("argument")
            if operator is not None and operand is not None and operand.type == "number_literal":
                value = _parse_integer(parsed.text(operand))
                sign = parsed.text(operator)
                if value is not None and sign in ("-", "+"):
                    return TemplateArgument(
                        kind=ArgumentKind.INTEGRAL, spelling=spelling, value=-value if sign == "-" else value
                    )
        if node.type in ("identifier", "qualified_identifier"):
            # a bare name is ambiguous between a type and a constant
            type_info = self._type_info(parsed, node, scope)
            if type_info.is_record:
                return TemplateArgument(kind=ArgumentKind.TYPE, spelling=spelling, type=type_info)
        return TemplateArgument(kind=ArgumentKind.EXPRESSION, spelling=spelling)

    # -- declarations ----------------------------------------------------

    def _parsed_for(self, declaration: ClassDeclaration) -> _ParsedFile:
        self._load()
        return self._by_display[declaration.path]

    def _declaration(self, parsed: _ParsedFile, record: Node) -> ClassDeclaration | None:
        name_node = record.child_by_field_name("name")
        if name_node is None or record.child_by_field_name("body") is None:
            return None
        _, scope = self._scope_of(parsed, record)
        components = self._name_components(parsed, name_node)
        line, column = name_node.start_point
        return ClassDeclaration(
            name=components[-1],
            qualified_name="::".join((*scope, *components)),
            path=parsed.display_path,
            start_byte=record.start_byte,
            end_byte=record.end_byte,
            line=line + 1,
            column=column + 1,
            node=record,
        )

    def _body_items(self, declaration: ClassDeclaration) -> Iterator[Node]:
        body = cast(Node, declaration.node).child_by_field_name("body")
        if body is None:
            return
        pending = list(body.named_children)
        while pending:
            item = pending.pop(0)
            if item.type in _PREPROC_BLOCKS:
                # only the first arm is read, #else and #elif arms are skipped
                skipped = {
                    child.id
                    for child in (item.child_by_field_name(name) for name in _PREPROC_HEADER_FIELDS)
                    if child is not None
                }
                pending[:0] = [
                    child
                    for child in item.named_children
                    if child.id not in skipped and child.type not in _PREPROC_ALTERNATIVES
                ]
                continue
            yield item

    def _class_scope(self, parsed: _ParsedFile, declaration: ClassDeclaration) -> tuple[str, ...]:
        _, scope = self._scope_of(parsed, cast(Node, declaration.node))
        return (*scope, declaration.name)

    @staticmethod
    def _declarator_name(parsed: _ParsedFile, declarator: Node) -> tuple[str, bool]:
        """Return the declared identifier and whether the declarator declares a function."""
        is_function = False
        current: Node | None = declarator
        while current is not None and current.type not in _IDENTIFIERS:
            if current.type == "function_declarator":
                is_function = True
            inner = current.child_by_field_name("declarator")
            if inner is None:
                inner = next(
                    (
                        child
                        for child in current.named_children
                        if child.type.endswith("declarator") or child.type in _IDENTIFIERS
                    ),
                    None,
                )
            current = inner
        return (parsed.text(current) if current is not None else ""), is_function

    def _members_of(self, parsed: _ParsedFile, item: Node, scope: tuple[str, ...]) -> list[MemberDeclaration]:
        if item.type in ("function_definition", "template_declaration"):
            declarator = item.child_by_field_name("declarator")
            name = self._declarator_name(parsed, declarator)[0] if declarator is not None else ""
            return [MemberDeclaration(name=name, kind=MemberKind.METHOD)]
        if item.type not in ("field_declaration", "declaration"):
            return [MemberDeclaration(name="", kind=MemberKind.OTHER)]

        is_static = any(
            child.type == "storage_class_specifier" and parsed.text(child) == "static" for child in item.children
        )
        type_node = item.child_by_field_name("type")
        member_type = self._type_info(parsed, type_node, scope) if type_node is not None else None

        members = []
        for declarator in item.children_by_field_name("declarator"):
            name, is_function = self._declarator_name(parsed, declarator)
            kind = MemberKind.METHOD if is_function else MemberKind.VARIABLE
            members.append(MemberDeclaration(name=name, kind=kind, is_static=is_static, type=member_type))
        return members

    # -- AstForest -------------------------------------------------------

    def translation_units(self) -> list[str]:
        return [str(source) for source in self._sources]

    def find_classes(self, translation_unit: str, predicate: ClassPredicate) -> list[ClassDeclaration]:
        self._load()
        if translation_unit in self._failures:
            raise self._failures[translation_unit]

        found: list[ClassDeclaration] = []
        for parsed in self._unit_files.get(translation_unit, []):
            for record in parsed.records:
                declaration = self._declaration(parsed, record)
                if declaration is not None and predicate(declaration):
                    found.append(declaration)
        return found

    def members(self, declaration: ClassDeclaration) -> list[MemberDeclaration]:
        parsed = self._parsed_for(declaration)
        scope = self._class_scope(parsed, declaration)
        members: list[MemberDeclaration] = []
        for item in self._body_items(declaration):
            if item.type in ("access_specifier", "comment", "friend_declaration"):
                continue
            members.extend(self._members_of(parsed, item, scope))
        return members

    def bases(self, declaration: ClassDeclaration) -> list[TypeInfo]:
        parsed = self._parsed_for(declaration)
        _, scope = self._scope_of(parsed, cast(Node, declaration.node))
        clause = next(
            (child for child in cast(Node, declaration.node).children if child.type == "base_class_clause"), None
        )
        if clause is None:
            return []
        return [self._type_info(parsed, child, scope) for child in clause.named_children if child.type in _NAME_TYPES]

    def friends(self, declaration: ClassDeclaration) -> list[TypeInfo]:
        parsed = self._parsed_for(declaration)
        scope = self._class_scope(parsed, declaration)
        friends: list[TypeInfo] = []
        for item in self._body_items(declaration):
            if item.type != "friend_declaration":
                continue
            type_node = self._friend_type_node(item)
            if type_node is not None:
                friends.append(self._type_info(parsed, type_node, scope))
        return friends

    @staticmethod
    def _friend_type_node(item: Node) -> Node | None:
        for child in item.named_children:
            if child.type in _NAME_TYPES:
                return child
            if child.type in _RECORD_TYPES:
                return child.child_by_field_name("name")
            if child.type == "declaration":
                # friend functions carry a function declarator
                declarators = child.children_by_field_name("declarator")
                if not any(TreeSitterCppForest._has_function_declarator(d) for d in declarators):
                    return child.child_by_field_name("type")
        return None

    @staticmethod
    def _has_function_declarator(node: Node) -> bool:
        if node.type == "function_declarator":
            return True
        return any(TreeSitterCppForest._has_function_declarator(child) for child in node.named_children)

    def source_location(self, declaration: ClassDeclaration) -> str:
        return f"{declaration.path}:{declaration.line}:{declaration.column}"
