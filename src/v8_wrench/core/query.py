import logging
from typing import Protocol

from v8_wrench.core.ports.analysis import AstForest, ClassDeclaration, TypeInfo
from v8_wrench.diagnostics import Diagnostics
from v8_wrench.errors import AnalysisFailure, DuplicateMatchError
from v8_wrench.models import ClassRecord

logger = logging.getLogger(__name__)


class MarkerRule(Protocol):
    """Decides which classes opt into generation and where their metadata lives."""

    def matches(self, forest: AstForest, declaration: ClassDeclaration) -> bool: ...

    def marker(self, forest: AstForest, declaration: ClassDeclaration) -> TypeInfo | None: ...


class FriendMarkerRule:
    """Matches classes that befriend the sentinel template, e.g. ``friend class tq::Torque<...>``."""

    def __init__(self, sentinel: str = "tq::Torque") -> None:
        # a leading "::" anchors the sentinel at global scope
        self.anchored = sentinel.startswith("::")
        self.sentinel = sentinel.removeprefix("::")

    def _is_sentinel(self, friend: TypeInfo) -> bool:
        name = friend.qualified_name or friend.name
        if name == self.sentinel:
            return True
        return not self.anchored and name.endswith("::" + self.sentinel)

    def matches(self, forest: AstForest, declaration: ClassDeclaration) -> bool:
        return any(self._is_sentinel(friend) for friend in forest.friends(declaration))

    def marker(self, forest: AstForest, declaration: ClassDeclaration) -> TypeInfo | None:
        for friend in forest.friends(declaration):
            if self._is_sentinel(friend):
                return friend
        return None


def collect_classes(forest: AstForest, rule: MarkerRule, diagnostics: Diagnostics) -> list[ClassRecord]:
    """Find every class opted into generation, in traversal order, once each.

    A traversal failure is reported and re-raised; nothing collected so far is
    returned in that case.
    """
    records: list[ClassRecord] = []
    seen: set[ClassDeclaration] = set()
    names: dict[str, str] = {}

    logger.info("Searching torqueable classes...")
    for unit in forest.translation_units():
        try:
            matched = forest.find_classes(unit, lambda decl: rule.matches(forest, decl))
        except AnalysisFailure as exc:
            diagnostics.report(exc)
            raise

        for declaration in matched:
            location = forest.source_location(declaration)
            if declaration in seen:
                diagnostics.report(
                    DuplicateMatchError(f"Class '{declaration.name}' found multiple times", location=location)
                )
                continue
            seen.add(declaration)
            if declaration.name in names:
                diagnostics.report(
                    DuplicateMatchError(
                        f"Class name '{declaration.name}' already generated from {names[declaration.name]}",
                        location=location,
                    )
                )
                continue
            names[declaration.name] = location
            logger.info("* Class '%s': %s", declaration.name, location)
            records.append(ClassRecord(name=declaration.name, source_location=location, declaration=declaration))

    return records
