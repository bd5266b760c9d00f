"""Shared fixtures and helpers for tests."""

import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest
from tree_sitter import Language, Parser, Query
from tree_sitter_language_pack import get_language, get_parser

from v8_wrench.analysis.memory import InMemoryAstForest
from v8_wrench.config import WrenchConfig
from v8_wrench.diagnostics import Diagnostics

_REPO_ROOT = Path(__file__).parent.parent

TORQUE_PRELUDE = """\
namespace tq {
template <typename... Annotations>
class Torque;

struct Export {};
struct GenerateCppClass {};
template <int Min, int Max>
struct Range {};
}  // namespace tq

namespace other {
struct Export {};
}  // namespace other

template <typename T>
struct Field {
  using Offset = int;
};
"""


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def queries_dir() -> Path:
    """Return the path to the queries directory."""
    return Path(__file__).parent.parent / "src" / "v8_wrench" / "queries"


@pytest.fixture
def cpp_parser() -> Parser:
    """Return a tree-sitter parser for C++."""
    return get_parser("cpp")


@pytest.fixture
def cpp_language() -> Language:
    """Return the tree-sitter C++ language."""
    return get_language("cpp")


@pytest.fixture
def cpp_records_query(queries_dir: Path, cpp_language: Language) -> Query:
    """Load the C++ record/include query."""
    query_text = (queries_dir / "cpp_records.scm").read_text()
    return Query(cpp_language, query_text)


@pytest.fixture
def in_memory_forest() -> InMemoryAstForest:
    return InMemoryAstForest()


@pytest.fixture
def diagnostics() -> Diagnostics:
    return Diagnostics()


@pytest.fixture
def config(tmp_path: Path) -> WrenchConfig:
    return WrenchConfig(output_dir=tmp_path / "out")


@pytest.fixture
def write_source(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a dedented C++ source below tmp_path and return its path."""

    def _write(name: str, source: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def prelude(write_source: Callable[[str, str], Path]) -> Path:
    """Header declaring the marker template, annotation types and the Field wrapper."""
    return write_source("torque.h", TORQUE_PRELUDE)
