from v8_wrench.analysis.cpp import TreeSitterCppForest
from v8_wrench.analysis.memory import (
    InMemoryAstForest,
    InMemoryClass,
    builtin_type,
    expression_argument,
    field_member,
    integral_argument,
    record_type,
    type_argument,
)

__all__ = [
    "InMemoryAstForest",
    "InMemoryClass",
    "TreeSitterCppForest",
    "builtin_type",
    "expression_argument",
    "field_member",
    "integral_argument",
    "record_type",
    "type_argument",
]
