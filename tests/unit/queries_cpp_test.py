"""Unit tests for the C++ record/include tree-sitter query."""

from tree_sitter import Parser, Query, QueryCursor


def get_captures_with_text(query: Query, parser: Parser, source: str) -> dict[str, list[str]]:
    """Parse source and return capture names mapped to their matched text."""
    source_bytes = source.encode("utf-8")
    tree = parser.parse(source_bytes)
    cursor = QueryCursor(query)
    result: dict[str, list[str]] = {}
    for _, matched_captures in cursor.matches(tree.root_node):
        for cap_name, nodes in matched_captures.items():
            if cap_name not in result:
                result[cap_name] = []
            for node in nodes:
                text = source_bytes[node.start_byte : node.end_byte].decode("utf-8")
                result[cap_name].append(text)
    return result


class TestCppRecordsQuery:
    def test_captures_class_definition(self, cpp_records_query: Query, cpp_parser: Parser) -> None:
        captures = get_captures_with_text(cpp_records_query, cpp_parser, "class Foo { int x; };")
        assert "Foo" in captures["record.name"]

    def test_captures_struct_definition(self, cpp_records_query: Query, cpp_parser: Parser) -> None:
        captures = get_captures_with_text(cpp_records_query, cpp_parser, "struct Bar {};")
        assert "Bar" in captures["record.name"]

    def test_captures_nested_records(self, cpp_records_query: Query, cpp_parser: Parser) -> None:
        source = """
namespace v8 {
class Outer {
  struct Inner {};
};
}
"""
        captures = get_captures_with_text(cpp_records_query, cpp_parser, source)
        assert "Outer" in captures["record.name"]
        assert "Inner" in captures["record.name"]

    def test_captures_class_template(self, cpp_records_query: Query, cpp_parser: Parser) -> None:
        source = "template <int A, int B> struct Range {};"
        captures = get_captures_with_text(cpp_records_query, cpp_parser, source)
        assert "Range" in captures["record.name"]

    def test_captures_quoted_include(self, cpp_records_query: Query, cpp_parser: Parser) -> None:
        captures = get_captures_with_text(cpp_records_query, cpp_parser, '#include "src/objects/heap-object.h"\n')
        assert '"src/objects/heap-object.h"' in captures["include.path"]

    def test_captures_system_include(self, cpp_records_query: Query, cpp_parser: Parser) -> None:
        captures = get_captures_with_text(cpp_records_query, cpp_parser, "#include <vector>\n")
        assert "<vector>" in captures["include.path"]

    def test_ignores_functions(self, cpp_records_query: Query, cpp_parser: Parser) -> None:
        captures = get_captures_with_text(cpp_records_query, cpp_parser, "int add(int a, int b) { return a + b; }")
        assert "record.name" not in captures
