"""Tests for comment extraction and code association."""

import pytest

from core.exceptions import ParseError
from core.models import Location, Span
from core.parser import TreeSitterParser, extract_comments, parser_for_path

TAG = "@autodocs"


def _extract(text: str, language: str = "typescript"):
    return extract_comments(text, TreeSitterParser(language), TAG, path="example.ts")


class TestParserForPath:
    """Tests for parser_for_path()."""

    @pytest.mark.parametrize("path,language", [
        ("src/a.ts", "typescript"),
        ("src/a.tsx", "tsx"),
        ("src/a.js", "javascript"),
        ("src/A.JAVA", "java"),
        ("main.go", "go"),
    ])
    def test_picks_grammar_by_extension(self, path, language):
        assert parser_for_path(path).language == language

    def test_unknown_extension_raises(self):
        with pytest.raises(ParseError, match="no grammar"):
            parser_for_path("notes.txt")


class TestExtractComments:
    """Tests for extract_comments()."""

    def test_associates_comment_with_following_function(self):
        text = "/** @autodocs */\nfunction add(a,b){return a+b}"

        (comment,) = _extract(text)

        assert comment.range == Span(start=0, end=16)
        assert comment.location == Location(line=1, column=1)
        assert comment.raw_text == "/** @autodocs */"
        assert comment.code_span.slice(text) == "function add(a,b){return a+b}"

    def test_ignores_unmanaged_comments(self):
        text = (
            "/* @autodocs */\nfunction a() {}\n"
            "// @autodocs\nfunction b() {}\n"
            "/** Regular docs. */\nfunction c() {}\n"
        )

        assert _extract(text) == []

    def test_comments_are_in_source_order(self):
        text = (
            "/** @autodocs */\nfunction a() {}\n\n"
            "/** @autodocs */\nfunction b() {}\n"
        )

        comments = _extract(text)

        assert [c.location.line for c in comments] == [1, 4]
        assert [c.code_span.slice(text) for c in comments] == ["function a() {}", "function b() {}"]
        assert comments[0].range.end <= comments[0].code_span.start

    def test_outermost_following_node_is_used(self):
        text = "/** @autodocs */\nexport const add = (a: number, b: number) => a + b;\n"

        (comment,) = _extract(text)

        assert comment.code_span.slice(text) == "export const add = (a: number, b: number) => a + b;"

    def test_method_inside_class(self):
        text = (
            "class Calc {\n"
            "  /** @autodocs */\n"
            "  add(a: number, b: number) { return a + b; }\n"
            "}\n"
        )

        (comment,) = _extract(text)

        assert comment.location == Location(line=2, column=3)
        assert comment.code_span.slice(text) == "add(a: number, b: number) { return a + b; }"

    def test_comment_at_end_of_file_has_no_code_span(self):
        text = "function a() {}\n/** @autodocs */\n"

        (comment,) = _extract(text)

        assert comment.code_span is None

    def test_non_ascii_offsets_are_characters(self):
        text = "const s = 'héllo wörld';\n/** @autodocs */\nfunction f() { return 'ü'; }\n"

        (comment,) = _extract(text)

        assert text[comment.range.start:comment.range.end] == "/** @autodocs */"
        assert comment.location == Location(line=2, column=1)
        assert comment.code_span.slice(text) == "function f() { return 'ü'; }"

    def test_invalid_syntax_raises_parse_error(self):
        with pytest.raises(ParseError, match="example.ts"):
            _extract("/** @autodocs */\nfunction (a, {\n")

    def test_java_block_comment(self):
        text = "class A {\n    /** @autodocs */\n    int twice(int x) { return 2 * x; }\n}\n"

        (comment,) = extract_comments(text, TreeSitterParser("java"), TAG, path="A.java")

        assert comment.code_span.slice(text) == "int twice(int x) { return 2 * x; }"
