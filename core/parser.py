"""
Source parser - turns a file's text into a syntax tree and finds managed comments.

The engine only needs three capabilities from a grammar: report every comment
with its position, tell whether the file parsed cleanly, and find the node
that immediately follows a given offset. ``SourceParser`` captures exactly
that; ``TreeSitterParser`` implements it on top of tree-sitter grammars so
any language with ``/* ... */`` block comments can be plugged in through
``LANGUAGES``.

Tree-sitter reports UTF-8 byte offsets. Everything that leaves this module
uses character offsets into the Python string.
"""

import functools
import itertools
import logging
import os
from abc import ABC, abstractmethod
from bisect import bisect_left
from dataclasses import dataclass
from typing import Callable, List, Optional

from tree_sitter_language_pack import get_parser

from core.docblock import find_tag, is_doc_comment
from core.exceptions import ParseError
from core.models import DocComment, Location, Span

logger = logging.getLogger(__name__)


# Map file extensions to tree-sitter grammars
LANG_MAP = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".java": "java",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".hpp": "cpp",
    ".cc": "cpp",
    ".go": "go",
    ".rs": "rust",
}

# Node types grammars use for comments
COMMENT_TYPES = frozenset({"comment", "block_comment", "line_comment"})


@dataclass(frozen=True)
class RawComment:
    """A comment as reported by the parser, before tag filtering."""
    block: bool
    text: str
    start: int
    end: int
    line: int
    column: int


OnComment = Callable[[RawComment], None]


class SyntaxTree(ABC):
    """Parsed file; answers "which node comes right after this offset"."""

    @abstractmethod
    def node_after(self, offset: int) -> Optional[Span]:
        """Outermost node starting at or after ``offset``, or None."""


class SourceParser(ABC):
    """Capability interface over a concrete grammar."""

    @abstractmethod
    def parse(self, text: str, on_comment: OnComment, path: str = "<string>") -> SyntaxTree:
        """Parse ``text``, calling ``on_comment`` for every comment in order.

        Raises ParseError if the text is not valid in the grammar.
        """


# ──────────────────────────────────────────────
# Byte <-> character offsets
# ──────────────────────────────────────────────

class _OffsetIndex:
    """Converts between UTF-8 byte offsets and string indices."""

    def __init__(self, text: str):
        self._ascii = text.isascii()
        self._byte_starts: List[int] = []
        if not self._ascii:
            # byte offset at which each character starts, plus the total length
            self._byte_starts = list(
                itertools.accumulate((len(ch.encode("utf-8")) for ch in text), initial=0)
            )

    def to_char(self, byte_offset: int) -> int:
        if self._ascii:
            return byte_offset
        return bisect_left(self._byte_starts, byte_offset)

    def to_byte(self, char_offset: int) -> int:
        if self._ascii:
            return char_offset
        return self._byte_starts[char_offset]


# ──────────────────────────────────────────────
# Tree-sitter implementation
# ──────────────────────────────────────────────

class _TreeSitterTree(SyntaxTree):

    def __init__(self, root, index: _OffsetIndex):
        self._root = root
        self._index = index

    def node_after(self, offset: int) -> Optional[Span]:
        pos = self._index.to_byte(offset)
        # pre-order walk: the first hit is the outermost node after ``pos``
        stack = list(reversed(self._root.children))
        while stack:
            node = stack.pop()
            if node.end_byte < pos or node.type in COMMENT_TYPES:
                continue
            if node.is_named and node.start_byte >= pos:
                return Span(
                    start=self._index.to_char(node.start_byte),
                    end=self._index.to_char(node.end_byte),
                )
            stack.extend(reversed(node.children))
        return None


@functools.lru_cache(maxsize=None)
def _ts_parser(language: str):
    return get_parser(language)


class TreeSitterParser(SourceParser):
    """SourceParser backed by a tree-sitter grammar."""

    def __init__(self, language: str):
        self.language = language

    def parse(self, text: str, on_comment: OnComment, path: str = "<string>") -> SyntaxTree:
        source = text.encode("utf-8")
        tree = _ts_parser(self.language).parse(source)
        root = tree.root_node
        if root.has_error:
            line = _first_error_line(root)
            where = f" near line {line}" if line else ""
            raise ParseError(path, f"invalid {self.language} syntax{where}")

        index = _OffsetIndex(text)
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type in COMMENT_TYPES:
                start = index.to_char(node.start_byte)
                end = index.to_char(node.end_byte)
                comment_text = text[start:end]
                line_start = text.rfind("\n", 0, start) + 1
                on_comment(RawComment(
                    block=comment_text.startswith("/*"),
                    text=comment_text,
                    start=start,
                    end=end,
                    line=node.start_point[0] + 1,
                    column=start - line_start + 1,
                ))
                continue
            stack.extend(reversed(node.children))

        logger.debug("Parsed %s as %s (%d chars)", path, self.language, len(text))
        return _TreeSitterTree(root, index)


def _first_error_line(root) -> Optional[int]:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node.start_point[0] + 1
        if node.has_error:
            stack.extend(reversed(node.children))
    return None


def parser_for_path(path: str) -> SourceParser:
    """Pick the grammar for a file from its extension."""
    ext = os.path.splitext(path)[1].lower()
    language = LANG_MAP.get(ext)
    if language is None:
        raise ParseError(path, f"no grammar registered for '{ext or path}' files")
    return TreeSitterParser(language)


# ──────────────────────────────────────────────
# Managed comment extraction
# ──────────────────────────────────────────────

def extract_comments(
    text: str,
    parser: SourceParser,
    tag: str,
    path: str = "<string>",
) -> List[DocComment]:
    """
    Parse ``text`` and return its managed comments in source order, each
    associated with the node that follows it.
    """
    managed: List[RawComment] = []

    def on_comment(raw: RawComment) -> None:
        if raw.block and is_doc_comment(raw.text) and find_tag(raw.text, tag):
            managed.append(raw)

    tree = parser.parse(text, on_comment, path=path)

    comments: List[DocComment] = []
    for raw in sorted(managed, key=lambda c: c.start):
        code_span = tree.node_after(raw.end)
        if code_span is None:
            logger.warning("%s:%d:%d: no code follows this comment", path, raw.line, raw.column)
        comments.append(DocComment(
            range=Span(start=raw.start, end=raw.end),
            location=Location(line=raw.line, column=raw.column),
            raw_text=raw.text,
            code_span=code_span,
        ))

    logger.debug("Parsing file %s { content-length: %d, comments: %d }", path, len(text), len(comments))
    return comments
