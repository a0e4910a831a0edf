"""
Reading and writing ``/** ... */`` documentation blocks.

A doc block is split into block tags the way TSDoc does it: a block tag is an
``@name`` token preceded by whitespace (``{@link x}`` inline tags and e-mail
addresses are not block tags), and its content runs until the next block tag
or the end of the comment. Tag names are compared case-insensitively.
"""

import re
from typing import List, NamedTuple

_BLOCK_TAG_RE = re.compile(r"(?<!\S)@[A-Za-z][A-Za-z0-9]*(?![\w@])")

# Lines a model sometimes emits despite being told not to decorate
_DELIMITER_LINES = frozenset({"/**", "/*", "*/", "**/"})


class BlockTag(NamedTuple):
    name: str
    content: str


def is_doc_comment(raw_text: str) -> bool:
    """True for ``/** ... */`` comments (``/**/`` is an empty plain comment)."""
    return raw_text.startswith("/**") and not raw_text.startswith("/**/")


def comment_body(raw_text: str) -> str:
    """Strip the delimiters and the leading ``*`` gutter from a block comment."""
    inner = raw_text
    if inner.startswith("/**"):
        inner = inner[3:]
    elif inner.startswith("/*"):
        inner = inner[2:]
    if inner.endswith("*/"):
        inner = inner[:-2]

    lines = []
    for line in inner.splitlines():
        line = line.strip()
        if line.startswith("*"):
            line = line[1:]
            if line.startswith(" "):
                line = line[1:]
        lines.append(line)
    return "\n".join(lines).strip()


def block_tags(raw_text: str) -> List[BlockTag]:
    """Return the block tags of a doc comment in order of appearance."""
    body = comment_body(raw_text)
    matches = list(_BLOCK_TAG_RE.finditer(body))
    tags: List[BlockTag] = []
    for i, m in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(body)
        content = " ".join(body[m.end():end].split())
        tags.append(BlockTag(name=m.group(0), content=content))
    return tags


def find_tag(raw_text: str, tag: str) -> List[BlockTag]:
    """All occurrences of ``tag`` in a doc comment (normally zero or one)."""
    wanted = tag.lower()
    return [t for t in block_tags(raw_text) if t.name.lower() == wanted]


def has_tag(text: str, tag: str) -> bool:
    """True if ``tag`` appears as a block tag anywhere in ``text``."""
    wanted = tag.lower()
    return any(m.group(0).lower() == wanted for m in _BLOCK_TAG_RE.finditer(text))


def sanitize_generated(lines: List[str], tag: str) -> List[str]:
    """
    Clean model output before it is wrapped into a comment.

    Drops bare delimiter lines and lines that carry the managed tag (the
    engine appends its own), strips a leading ``* `` gutter (Markdown ``**``
    is left alone) and neutralises ``*/`` so the generated text cannot close
    the comment early.
    """
    cleaned: List[str] = []
    for line in lines:
        stripped = line.strip()
        if stripped in _DELIMITER_LINES:
            continue
        if stripped == "*" or stripped.startswith("* "):
            line = stripped[2:]
        if has_tag(line, tag):
            continue
        cleaned.append(line.rstrip().replace("*/", "*\\/"))

    while cleaned and not cleaned[0]:
        cleaned.pop(0)
    while cleaned and not cleaned[-1]:
        cleaned.pop()
    return cleaned


def lines_to_docstring(lines: List[str], indent: str = "", newline: str = "\n") -> str:
    """
    Render lines as a ``/** ... */`` block.

    The opening ``/**`` is emitted without indentation because it replaces
    the old comment in place; every following line is prefixed with
    ``indent`` so the block lines up with the code it documents.
    """
    body = [f"{indent} * {line}" if line else f"{indent} *" for line in lines]
    return newline.join(["/**", *body, f"{indent} */"])
