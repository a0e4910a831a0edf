"""
Patch engine - rewrites every selected comment of a document in one pass.

Comment ranges are recorded against the text as it was parsed. Replacing a
comment with text of a different length shifts everything after it, so the
splice target of each later comment is its original range plus the sum of
the length changes of all *earlier* replacements. The fold below carries
that running delta in original-position order; it never searches the buffer
for comment text.
"""

from typing import List, Mapping, NamedTuple

from core.models import DocComment

# Replacement text keyed by the comment's original range.start
Replacements = Mapping[int, str]


class Splice(NamedTuple):
    start: int
    end: int
    text: str
    original: str


def plan_splices(comments: List[DocComment], replacements: Replacements) -> List[Splice]:
    """Live-buffer splice positions for every comment that has a replacement."""
    known = {c.range.start for c in comments}
    unknown = sorted(set(replacements) - known)
    if unknown:
        raise ValueError(f"Replacement for unknown comment offset(s): {unknown}")

    splices: List[Splice] = []
    delta = 0
    for comment in sorted(comments, key=lambda c: c.range.start):
        replacement = replacements.get(comment.range.start)
        if replacement is None:
            continue
        splices.append(Splice(
            start=comment.range.start + delta,
            end=comment.range.end + delta,
            text=replacement,
            original=comment.raw_text,
        ))
        delta += len(replacement) - len(comment.raw_text)
    return splices


def apply_patches(text: str, comments: List[DocComment], replacements: Replacements) -> str:
    """Return ``text`` with every selected comment replaced."""
    buffer = text
    for splice in plan_splices(comments, replacements):
        if buffer[splice.start:splice.end] != splice.original:
            raise ValueError(
                f"Text at {splice.start}:{splice.end} does not match the parsed "
                "comment; refusing to patch"
            )
        buffer = buffer[:splice.start] + splice.text + buffer[splice.end:]
    return buffer
