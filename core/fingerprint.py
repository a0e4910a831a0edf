"""
Fingerprint tracker - decides whether a managed comment still matches its code.

The fingerprint is the SHA-256 hex digest of the exact text of the code span
following the comment. It is written into the comment as the argument of the
managed tag (``@autodocs <hex>``) when the comment is generated, and read back
on every later run.
"""

import hashlib
import logging
from typing import List

from core.docblock import find_tag
from core.models import DocComment

logger = logging.getLogger(__name__)


def compute_fingerprint(code: str) -> str:
    """Stable content hash of a code span."""
    return hashlib.sha256(code.encode("utf-8")).hexdigest()


def read_stored_fingerprint(raw_text: str, tag: str) -> str:
    """Return the value written after ``tag`` in the comment, or ``""``."""
    occurrences = find_tag(raw_text, tag)
    if not occurrences:
        return ""
    if len(occurrences) > 1:
        logger.warning(
            "%s appears %d times in one comment; only the first is used",
            tag, len(occurrences),
        )
    return occurrences[0].content


def annotate(text: str, comments: List[DocComment], tag: str) -> List[DocComment]:
    """
    Fill the stored and computed fingerprints of every comment in place.

    Comments without a code span keep an empty computed fingerprint and are
    therefore always stale.
    """
    for comment in comments:
        comment.stored_fingerprint = read_stored_fingerprint(comment.raw_text, tag)
        if comment.code_span is None:
            comment.computed_fingerprint = ""
            continue
        comment.computed_fingerprint = compute_fingerprint(comment.code_span.slice(text))
        logger.debug(
            "Comment at %d { new: %s old: %s }",
            comment.range.start,
            comment.computed_fingerprint,
            comment.stored_fingerprint or "-",
        )
    return comments
