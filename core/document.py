"""
Document - one source file, its managed comments, and the two operations
the CLI runs on it.

  check()   parse + fingerprint, report every comment that is out of date.
  resync()  parse + fingerprint, regenerate every stale comment through the
            generation client, then patch all successful results into the
            text in a single pass.

A Document is created per file per run; nothing is cached between runs
except the fingerprint written inside each comment.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional

from core.docblock import lines_to_docstring, sanitize_generated
from core.exceptions import GenerationError, MissingCodeSpanError, WriteError
from core.fingerprint import annotate
from core.generator import GenerationClient
from core.loader import read_source
from core.models import (
    CommentReport,
    CommentState,
    DocComment,
    Failed,
    Outcome,
    Regenerated,
    Skipped,
    SyncResult,
)
from core.parser import SourceParser, extract_comments, parser_for_path
from core.patcher import apply_patches

logger = logging.getLogger(__name__)

DEFAULT_TAG = "@autodocs"
STOP_SEQUENCES = ("*/",)


class Document:
    """A source file whose managed comments can be checked and regenerated."""

    def __init__(
        self,
        path: str,
        text: Optional[str] = None,
        parser: Optional[SourceParser] = None,
        tag: str = DEFAULT_TAG,
    ):
        self.path = path
        self.text = read_source(path) if text is None else text
        self.parser = parser or parser_for_path(path)
        self.tag = tag
        self.comments: List[DocComment] = []

    # ── parsing ───────────────────────────────

    def parse(self) -> List[DocComment]:
        """Re-extract and fingerprint the managed comments of the current text."""
        comments = extract_comments(self.text, self.parser, self.tag, path=self.path)
        self.comments = annotate(self.text, comments, self.tag)
        return self.comments

    def outdated_comments(self) -> List[DocComment]:
        return [c for c in self.parse() if not c.is_synced]

    # ── check ─────────────────────────────────

    def check(self) -> List[str]:
        """Locations (``path:line:column``) of every comment that is out of date."""
        return [c.location_string(self.path) for c in self.outdated_comments()]

    # ── resync ────────────────────────────────

    def resync(self, generator: GenerationClient, max_workers: int = 4) -> SyncResult:
        """
        Regenerate every stale comment and patch the results into ``text``.

        Generation calls run concurrently (at most ``max_workers`` at a time);
        the patch pass always applies them in source order. A failed call
        leaves its comment byte-for-byte untouched.
        """
        comments = self.parse()
        reports: Dict[int, CommentReport] = {}
        pending: List[DocComment] = []

        for comment in comments:
            key = comment.range.start
            if comment.is_synced:
                logger.debug("Comment %s is already synced", comment.computed_fingerprint)
                reports[key] = CommentReport(comment=comment, state=CommentState.SYNCED)
            elif comment.code_span is None:
                reason = str(MissingCodeSpanError(
                    f"no code follows the comment at {comment.location_string(self.path)}"
                ))
                reports[key] = CommentReport(
                    comment=comment,
                    state=CommentState.STALE_SKIPPED,
                    outcome=Skipped(reason=reason),
                )
            else:
                reports[key] = CommentReport(comment=comment, state=CommentState.STALE_PENDING)
                pending.append(comment)

        if pending:
            with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(pending)))) as executor:
                futures = {
                    executor.submit(self._regenerate, comment, generator): comment
                    for comment in pending
                }
                for future in as_completed(futures):
                    comment = futures[future]
                    outcome = future.result()
                    state = (
                        CommentState.STALE_REGENERATED
                        if isinstance(outcome, Regenerated)
                        else CommentState.STALE_FAILED
                    )
                    reports[comment.range.start] = CommentReport(
                        comment=comment, state=state, outcome=outcome,
                    )

        replacements = {
            key: report.outcome.text
            for key, report in reports.items()
            if isinstance(report.outcome, Regenerated)
        }
        self.text = apply_patches(self.text, comments, replacements)

        return SyncResult(
            path=self.path,
            text=self.text,
            reports=[reports[c.range.start] for c in comments],
        )

    def _regenerate(self, comment: DocComment, generator: GenerationClient) -> Outcome:
        """Ask for new documentation for one comment; never raises."""
        snippet = comment.code_span.slice(self.text)
        try:
            lines = sanitize_generated(generator.generate(snippet, list(STOP_SEQUENCES)), self.tag)
            if not lines:
                raise GenerationError("completion contained no documentation lines")
        except GenerationError as exc:
            logger.warning("%s: %s", comment.location_string(self.path), exc)
            return Failed(reason=str(exc))
        except Exception as exc:
            logger.warning("%s: generation client error: %r", comment.location_string(self.path), exc)
            return Failed(reason=f"{type(exc).__name__}: {exc}")

        return Regenerated(text=lines_to_docstring(
            [*lines, f"{self.tag} {comment.computed_fingerprint}"],
            indent=self._indent_of(comment),
            newline="\r\n" if "\r\n" in self.text else "\n",
        ))

    def _indent_of(self, comment: DocComment) -> str:
        """Leading whitespace of the line the comment starts on."""
        line_start = self.text.rfind("\n", 0, comment.range.start) + 1
        prefix = self.text[line_start:comment.range.start]
        return prefix[:len(prefix) - len(prefix.lstrip())]

    # ── write-back ────────────────────────────

    def write(self) -> None:
        """Overwrite the backing file with the current text."""
        try:
            with open(self.path, "w", encoding="utf-8", newline="") as fh:
                fh.write(self.text)
        except OSError as e:
            raise WriteError(self.path, str(e)) from e
