"""
Data models shared by the parser, fingerprint tracker, patcher and document.

All offsets are character offsets into the Python string holding the file
text *as it was parsed*. Once a patch pass starts replacing comments, those
offsets must be shifted by the running delta before touching the live buffer
(see core.patcher).
"""

from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field


# ──────────────────────────────────────────────
# Positions
# ──────────────────────────────────────────────

class Span(BaseModel):
    """Half-open ``[start, end)`` range of characters."""
    start: int = Field(ge=0)
    end: int = Field(ge=0)

    def slice(self, text: str) -> str:
        return text[self.start:self.end]


class Location(BaseModel):
    """1-based line and column of a position, for human-facing reports."""
    line: int = Field(ge=1)
    column: int = Field(ge=1)


# ──────────────────────────────────────────────
# Comments
# ──────────────────────────────────────────────

class SyncState(str, Enum):
    SYNCED = "synced"
    STALE = "stale"


class DocComment(BaseModel):
    """A managed documentation comment and the code it describes."""
    range: Span
    location: Optional[Location] = None
    raw_text: str
    code_span: Optional[Span] = None
    stored_fingerprint: str = ""
    computed_fingerprint: str = ""

    @property
    def sync_state(self) -> SyncState:
        if (
            self.stored_fingerprint
            and self.computed_fingerprint
            and self.stored_fingerprint == self.computed_fingerprint
        ):
            return SyncState.SYNCED
        return SyncState.STALE

    @property
    def is_synced(self) -> bool:
        return self.sync_state is SyncState.SYNCED

    def location_string(self, path: str) -> str:
        """``path:line:column`` or just ``path`` when no location is known."""
        if self.location is None:
            return path
        return f"{path}:{self.location.line}:{self.location.column}"


# ──────────────────────────────────────────────
# Per-comment outcome of a resync pass (tagged result)
# ──────────────────────────────────────────────

class Regenerated(BaseModel):
    kind: Literal["regenerated"] = "regenerated"
    text: str


class Failed(BaseModel):
    kind: Literal["failed"] = "failed"
    reason: str


class Skipped(BaseModel):
    kind: Literal["skipped"] = "skipped"
    reason: str


Outcome = Union[Regenerated, Failed, Skipped]


class CommentState(str, Enum):
    SYNCED = "synced"
    STALE_PENDING = "stale_pending"
    STALE_FAILED = "stale_failed"
    STALE_SKIPPED = "stale_skipped"
    STALE_REGENERATED = "stale_regenerated"


class CommentReport(BaseModel):
    comment: DocComment
    state: CommentState
    outcome: Optional[Outcome] = None


class SyncResult(BaseModel):
    """Result of ``Document.resync()`` for one file."""
    path: str
    text: str
    reports: List[CommentReport] = Field(default_factory=list)

    def _count(self, state: CommentState) -> int:
        return sum(1 for r in self.reports if r.state is state)

    @property
    def regenerated(self) -> int:
        return self._count(CommentState.STALE_REGENERATED)

    @property
    def failed(self) -> int:
        return self._count(CommentState.STALE_FAILED)

    @property
    def skipped(self) -> int:
        return self._count(CommentState.STALE_SKIPPED)

    @property
    def synced(self) -> int:
        return self._count(CommentState.SYNCED)

    @property
    def changed(self) -> bool:
        return self.regenerated > 0
