"""Tests for fingerprint computation and sync-state derivation."""

import hashlib

from core.fingerprint import annotate, compute_fingerprint, read_stored_fingerprint
from core.models import DocComment, Span, SyncState

CODE = "function add(a,b){return a+b}"


def _comment(raw: str, code_span=None) -> DocComment:
    return DocComment(range=Span(start=0, end=len(raw)), raw_text=raw, code_span=code_span)


class TestComputeFingerprint:
    """Tests for compute_fingerprint()."""

    def test_is_sha256_hex_of_utf8(self):
        assert compute_fingerprint(CODE) == hashlib.sha256(CODE.encode("utf-8")).hexdigest()

    def test_is_deterministic(self):
        assert compute_fingerprint(CODE) == compute_fingerprint(CODE)

    def test_whitespace_change_changes_hash(self):
        assert compute_fingerprint(CODE) != compute_fingerprint(CODE.replace("{", " {"))

    def test_non_ascii(self):
        assert compute_fingerprint("ü") == hashlib.sha256("ü".encode("utf-8")).hexdigest()


class TestReadStoredFingerprint:
    """Tests for read_stored_fingerprint()."""

    def test_reads_value_after_tag(self):
        raw = "/**\n * Adds.\n * @autodocs abc123\n */"

        assert read_stored_fingerprint(raw, "@autodocs") == "abc123"

    def test_missing_tag_gives_empty(self):
        assert read_stored_fingerprint("/** Adds. */", "@autodocs") == ""

    def test_first_occurrence_wins(self):
        raw = "/**\n * @autodocs first\n * @autodocs second\n */"

        assert read_stored_fingerprint(raw, "@autodocs") == "first"


class TestAnnotate:
    """Tests for annotate() and the derived sync state."""

    def test_fresh_comment_is_stale(self):
        text = "/** @autodocs */\n" + CODE
        comment = _comment("/** @autodocs */", Span(start=17, end=len(text)))

        annotate(text, [comment], "@autodocs")

        assert comment.computed_fingerprint == compute_fingerprint(CODE)
        assert comment.stored_fingerprint == ""
        assert comment.sync_state is SyncState.STALE

    def test_matching_fingerprint_is_synced(self):
        raw = f"/** @autodocs {compute_fingerprint(CODE)} */"
        text = raw + "\n" + CODE
        comment = _comment(raw, Span(start=len(raw) + 1, end=len(text)))

        annotate(text, [comment], "@autodocs")

        assert comment.sync_state is SyncState.SYNCED

    def test_extra_text_after_fingerprint_is_stale(self):
        raw = f"/** @autodocs {compute_fingerprint(CODE)} edited */"
        text = raw + "\n" + CODE
        comment = _comment(raw, Span(start=len(raw) + 1, end=len(text)))

        annotate(text, [comment], "@autodocs")

        assert comment.sync_state is SyncState.STALE

    def test_no_code_span_is_always_stale(self):
        raw = "/** @autodocs abc */"
        comment = _comment(raw)

        annotate(raw, [comment], "@autodocs")

        assert comment.computed_fingerprint == ""
        assert comment.sync_state is SyncState.STALE
