"""Unit tests for sync_engine.models module."""

from src.sync_engine.models import (
    DocumentOutcome,
    DocumentStatus,
    PhaseState,
    SourceDocument,
    SyncRun,
    content_hash,
)


class TestSourceDocument:
    def test_hash_defaults_to_markdown_digest(self):
        document = SourceDocument(path="a.md", title="A", markdown="# A")

        assert document.content_hash == content_hash("# A")
        assert len(document.content_hash) == 64

    def test_explicit_hash_is_kept(self):
        document = SourceDocument(path="a.md", title="A", markdown="# A", content_hash="abc")

        assert document.content_hash == "abc"


class TestContentHash:
    def test_same_content_same_hash(self):
        assert content_hash("x") == content_hash("x")
        assert content_hash("x") != content_hash("y")


class TestSyncRun:
    """Aggregate counters over document outcomes."""

    def test_counts_by_status(self):
        run = SyncRun(document_id="doc1")
        for status in (DocumentStatus.CREATED, DocumentStatus.CREATED,
                       DocumentStatus.UPDATED, DocumentStatus.FAILED):
            run.record(DocumentOutcome(path="x.md", title="X", status=status))

        assert (run.created, run.updated, run.skipped, run.failed) == (2, 1, 0, 1)
        assert run.total == 4
        assert [o.status for o in run.failures] == [DocumentStatus.FAILED]

    def test_outcome_succeeded_only_when_done(self):
        outcome = DocumentOutcome(path="x.md", title="X")
        assert outcome.succeeded is False

        outcome.state = PhaseState.DONE
        assert outcome.succeeded is True
        assert outcome.stats.requests == 0
