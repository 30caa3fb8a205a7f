"""Data models for CLI operations.

All models use dataclasses for clean, type-safe data structures, following
the patterns established in src/file_mapper/models.py.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from typing import Dict, Iterable, List, Optional


class ExitCode(IntEnum):
    """Exit codes for CLI operations.

    - SUCCESS (0): Operation completed successfully
    - GENERAL_ERROR (1): General error (config issues, validation failures)
    - SYNC_FAILURES (2): One or more documents failed to sync
    - AUTH_ERROR (3): Authentication or authorization failure
    - NETWORK_ERROR (4): Network connectivity or API availability issues

    Example:
        >>> sys.exit(ExitCode.SUCCESS)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    SYNC_FAILURES = 2
    AUTH_ERROR = 3
    NETWORK_ERROR = 4


@dataclass
class DocumentRecord:
    """What was last synced for one markdown file.

    Attributes:
        hash: SHA-256 of the file content at last successful sync
        document_id: Google Doc the content was written to
        last_synced: ISO 8601 timestamp of that sync
        title: Display title the document was synced under
    """
    hash: str
    document_id: str
    last_synced: str
    title: str = ""


@dataclass
class SyncState:
    """Project-level sync state tracked in .gdocs-sync/state.yaml.

    Implements the StateStore contract used by the sync engine.

    Attributes:
        root_document_id: Google Doc all documents are appended to
        root_document_url: Browser URL of that document
        last_synced: ISO 8601 timestamp of the last completed run
        documents: Per-file records keyed by docs-relative path

    Example:
        >>> state = SyncState()
        >>> state.record_synced("intro.md", "ab12...", "1AbC")
        >>> state.get_synced_hash("intro.md")
        'ab12...'
    """
    root_document_id: Optional[str] = None
    root_document_url: Optional[str] = None
    last_synced: Optional[str] = None
    documents: Dict[str, DocumentRecord] = field(default_factory=dict)

    def get_synced_hash(self, path: str) -> Optional[str]:
        record = self.documents.get(path)
        return record.hash if record else None

    def record_synced(self, path: str, content_hash: str, document_id: str) -> None:
        self.documents[path] = DocumentRecord(
            hash=content_hash,
            document_id=document_id,
            last_synced=_now_iso(),
        )

    def retain_documents(self, paths: Iterable[str]) -> List[str]:
        """Drop the records of every document not in paths.

        Returns:
            The dropped paths, sorted
        """
        keep = set(paths)
        dropped = sorted(path for path in self.documents if path not in keep)
        for path in dropped:
            del self.documents[path]
        return dropped

    def mark_run_completed(self) -> None:
        self.last_synced = _now_iso()


def _now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
