"""Data models for the sync engine.

A SyncRun lives for one CLI invocation and collects one DocumentOutcome per
document handed to the PhaseCoordinator.
"""

import hashlib
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional


class PhaseState(Enum):
    """Per-document state machine positions."""

    IDLE = "idle"
    CONTENT_APPLIED = "content_applied"
    TABLES_POPULATED = "tables_populated"
    FORMATTED = "formatted"
    LINKS_RESOLVED = "links_resolved"
    DONE = "done"
    FAILED = "failed"


class DocumentStatus(Enum):
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


def content_hash(content: str) -> str:
    """SHA-256 hex digest used for change detection."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


@dataclass
class SourceDocument:
    """A markdown document ready to be synced.

    Attributes:
        path: Project relative path, used as the state key
        title: Display title
        markdown: Markdown body without front matter
        content_hash: Hash of the full file content
        base_dir: Directory relative image and attachment paths resolve from
    """

    path: str
    title: str
    markdown: str
    content_hash: str = ""
    base_dir: Optional[Path] = None

    def __post_init__(self):
        if not self.content_hash:
            self.content_hash = content_hash(self.markdown)


@dataclass
class DocumentStats:
    """Counters gathered while one document moves through the phases."""

    requests: int = 0
    directives_resolved: int = 0
    directives_skipped: int = 0
    cells_populated: int = 0
    links_resolved: int = 0
    images_inserted: int = 0
    images_fallback: int = 0
    placeholders_unresolved: int = 0
    blocks_dropped: int = 0


@dataclass
class DocumentOutcome:
    """Result of syncing one document.

    Attributes:
        path: Project relative path of the source file
        title: Display title
        state: Last state reached (DONE or FAILED)
        status: Created/updated/skipped/failed classification
        error: Error message when the document failed
        failed_phase: State the document was in when it failed
        stats: Phase counters
    """

    path: str
    title: str
    state: PhaseState = PhaseState.IDLE
    status: Optional[DocumentStatus] = None
    error: Optional[str] = None
    failed_phase: Optional[PhaseState] = None
    stats: DocumentStats = field(default_factory=DocumentStats)

    @property
    def succeeded(self) -> bool:
        return self.state == PhaseState.DONE


@dataclass
class SyncRun:
    """Aggregate of all document outcomes of one invocation."""

    document_id: Optional[str] = None
    started_at: datetime = field(default_factory=datetime.now)
    outcomes: List[DocumentOutcome] = field(default_factory=list)

    def record(self, outcome: DocumentOutcome) -> None:
        self.outcomes.append(outcome)

    def _count(self, status: DocumentStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @property
    def created(self) -> int:
        return self._count(DocumentStatus.CREATED)

    @property
    def updated(self) -> int:
        return self._count(DocumentStatus.UPDATED)

    @property
    def skipped(self) -> int:
        return self._count(DocumentStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(DocumentStatus.FAILED)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def failures(self) -> List[DocumentOutcome]:
        return [o for o in self.outcomes if o.status == DocumentStatus.FAILED]
