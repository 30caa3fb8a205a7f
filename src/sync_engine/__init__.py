"""Phase sequencing and run bookkeeping for markdown to Google Docs sync."""

from .collaborators import (
    AttachmentUploader,
    ContentHashStore,
    DiagramRenderer,
    StateStore,
    UploadResult,
)
from .models import (
    DocumentOutcome,
    DocumentStatus,
    PhaseState,
    SourceDocument,
    SyncRun,
)

__all__ = [
    "AttachmentUploader",
    "ContentHashStore",
    "DiagramRenderer",
    "StateStore",
    "UploadResult",
    "DocumentOutcome",
    "DocumentStatus",
    "PhaseState",
    "SourceDocument",
    "SyncRun",
]
