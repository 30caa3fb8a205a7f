"""Exceptions raised while classifying and compiling markdown."""

from src.gdocs_client.errors import SyncError


class CompilerError(SyncError):
    """Base exception for markdown compiler errors."""
    pass


class ClassificationError(CompilerError):
    """Raised when a block is malformed and cannot keep its detected kind.

    The classifier catches it and degrades the offending lines to paragraphs.
    """

    def __init__(self, line_number: int, kind: str, reason: str):
        super().__init__(
            f"Malformed {kind} at line {line_number}: {reason}"
        )
        self.line_number = line_number
        self.kind = kind
        self.reason = reason
