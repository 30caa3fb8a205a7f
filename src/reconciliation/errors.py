"""Exceptions raised while mapping deferred directives to real offsets."""

from typing import Optional, Tuple

from src.gdocs_client.errors import SyncError


class ReconciliationError(SyncError):
    """Base exception for reconciliation errors."""
    pass


class PositionResolutionError(ReconciliationError):
    """Raised when a directive cannot be mapped to a buffer range.

    Resolvers catch it per directive, log it and skip that one operation.
    """

    def __init__(self, literal_text: str, reason: str,
                 scope: Optional[Tuple[int, int]] = None):
        preview = literal_text if len(literal_text) <= 60 else literal_text[:57] + "..."
        message = f"Cannot resolve '{preview}': {reason}"
        if scope:
            message += f" (scope {scope[0]}-{scope[1]})"
        super().__init__(message)
        self.literal_text = literal_text
        self.reason = reason
        self.scope = scope
