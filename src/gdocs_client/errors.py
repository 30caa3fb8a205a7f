"""Typed exception hierarchy for Google Docs related errors.

All exceptions inherit from GoogleDocsError (itself a SyncError) so callers can
catch remote failures as one family. The hierarchy encodes the recovery policy:

- TransientAPIError subclasses are retried by the retry logic.
- PermissionDeniedError triggers one re-authentication of the run initialization.
- Everything else is fatal for the document being synced.
"""

from typing import Optional


class SyncError(Exception):
    """Base exception for all gdocs-sync errors.

    Use this to catch any application-level error from the sync tool.
    """
    pass


class GoogleDocsError(SyncError):
    """Base exception for all Google Docs API errors."""
    pass


class InvalidCredentialsError(GoogleDocsError):
    """Raised when OAuth client settings are missing or authentication fails."""

    def __init__(self, client_id: str, reason: str):
        super().__init__(
            f"Google credentials are invalid (client: {client_id}): {reason}"
        )
        self.client_id = client_id
        self.reason = reason


class PermissionDeniedError(GoogleDocsError):
    """Raised when the API rejects the stored token (HTTP 401/403)."""

    def __init__(self, operation: str, status_code: Optional[int] = None):
        if status_code:
            message = f"Permission denied during {operation} (HTTP {status_code})"
        else:
            message = f"Permission denied during {operation}"
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code


class DocumentNotFoundError(GoogleDocsError):
    """Raised when a requested document does not exist."""

    def __init__(self, document_id: str):
        super().__init__(f"Document {document_id} not found")
        self.document_id = document_id


class TransientAPIError(GoogleDocsError):
    """Base for errors worth retrying (network trouble, rate limits, 5xx)."""
    pass


class APIUnreachableError(TransientAPIError):
    """Raised when the Google Docs API is not available or unreachable."""

    def __init__(self, endpoint: str):
        super().__init__(f"API is not available at {endpoint}")
        self.endpoint = endpoint


class RateLimitError(TransientAPIError):
    """Raised when the API answers 429 Too Many Requests."""

    def __init__(self, operation: str):
        super().__init__(f"Rate limit hit during {operation}")
        self.operation = operation


class APIAccessError(GoogleDocsError):
    """Raised when API access fails after retries or the request is rejected."""

    def __init__(self, message: str = "Google Docs API failure (after 3 retries)"):
        super().__init__(message)
