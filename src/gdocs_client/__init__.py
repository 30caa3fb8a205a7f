"""Google Docs client library for markdown sync.

This package wraps the Google Docs REST API v1: OAuth credential handling,
error translation into a typed hierarchy and retry of transient failures.
"""

from .errors import (
    SyncError,
    GoogleDocsError,
    InvalidCredentialsError,
    PermissionDeniedError,
    DocumentNotFoundError,
    TransientAPIError,
    APIUnreachableError,
    RateLimitError,
    APIAccessError,
)

__all__ = [
    "SyncError",
    "GoogleDocsError",
    "InvalidCredentialsError",
    "PermissionDeniedError",
    "DocumentNotFoundError",
    "TransientAPIError",
    "APIUnreachableError",
    "RateLimitError",
    "APIAccessError",
]
