"""API wrapper for the Google Docs REST API v1.

This module talks to the Docs API through google-auth's AuthorizedSession (a
requests.Session that signs every call) and translates HTTP failures into the
typed exception hierarchy. Every call goes through the transient-error retry
logic.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import AuthorizedSession
from requests.exceptions import Timeout, ConnectTimeout, ReadTimeout, ConnectionError

from .auth import Authenticator
from .errors import (
    GoogleDocsError,
    PermissionDeniedError,
    DocumentNotFoundError,
    APIUnreachableError,
    RateLimitError,
    APIAccessError,
)
from .retry_logic import retry_on_transient

logger = logging.getLogger(__name__)

DOCS_API_BASE = "https://docs.googleapis.com/v1/documents"
DOCUMENT_URL_TEMPLATE = "https://docs.google.com/document/d/{document_id}/edit"


class APIWrapper:
    """Thin client over the Docs REST API with error translation.

    Example:
        >>> api = APIWrapper(Authenticator())
        >>> doc = api.get_document("1AbCdEf")
        >>> api.batch_update("1AbCdEf", [{"insertText": {...}}])
    """

    def __init__(self, authenticator: Authenticator, timeout: int = 30):
        self._authenticator = authenticator
        self._timeout = timeout
        self._session: Optional[AuthorizedSession] = None

    @property
    def authenticator(self) -> Authenticator:
        return self._authenticator

    def _get_session(self) -> AuthorizedSession:
        """Get or lazily create the authorized HTTP session.

        Raises:
            InvalidCredentialsError: If OAuth client settings are missing
        """
        if self._session is None:
            creds = self._authenticator.get_credentials()
            self._session = AuthorizedSession(creds)
        return self._session

    def reset(self) -> None:
        """Drop the current session so the next call re-reads credentials."""
        if self._session is not None:
            self._session.close()
        self._session = None

    def _validate_document_id(self, document_id: str) -> None:
        """Validate that a document ID is safe to put in a URL path.

        Raises:
            ValueError: If document_id is empty or contains unexpected characters
        """
        if not document_id or not str(document_id).strip():
            raise ValueError("document_id cannot be empty")

        if not re.match(r'^[A-Za-z0-9_-]+$', str(document_id).strip()):
            raise ValueError(
                f"Invalid document_id format: '{document_id}'. "
                f"Document IDs contain only letters, digits, '-' and '_'."
            )

    def _sanitize_credentials(self, text: str) -> str:
        """Mask tokens and secrets in error messages before they are logged.

        Example:
            >>> api._sanitize_credentials("Bearer ya29.abc failed")
            'Bearer ***REDACTED*** failed'
        """
        if not text:
            return text

        sanitized = re.sub(
            r'Authorization:\s*[^\n\r]+',
            'Authorization: ***REDACTED***',
            text,
            flags=re.IGNORECASE
        )
        sanitized = re.sub(
            r'Bearer\s+[^\s\n\r]+',
            'Bearer ***REDACTED***',
            sanitized,
            flags=re.IGNORECASE
        )
        sanitized = re.sub(
            r'(access_token|refresh_token|client_secret)["\']?\s*[:=]\s*["\']?([^"\'\s&,}]+)',
            r'\1=***REDACTED***',
            sanitized,
            flags=re.IGNORECASE
        )
        # Google access tokens
        sanitized = re.sub(r'\bya29\.[\w.-]+', '***REDACTED***', sanitized)
        return sanitized

    def _translate_error(self, exception: Exception, operation: str) -> Exception:
        """Translate HTTP exceptions to typed Google Docs exceptions.

        Args:
            exception: The original exception
            operation: Description of the operation that failed, e.g.
                "get_document(1AbC)"

        Returns:
            Exception: Translated exception (one of our typed exceptions)
        """
        if isinstance(exception, GoogleDocsError):
            return exception

        if isinstance(exception, (Timeout, ConnectTimeout, ReadTimeout, ConnectionError)):
            return APIUnreachableError(endpoint=DOCS_API_BASE)

        if isinstance(exception, RefreshError):
            return PermissionDeniedError(operation=operation)

        status_code = getattr(exception, 'status_code', None)
        response = getattr(exception, 'response', None)
        if status_code is None and response is not None:
            status_code = getattr(response, 'status_code', None)

        if status_code in (401, 403):
            return PermissionDeniedError(operation=operation, status_code=status_code)

        if status_code == 404:
            document_id = "unknown"
            match = re.search(r'\(([^)]+)\)', operation)
            if match:
                document_id = match.group(1)
            return DocumentNotFoundError(document_id=document_id)

        if status_code == 429:
            return RateLimitError(operation=operation)

        if isinstance(status_code, int) and 500 <= status_code < 600:
            return APIUnreachableError(endpoint=DOCS_API_BASE)

        detail = str(exception)
        if response is not None:
            detail = _extract_api_message(response) or detail

        safe_error_msg = self._sanitize_credentials(detail)
        logger.error(f"API operation failed: {operation} - {safe_error_msg}")
        return APIAccessError(
            f"Google Docs API failure during {operation}: {safe_error_msg}"
        )

    def _call(self, method: str, url: str, operation: str,
              payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        def _send():
            try:
                session = self._get_session()
                response = session.request(
                    method, url, json=payload, timeout=self._timeout
                )
                response.raise_for_status()
                return response.json() if response.content else {}
            except Exception as e:
                raise self._translate_error(e, operation) from e

        return retry_on_transient(_send)

    def get_document(self, document_id: str) -> Dict[str, Any]:
        """Fetch the full structural JSON of a document.

        Raises:
            PermissionDeniedError: If the token is rejected
            DocumentNotFoundError: If the document doesn't exist
            APIAccessError: If API access fails after retries
        """
        self._validate_document_id(document_id)
        return self._call(
            "GET",
            f"{DOCS_API_BASE}/{document_id}",
            f"get_document({document_id})",
        )

    def create_document(self, title: str) -> Dict[str, Any]:
        """Create an empty document and return its JSON (includes documentId)."""
        result = self._call(
            "POST", DOCS_API_BASE, f"create_document({title})", {"title": title}
        )
        logger.info(f"Created document '{title}' ({result.get('documentId')})")
        return result

    def batch_update(self, document_id: str,
                     requests: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Submit one atomic batch of mutation requests.

        An empty batch is not sent.

        Raises:
            PermissionDeniedError: If the token is rejected
            APIAccessError: If the batch is rejected or retries are exhausted
        """
        self._validate_document_id(document_id)
        if not requests:
            return {"documentId": document_id, "replies": []}

        logger.debug(f"Submitting batch of {len(requests)} request(s) to {document_id}")
        return self._call(
            "POST",
            f"{DOCS_API_BASE}/{document_id}:batchUpdate",
            f"batch_update({document_id})",
            {"requests": requests},
        )

    @staticmethod
    def document_url(document_id: str) -> str:
        return DOCUMENT_URL_TEMPLATE.format(document_id=document_id)


def _extract_api_message(response: Any) -> Optional[str]:
    """Pull the human-readable message out of a Google API error body."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            return error.get("message")
    return None
