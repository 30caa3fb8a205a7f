"""Test helper modules for Google Docs sync testing.

- fake_docs_service: In-memory Docs API applying batches to a flat buffer
"""

from .fake_docs_service import FakeDocsService

__all__ = [
    'FakeDocsService',
]
