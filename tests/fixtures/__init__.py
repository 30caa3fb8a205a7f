"""Test fixtures for markdown to Google Docs sync tests.

This module provides sample markdown documents shared by the unit tests.
"""

from .sample_markdown import (
    SAMPLE_MARKDOWN_SIMPLE,
    SAMPLE_MARKDOWN_WITH_TABLES,
    SAMPLE_MARKDOWN_WITH_CODE_BLOCKS,
    SAMPLE_MARKDOWN_WITH_LINKS,
    FULL_FEATURED_MARKDOWN,
)

__all__ = [
    "SAMPLE_MARKDOWN_SIMPLE",
    "SAMPLE_MARKDOWN_WITH_TABLES",
    "SAMPLE_MARKDOWN_WITH_CODE_BLOCKS",
    "SAMPLE_MARKDOWN_WITH_LINKS",
    "FULL_FEATURED_MARKDOWN",
]
