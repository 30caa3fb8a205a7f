"""File mapper library for markdown to Google Docs sync.

This package loads the project configuration and maps markdown files on disk
to source documents for the sync engine.
"""

from .config_loader import ConfigLoader
from .errors import ConfigError, FileMapperError, FilesystemError, FrontmatterError
from .file_mapper import FileMapper
from .frontmatter_handler import FrontmatterHandler
from .models import MarkdownFile, SyncConfig

__all__ = [
    "ConfigLoader",
    "ConfigError",
    "FileMapperError",
    "FilesystemError",
    "FrontmatterError",
    "FileMapper",
    "FrontmatterHandler",
    "MarkdownFile",
    "SyncConfig",
]
