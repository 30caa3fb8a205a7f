"""Command-line interface for markdown to Google Docs sync.

This package provides the `gdocs-sync` CLI tool that loads the project
configuration, selects markdown files and hands them to the sync engine, with
progress indication and exit codes for scripting.
"""

from .sync_command import SyncCommand
from .init_command import InitCommand
from .models import DocumentRecord, ExitCode, SyncState
from .errors import (
    CLIError,
    ConfigNotFoundError,
    InitError,
    StateError,
    StateFilesystemError,
)

__all__ = [
    'SyncCommand',
    'InitCommand',
    'DocumentRecord',
    'ExitCode',
    'SyncState',
    'CLIError',
    'ConfigNotFoundError',
    'InitError',
    'StateError',
    'StateFilesystemError',
]
