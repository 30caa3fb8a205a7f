"""State file loading and validation.

This module handles loading and saving sync state (.gdocs-sync/state.yaml):
the target Google Doc and, per markdown file, the content hash of its last
successful sync.
"""

import os
from typing import Any, Dict
import yaml

from .errors import StateError, StateFilesystemError
from .models import DocumentRecord, SyncState


class StateManager:
    """Handles state file loading, validation, and saving.

    State file structure:
        root_document_id: "1AbCdEf"
        root_document_url: "https://docs.google.com/document/d/1AbCdEf/edit"
        last_synced: "2024-01-15T10:30:00Z"
        documents:
          intro.md:
            hash: "9f86d0..."
            document_id: "1AbCdEf"
            last_synced: "2024-01-15T10:30:00Z"

    If the file is missing or empty, it's treated as a fresh state (never
    synced).
    """

    DEFAULT_STATE_DIR = '.gdocs-sync'
    DEFAULT_STATE_FILE = 'state.yaml'

    @classmethod
    def load(cls, state_path: str) -> SyncState:
        """Load and parse state from a YAML file.

        Raises:
            StateFilesystemError: If file cannot be read (except FileNotFoundError)
            StateError: If state file is invalid or malformed
        """
        try:
            with open(state_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            # Missing state file is normal for first sync
            return SyncState()
        except PermissionError:
            raise StateFilesystemError(
                state_path,
                'read',
                'Permission denied'
            )
        except OSError as e:
            raise StateFilesystemError(
                state_path,
                'read',
                str(e)
            )

        if not content.strip():
            return SyncState()

        try:
            state_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise StateError(
                f"Invalid YAML syntax: {str(e)}"
            )

        if state_dict is None:
            return SyncState()

        if not isinstance(state_dict, dict):
            raise StateError(
                f"State must be a YAML dictionary, got {type(state_dict).__name__}"
            )

        return cls._parse_state(state_dict)

    @classmethod
    def save(cls, state_path: str, sync_state: SyncState) -> None:
        """Save state to a YAML file.

        Raises:
            StateFilesystemError: If file cannot be written
        """
        state_dict = {
            'root_document_id': sync_state.root_document_id,
            'root_document_url': sync_state.root_document_url,
            'last_synced': sync_state.last_synced,
            'documents': {
                path: {
                    'hash': record.hash,
                    'document_id': record.document_id,
                    'title': record.title,
                    'last_synced': record.last_synced,
                }
                for path, record in sync_state.documents.items()
            },
        }

        yaml_str = yaml.safe_dump(
            state_dict,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )

        state_dir = os.path.dirname(state_path)
        if state_dir:
            try:
                os.makedirs(state_dir, exist_ok=True)
            except OSError as e:
                raise StateFilesystemError(
                    state_dir,
                    'create_directory',
                    str(e)
                )

        try:
            with open(state_path, 'w', encoding='utf-8') as f:
                f.write(yaml_str)
        except PermissionError:
            raise StateFilesystemError(
                state_path,
                'write',
                'Permission denied'
            )
        except OSError as e:
            raise StateFilesystemError(
                state_path,
                'write',
                str(e)
            )

    @classmethod
    def _parse_state(cls, state_dict: Dict[str, Any]) -> SyncState:
        """Parse and validate state dictionary.

        Raises:
            StateError: If state is invalid
        """
        values = {}
        for name in ('root_document_id', 'root_document_url', 'last_synced'):
            value = state_dict.get(name)
            if value is not None and not isinstance(value, str):
                raise StateError(
                    f"Field '{name}' must be a string, got {type(value).__name__}",
                    name
                )
            values[name] = value.strip() if value and value.strip() else None

        documents_raw = state_dict.get('documents') or {}
        if not isinstance(documents_raw, dict):
            raise StateError(
                f"Field 'documents' must be a dictionary, got {type(documents_raw).__name__}",
                'documents'
            )

        documents = {}
        for path, record in documents_raw.items():
            if not isinstance(path, str) or not isinstance(record, dict):
                raise StateError(
                    f"Entry for '{path}' must map a path to a dictionary",
                    'documents'
                )
            missing = {'hash', 'document_id'} - set(record.keys())
            if missing:
                raise StateError(
                    f"Entry for '{path}' is missing: {', '.join(sorted(missing))}",
                    'documents'
                )
            documents[path] = DocumentRecord(
                hash=str(record['hash']),
                document_id=str(record['document_id']),
                last_synced=str(record.get('last_synced') or ''),
                title=str(record.get('title') or ''),
            )

        return SyncState(
            root_document_id=values['root_document_id'],
            root_document_url=values['root_document_url'],
            last_synced=values['last_synced'],
            documents=documents,
        )
