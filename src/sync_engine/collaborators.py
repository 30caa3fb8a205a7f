"""Contracts for collaborators the sync engine depends on.

Diagram rendering, attachment upload and sync-state persistence live outside
the engine. The engine only sees these protocols plus an explicit content
hash keyed cache that callers create per run.
"""

import hashlib
from dataclasses import dataclass
from typing import Dict, Optional, Protocol, Union


@dataclass(frozen=True)
class UploadResult:
    """What an uploader reports for one file.

    Attributes:
        url: Publicly fetchable URL of the uploaded file
        id: Identifier assigned by the storage service
        content_hash: Hash the upload is addressed by
        cached: True when the file was already uploaded (stats only)
    """

    url: str
    id: str
    content_hash: str
    cached: bool = False


class DiagramRenderer(Protocol):
    def render(self, code: str, diagram_type: str) -> Optional[str]:
        """Render diagram source to a local image file.

        Returns:
            Path of the image, or None when the tool is missing or fails
        """
        ...


class AttachmentUploader(Protocol):
    def upload(self, local_path: str) -> UploadResult:
        ...


class StateStore(Protocol):
    def get_synced_hash(self, path: str) -> Optional[str]:
        ...

    def record_synced(self, path: str, content_hash: str, document_id: str) -> None:
        ...


class ContentHashStore:
    """In-memory cache keyed by content hash.

    Holds rendered-diagram and upload URLs for one run. Pass a fresh instance
    to each run (or test) instead of sharing one globally.
    """

    def __init__(self):
        self._entries: Dict[str, str] = {}
        self.hits = 0
        self.misses = 0

    @staticmethod
    def key_for(data: Union[str, bytes]) -> str:
        if isinstance(data, str):
            data = data.encode("utf-8")
        return hashlib.sha256(data).hexdigest()

    def get(self, key: str) -> Optional[str]:
        value = self._entries.get(key)
        if value is None:
            self.misses += 1
        else:
            self.hits += 1
        return value

    def put(self, key: str, value: str) -> None:
        self._entries[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
