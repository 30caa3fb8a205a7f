"""Discovers markdown files and maps them to source documents.

Files are ordered the way a docs site shows them: directory by directory, and
inside a directory by the ``sidebar_position`` front matter field, then by
name.
"""

import fnmatch
import logging
import os
import re
from pathlib import Path
from typing import List, Optional, Sequence

from src.sync_engine.models import SourceDocument, content_hash

from .errors import FilesystemError
from .frontmatter_handler import FrontmatterHandler
from .models import MarkdownFile, SyncConfig

logger = logging.getLogger(__name__)

# Maximum file size to read into memory (10 MB)
MAX_FILE_SIZE = 10 * 1024 * 1024

H1_PATTERN = re.compile(r'^#\s+(.+)$', re.MULTILINE)


class FileMapper:
    """Maps markdown files under a docs directory to SourceDocuments.

    Example:
        >>> mapper = FileMapper(config)
        >>> documents = mapper.scan_documents()
    """

    def __init__(self, config: Optional[SyncConfig] = None):
        self.config = config or SyncConfig()

    def _validate_path_safety(self, file_path: str, base_directory: str) -> None:
        """Validate that a file path is within the base directory.

        Raises:
            FilesystemError: If path is outside base directory
        """
        real_base = os.path.realpath(base_directory)
        real_path = os.path.realpath(file_path)

        if not real_path.startswith(real_base + os.sep) and real_path != real_base:
            raise FilesystemError(
                file_path,
                'validate',
                f'Path traversal detected: {file_path} is outside base directory {base_directory}'
            )

    def _validate_file_size(self, file_path: str, max_size: int = MAX_FILE_SIZE) -> None:
        """Refuse files too large to read into memory.

        Raises:
            FilesystemError: If file size exceeds maximum allowed size
        """
        try:
            file_size = os.path.getsize(file_path)
        except OSError as e:
            raise FilesystemError(
                file_path,
                'stat',
                f'Failed to check file size: {e}'
            )
        if file_size > max_size:
            size_mb = file_size / (1024 * 1024)
            max_mb = max_size / (1024 * 1024)
            raise FilesystemError(
                file_path,
                'read',
                f'File size ({size_mb:.2f} MB) exceeds maximum allowed size ({max_mb:.0f} MB).'
            )

    def scan(self, directory: Optional[str] = None) -> List[MarkdownFile]:
        """Read every markdown file under a directory.

        Files that cannot be parsed are skipped with a warning.

        Args:
            directory: Directory to scan (default: configured docs_dir)

        Returns:
            MarkdownFiles in sidebar order

        Raises:
            FilesystemError: If the directory is missing or unreadable
        """
        root = directory or self.config.docs_dir
        if not os.path.isdir(root):
            raise FilesystemError(root, 'read', 'Directory does not exist')

        files: List[MarkdownFile] = []
        try:
            for current, dirs, filenames in os.walk(root):
                dirs.sort()
                for filename in filenames:
                    if not self._matches(filename, self.config.file_patterns):
                        continue
                    file_path = os.path.join(current, filename)
                    relative = Path(os.path.relpath(file_path, root)).as_posix()
                    if self._matches(relative, self.config.exclude_patterns):
                        logger.debug(f"Excluded {relative}")
                        continue
                    try:
                        files.append(self.read_file(file_path, root))
                    except Exception as e:
                        logger.warning(f"Failed to read {file_path}: {e} - skipping")
        except PermissionError:
            raise FilesystemError(root, 'read', 'Permission denied')

        files.sort(key=_sidebar_key)
        logger.debug(f"Found {len(files)} markdown file(s) in {root}")
        return files

    def read_file(self, file_path: str, base_directory: Optional[str] = None) -> MarkdownFile:
        """Read and split a single markdown file.

        Raises:
            FilesystemError: If the file is unsafe or unreadable
            FrontmatterError: If front matter is malformed
        """
        base = base_directory or os.path.dirname(os.path.abspath(file_path))
        self._validate_path_safety(file_path, base)
        self._validate_file_size(file_path)

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                raw_content = f.read()
        except FileNotFoundError:
            raise FilesystemError(file_path, 'read', 'File not found')
        except PermissionError:
            raise FilesystemError(file_path, 'read', 'Permission denied')
        except (OSError, UnicodeDecodeError) as e:
            raise FilesystemError(file_path, 'read', str(e))

        frontmatter, content = FrontmatterHandler.split(file_path, raw_content)
        return MarkdownFile(
            file_path=file_path,
            relative_path=Path(os.path.relpath(file_path, base)).as_posix(),
            frontmatter=frontmatter,
            content=content,
            raw_content=raw_content,
        )

    def scan_documents(self, directory: Optional[str] = None) -> List[SourceDocument]:
        return [self.to_source_document(f) for f in self.scan(directory)]

    def to_source_document(self, markdown_file: MarkdownFile) -> SourceDocument:
        return SourceDocument(
            path=markdown_file.relative_path,
            title=self.derive_title(markdown_file),
            markdown=markdown_file.content,
            content_hash=content_hash(markdown_file.raw_content),
            base_dir=Path(markdown_file.file_path).resolve().parent,
        )

    def derive_title(self, markdown_file: MarkdownFile) -> str:
        """Title from front matter, then the first H1, then the file name.

        Example:
            >>> mapper.derive_title(MarkdownFile("a/intro.md", "intro.md", content="# Hi"))
            'Hi'
        """
        title = markdown_file.frontmatter.get('title')
        if title:
            return str(title)

        match = H1_PATTERN.search(markdown_file.content)
        if match:
            return match.group(1).strip()

        return Path(markdown_file.file_path).stem

    @staticmethod
    def _matches(name: str, patterns: Sequence[str]) -> bool:
        return any(fnmatch.fnmatch(name, pattern) for pattern in patterns)


def _sidebar_key(markdown_file: MarkdownFile):
    path = Path(markdown_file.relative_path)
    position = markdown_file.frontmatter.get('sidebar_position')
    if not isinstance(position, (int, float)):
        position = float('inf')
    return (path.parent.parts, position, path.name)
