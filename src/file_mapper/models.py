"""Data models for file mapper."""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class SyncConfig:
    """Project configuration for markdown to Google Docs sync.

    Attributes:
        docs_dir: Directory scanned for markdown files
        document_title: Title of the Google Doc created on first sync
        image_chunk_size: Placeholder replacements per batch in the link phase
        diagram_languages: Fence languages treated as diagrams
        file_patterns: Glob patterns selecting markdown files
        exclude_patterns: Glob patterns (relative to docs_dir) to skip
    """
    docs_dir: str = "docs"
    document_title: str = "Documentation"
    image_chunk_size: int = 20
    diagram_languages: List[str] = field(
        default_factory=lambda: ["mermaid", "plantuml", "dot", "graphviz", "d2"]
    )
    file_patterns: List[str] = field(default_factory=lambda: ["*.md", "*.mdx"])
    exclude_patterns: List[str] = field(default_factory=list)


@dataclass
class MarkdownFile:
    """A markdown file split into front matter and body.

    Attributes:
        file_path: Path of the file on disk
        relative_path: Path relative to the docs directory (POSIX separators)
        frontmatter: Parsed front matter (empty if none)
        content: Markdown body without front matter
        raw_content: Full file content, used for change detection
    """
    file_path: str
    relative_path: str
    frontmatter: Dict[str, Any] = field(default_factory=dict)
    content: str = ""
    raw_content: str = ""
