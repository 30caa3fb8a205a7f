"""Data models for the markdown compiler.

Blocks are what the classifier produces. Directives and table specs are the
deferred intents the compiler records for things that can only be addressed
once the remote service has applied the content batch.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class BlockKind(Enum):
    """Types of logical markdown units."""

    HEADING = "heading"
    CODE_BLOCK = "code_block"
    LIST = "list"
    TABLE = "table"
    PARAGRAPH = "paragraph"
    PLACEHOLDER = "placeholder"


class SpanStyle(Enum):
    """Inline styles recognized inside paragraph-like text."""

    BOLD = "bold"
    ITALIC = "italic"
    CODE = "code"


class DirectiveType(Enum):
    """Kinds of deferred formatting."""

    HEADING = "heading"
    CODE_BLOCK = "code_block"
    PARAGRAPH = "paragraph"
    LIST = "list"


@dataclass(frozen=True)
class InlineSpan:
    """A styled range, offsets relative to the processed (marker-free) text."""

    start: int
    end: int
    style: SpanStyle

    @property
    def length(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class ListItem:
    """One list entry with its inline markers already stripped."""

    text: str
    spans: Tuple[InlineSpan, ...] = ()


@dataclass(frozen=True)
class Block:
    """One logical markdown unit.

    Only the fields relevant to ``kind`` are populated.

    Attributes:
        kind: Type of block
        raw_text: Source lines the block was built from
        text: Heading text or code block content
        level: Heading level
        language: Code fence language tag (or diagram type for placeholders)
        ordered: Whether a list is numbered
        items: List entries
        headers: Table header cells
        rows: Table body rows
        cell_spans: Inline spans per table cell, header row first
        processed_text: Paragraph text with inline markers stripped
        spans: Inline spans relative to processed_text
        token: Placeholder token; None for an unresolved diagram fence
    """

    kind: BlockKind
    raw_text: str
    text: str = ""
    level: int = 0
    language: Optional[str] = None
    ordered: bool = False
    items: Tuple[ListItem, ...] = ()
    headers: Tuple[str, ...] = ()
    rows: Tuple[Tuple[str, ...], ...] = ()
    cell_spans: Tuple[Tuple[Tuple[InlineSpan, ...], ...], ...] = ()
    processed_text: str = ""
    spans: Tuple[InlineSpan, ...] = ()
    token: Optional[str] = None


@dataclass(frozen=True)
class FormatDirective:
    """Formatting that waits for real offsets.

    Attributes:
        type: What kind of element is styled
        literal_text: The exact text inserted for the element
        style_params: Type specific parameters (e.g. heading level)
        request_index: Index of the request that inserted literal_text
        label_text: Code block language label, located before literal_text
        spans: Inline spans relative to literal_text
        trailing: Separator inserted right after literal_text
    """

    type: DirectiveType
    literal_text: str
    style_params: Dict[str, Any]
    request_index: int
    label_text: Optional[str] = None
    spans: Tuple[InlineSpan, ...] = ()
    trailing: str = "\n"

    @property
    def length(self) -> int:
        return len(self.literal_text)


@dataclass(frozen=True)
class TableSpec:
    """Cell contents for a table whose structure was inserted empty."""

    headers: Tuple[str, ...]
    rows: Tuple[Tuple[str, ...], ...]
    request_index: int
    cell_spans: Tuple[Tuple[Tuple[InlineSpan, ...], ...], ...] = ()

    @property
    def row_count(self) -> int:
        return len(self.rows) + 1

    @property
    def column_count(self) -> int:
        return len(self.headers)

    def cell_text(self, row: int, column: int) -> str:
        """Text for a logical cell; row 0 is the header row."""
        cells = self.headers if row == 0 else self.rows[row - 1]
        if column >= len(cells):
            return ""
        return cells[column]

    def spans(self, row: int, column: int) -> Tuple[InlineSpan, ...]:
        """Inline spans of a logical cell, relative to its text."""
        if row >= len(self.cell_spans) or column >= len(self.cell_spans[row]):
            return ()
        return self.cell_spans[row][column]


@dataclass(frozen=True)
class LinkDirective:
    """A link occurrence replaced by a unique token before compilation."""

    token: str
    display_text: str
    url: str
    is_external: bool = True


class ImageKind(Enum):
    IMAGE = "image"
    DIAGRAM = "diagram"


@dataclass(frozen=True)
class ImageDirective:
    """An image or rendered diagram replaced by a unique token."""

    token: str
    uri: str
    alt_text: str
    kind: ImageKind = ImageKind.IMAGE

    def fallback_text(self) -> str:
        """Plain text used when the remote service refuses the image."""
        return f"![{self.alt_text}]({self.uri})"


@dataclass
class CompilationResult:
    """Everything the compiler produced for one document.

    Attributes:
        requests: Content requests in application order
        format_directives: Deferred formatting, ordered by request_index
        table_specs: Deferred table contents in creation order
        simulated_offsets: For each request, the length of text inserted by
            all earlier requests
        skipped_blocks: Blocks dropped during compilation
    """

    requests: List[Dict[str, Any]] = field(default_factory=list)
    format_directives: List[FormatDirective] = field(default_factory=list)
    table_specs: List[TableSpec] = field(default_factory=list)
    simulated_offsets: List[int] = field(default_factory=list)
    skipped_blocks: List[Block] = field(default_factory=list)
