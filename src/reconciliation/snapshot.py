"""Read-only view of a fetched Google Docs document.

A snapshot is only valid until the next batch is applied; callers re-fetch
after every phase instead of patching offsets locally.

Offsets in the Docs API count UTF-16 code units, so characters outside the
Basic Multilingual Plane take two positions. FlattenedText keeps a per
character map back to those real offsets.
"""

import bisect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple


class ElementKind(Enum):
    """Structural element types of a document body."""

    PARAGRAPH = "paragraph"
    TABLE = "table"
    SECTION_BREAK = "section_break"
    TABLE_OF_CONTENTS = "table_of_contents"
    OTHER = "other"


def utf16_length(text: str) -> int:
    """Length of text in Docs API index units."""
    return sum(2 if ord(ch) > 0xFFFF else 1 for ch in text)


@dataclass(frozen=True)
class TextRun:
    start_index: int
    end_index: int
    content: str


@dataclass(frozen=True)
class CellLayout:
    """One table cell and the structural elements inside it."""

    start_index: int
    end_index: int
    content: Tuple["SnapshotElement", ...] = ()

    @property
    def first_paragraph_start(self) -> Optional[int]:
        for element in self.content:
            if element.kind == ElementKind.PARAGRAPH:
                return element.start_index
        return None


@dataclass(frozen=True)
class TableLayout:
    rows: Tuple[Tuple[CellLayout, ...], ...] = ()

    def cell(self, row: int, column: int) -> Optional[CellLayout]:
        if row >= len(self.rows) or column >= len(self.rows[row]):
            return None
        return self.rows[row][column]


@dataclass(frozen=True)
class SnapshotElement:
    """A top level (or cell level) structural element with real offsets."""

    start_index: int
    end_index: int
    kind: ElementKind
    text_runs: Tuple[TextRun, ...] = ()
    table: Optional[TableLayout] = None

    @property
    def text(self) -> str:
        return "".join(run.content for run in self.text_runs)


@dataclass(frozen=True)
class FlattenedText:
    """Logical text of a snapshot plus the real offset of every character."""

    text: str
    offsets: Tuple[int, ...]

    def find(self, needle: str, start: int = 0) -> int:
        return self.text.find(needle, start)

    def find_all(self, needle: str) -> List[int]:
        positions = []
        position = self.text.find(needle)
        while position != -1:
            positions.append(position)
            position = self.text.find(needle, position + len(needle))
        return positions

    def to_real_range(self, start: int, end: int) -> Tuple[int, int]:
        """Map flattened [start, end) to real [start_index, end_index).

        Raises:
            ValueError: If the range is empty or out of bounds
        """
        if not 0 <= start < end <= len(self.text):
            raise ValueError(f"Invalid flattened range [{start}, {end})")
        last = end - 1
        return self.offsets[start], self.offsets[last] + utf16_length(self.text[last])

    def position_at_or_after(self, real_index: int) -> int:
        """First flattened position whose real offset is >= real_index."""
        return bisect.bisect_left(self.offsets, real_index)


class DocumentSnapshot:
    """Typed, ordered view of a document body.

    Example:
        >>> snapshot = DocumentSnapshot.from_document(api.get_document(doc_id))
        >>> snapshot.end_index
        42
    """

    def __init__(self, elements: Sequence[SnapshotElement],
                 document_id: Optional[str] = None, title: Optional[str] = None):
        self.elements: Tuple[SnapshotElement, ...] = tuple(elements)
        self.document_id = document_id
        self.title = title

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "DocumentSnapshot":
        """Build a snapshot from the JSON returned by documents.get."""
        content = document.get("body", {}).get("content", [])
        return cls(
            _parse_elements(content),
            document_id=document.get("documentId"),
            title=document.get("title"),
        )

    @property
    def end_index(self) -> int:
        """End offset of the body (the final newline sits at end_index - 1)."""
        if not self.elements:
            return 1
        return max(1, self.elements[-1].end_index)

    def tables(self) -> List[SnapshotElement]:
        """Top level tables in document order."""
        return [element for element in self.elements if element.kind == ElementKind.TABLE]

    def flatten(self, include_tables: bool = False) -> FlattenedText:
        """Concatenate paragraph text in document order.

        Args:
            include_tables: Also include the paragraphs inside table cells
                (row-major order)
        """
        chars: List[str] = []
        offsets: List[int] = []
        _flatten_into(self.elements, include_tables, chars, offsets)
        return FlattenedText("".join(chars), tuple(offsets))


def _flatten_into(elements: Iterable[SnapshotElement], include_tables: bool,
                  chars: List[str], offsets: List[int]) -> None:
    for element in elements:
        if element.kind == ElementKind.PARAGRAPH:
            for run in element.text_runs:
                real = run.start_index
                for ch in run.content:
                    chars.append(ch)
                    offsets.append(real)
                    real += utf16_length(ch)
        elif element.kind == ElementKind.TABLE and include_tables and element.table:
            for row in element.table.rows:
                for cell in row:
                    _flatten_into(cell.content, include_tables, chars, offsets)


def _parse_elements(content: List[Dict[str, Any]]) -> Tuple[SnapshotElement, ...]:
    elements = []
    for item in content:
        start = item.get("startIndex", 0)
        end = item.get("endIndex", start)

        if "paragraph" in item:
            runs = tuple(
                TextRun(
                    start_index=part.get("startIndex", start),
                    end_index=part.get("endIndex", start),
                    content=part["textRun"].get("content", ""),
                )
                for part in item["paragraph"].get("elements", [])
                if "textRun" in part
            )
            elements.append(SnapshotElement(start, end, ElementKind.PARAGRAPH, text_runs=runs))
        elif "table" in item:
            rows = tuple(
                tuple(
                    CellLayout(
                        start_index=cell.get("startIndex", start),
                        end_index=cell.get("endIndex", start),
                        content=_parse_elements(cell.get("content", [])),
                    )
                    for cell in row.get("tableCells", [])
                )
                for row in item["table"].get("tableRows", [])
            )
            elements.append(SnapshotElement(start, end, ElementKind.TABLE, table=TableLayout(rows)))
        elif "sectionBreak" in item:
            elements.append(SnapshotElement(start, end, ElementKind.SECTION_BREAK))
        elif "tableOfContents" in item:
            elements.append(SnapshotElement(start, end, ElementKind.TABLE_OF_CONTENTS))
        else:
            elements.append(SnapshotElement(start, end, ElementKind.OTHER))
    return tuple(elements)
