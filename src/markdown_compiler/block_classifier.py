"""Line based markdown block classifier.

Splits markdown into an ordered list of typed blocks (headings, code fences,
lists, tables, placeholders, paragraphs) and detects inline bold, italic and
code spans inside paragraph-like text.
"""

import logging
import re
from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple

from .errors import ClassificationError
from .models import Block, BlockKind, InlineSpan, ListItem, SpanStyle

logger = logging.getLogger(__name__)

DIAGRAM_LANGUAGES = frozenset({"mermaid", "plantuml", "dot", "graphviz", "d2"})

HEADING_PATTERN = re.compile(r'^(#+)\s*(.*)$')
FENCE_MARKER = "```"
UNORDERED_ITEM_PATTERN = re.compile(r'^[*+-]\s+(.*)$')
ORDERED_ITEM_PATTERN = re.compile(r'^(\d+)\.\s+(.*)$')
TABLE_SEPARATOR_CELL = re.compile(r'^:?-+:?$')
PLACEHOLDER_LINE_PATTERN = re.compile(r'^\[\[\[(?:IMAGE|DIAGRAM)_\d+\]\]\]$')

# Ordered by priority: earlier patterns win overlaps.
INLINE_PATTERNS: Sequence[Tuple[SpanStyle, "re.Pattern[str]"]] = (
    (SpanStyle.CODE, re.compile(r'`([^`\n]+)`')),
    (SpanStyle.BOLD, re.compile(r'\*\*(.+?)\*\*|__(.+?)__')),
    (SpanStyle.ITALIC, re.compile(
        r'(?<!\*)\*(?![\s*])(.+?)(?<![\s*])\*(?!\*)'
        r'|(?<![\w_])_(?![\s_])(.+?)(?<![\s_])_(?![\w_])'
    )),
)


class _SpanCandidate(NamedTuple):
    priority: int
    start: int
    end: int
    inner_start: int
    inner_end: int
    style: SpanStyle


def detect_inline_spans(text: str) -> Tuple[str, Tuple[InlineSpan, ...]]:
    """Strip inline markers and report where the styled text ends up.

    Matching is non-overlapping and priority ordered (code, then bold, then
    italic). A lower priority match that overlaps an accepted one is left as
    literal text.

    Args:
        text: One line of markdown

    Returns:
        Tuple of (processed_text, spans) where span offsets are relative to
        processed_text

    Example:
        >>> detect_inline_spans("Hello **world**.")
        ('Hello world.', (InlineSpan(start=6, end=11, style=<SpanStyle.BOLD: 'bold'>),))
    """
    candidates: List[_SpanCandidate] = []
    for priority, (style, pattern) in enumerate(INLINE_PATTERNS):
        for match in pattern.finditer(text):
            group = next(i for i, value in enumerate(match.groups(), 1) if value is not None)
            candidates.append(_SpanCandidate(
                priority, match.start(), match.end(),
                match.start(group), match.end(group), style,
            ))

    accepted: List[_SpanCandidate] = []
    for candidate in sorted(candidates, key=lambda c: (c.priority, c.start)):
        if any(candidate.start < other.end and other.start < candidate.end
               for other in accepted):
            continue
        accepted.append(candidate)
    accepted.sort(key=lambda c: c.start)

    pieces: List[str] = []
    spans: List[InlineSpan] = []
    cursor = 0
    length = 0
    for candidate in accepted:
        before = text[cursor:candidate.start]
        inner = text[candidate.inner_start:candidate.inner_end]
        pieces.append(before)
        length += len(before)
        spans.append(InlineSpan(length, length + len(inner), candidate.style))
        pieces.append(inner)
        length += len(inner)
        cursor = candidate.end
    pieces.append(text[cursor:])

    return "".join(pieces), tuple(spans)


class BlockClassifier:
    """Turns raw markdown into an ordered list of typed blocks.

    Example:
        >>> blocks = BlockClassifier().classify("# Title\\n\\nHello **world**.")
        >>> [b.kind for b in blocks]
        [<BlockKind.HEADING: 'heading'>, <BlockKind.PARAGRAPH: 'paragraph'>]
    """

    def __init__(self, diagram_languages: Optional[Iterable[str]] = None):
        if diagram_languages is None:
            self.diagram_languages = DIAGRAM_LANGUAGES
        else:
            self.diagram_languages = frozenset(lang.lower() for lang in diagram_languages)

    def classify(self, markdown: str) -> List[Block]:
        """Classify markdown into blocks.

        Blank lines produce no block. Malformed fences and tables degrade to
        paragraphs instead of failing.

        Args:
            markdown: Markdown body (front matter already removed)

        Returns:
            Blocks in document order
        """
        lines = markdown.replace("\r\n", "\n").replace("\r", "\n").split("\n")
        blocks: List[Block] = []
        i = 0

        while i < len(lines):
            stripped = lines[i].strip()

            if not stripped:
                i += 1
                continue

            try:
                if stripped.startswith(FENCE_MARKER):
                    block, i = self._parse_fence(lines, i)
                    blocks.append(block)
                    continue

                if stripped.startswith("|"):
                    block, i = self._parse_table(lines, i)
                    blocks.append(block)
                    continue
            except ClassificationError as e:
                logger.warning(f"{e}; treating line as a paragraph")
                blocks.append(self._paragraph(stripped))
                i += 1
                continue

            heading = HEADING_PATTERN.match(stripped)
            if heading:
                blocks.append(Block(
                    kind=BlockKind.HEADING,
                    raw_text=stripped,
                    text=(heading.group(2) or "").strip(),
                    level=len(heading.group(1)),
                ))
                i += 1
                continue

            if _is_list_item(stripped):
                block, i = self._parse_list(lines, i)
                blocks.append(block)
                continue

            if PLACEHOLDER_LINE_PATTERN.match(stripped):
                blocks.append(Block(
                    kind=BlockKind.PLACEHOLDER, raw_text=stripped, token=stripped
                ))
                i += 1
                continue

            blocks.append(self._paragraph(stripped))
            i += 1

        logger.debug(f"Classified {len(blocks)} block(s) from {len(lines)} line(s)")
        return blocks

    def _paragraph(self, line: str) -> Block:
        processed_text, spans = detect_inline_spans(line)
        return Block(
            kind=BlockKind.PARAGRAPH,
            raw_text=line,
            processed_text=processed_text,
            spans=spans,
        )

    def _parse_fence(self, lines: List[str], start: int) -> Tuple[Block, int]:
        language = lines[start].strip()[len(FENCE_MARKER):].strip() or None

        end = start + 1
        while end < len(lines) and lines[end].strip() != FENCE_MARKER:
            end += 1
        if end >= len(lines):
            raise ClassificationError(start + 1, "code fence", "no closing fence")

        content = "\n".join(lines[start + 1:end])
        raw_text = "\n".join(lines[start:end + 1])

        if language and language.lower() in self.diagram_languages:
            # Unrendered diagram; no token means the compiler drops it.
            block = Block(
                kind=BlockKind.PLACEHOLDER,
                raw_text=raw_text,
                text=content,
                language=language,
            )
        else:
            block = Block(
                kind=BlockKind.CODE_BLOCK,
                raw_text=raw_text,
                text=content,
                language=language,
            )
        return block, end + 1

    def _parse_list(self, lines: List[str], start: int) -> Tuple[Block, int]:
        ordered = bool(ORDERED_ITEM_PATTERN.match(lines[start].strip()))
        items: List[ListItem] = []
        raw: List[str] = []
        i = start

        while i < len(lines):
            stripped = lines[i].strip()
            if not stripped:
                following = i
                while following < len(lines) and not lines[following].strip():
                    following += 1
                if following < len(lines) and _is_list_item(lines[following].strip()):
                    i = following
                    continue
                break

            match = UNORDERED_ITEM_PATTERN.match(stripped) or ORDERED_ITEM_PATTERN.match(stripped)
            if not match:
                break

            text, spans = detect_inline_spans(match.groups()[-1].strip())
            items.append(ListItem(text=text, spans=spans))
            raw.append(stripped)
            i += 1

        block = Block(
            kind=BlockKind.LIST,
            raw_text="\n".join(raw),
            ordered=ordered,
            items=tuple(items),
        )
        return block, i

    def _parse_table(self, lines: List[str], start: int) -> Tuple[Block, int]:
        end = start
        while end < len(lines) and lines[end].strip().startswith("|"):
            end += 1
        run = [line.strip() for line in lines[start:end]]

        if len(run) < 3:
            raise ClassificationError(
                start + 1, "table", f"needs header, separator and a row, got {len(run)} line(s)"
            )

        headers = _split_row(run[0])
        separator = _split_row(run[1])
        if not headers:
            raise ClassificationError(start + 1, "table", "empty header row")
        if not separator or not all(TABLE_SEPARATOR_CELL.match(cell) for cell in separator):
            raise ClassificationError(start + 2, "table", "second line is not a separator row")

        header_texts, header_spans = _process_cells(headers)
        rows = []
        cell_spans = [header_spans]
        for offset, line in enumerate(run[2:], start=3):
            cells = _split_row(line)
            if len(cells) > len(headers):
                logger.debug(
                    f"Table row at line {start + offset} has {len(cells)} cells, "
                    f"keeping the first {len(headers)}"
                )
                cells = cells[:len(headers)]
            texts, spans = _process_cells(cells)
            rows.append(texts)
            cell_spans.append(spans)

        block = Block(
            kind=BlockKind.TABLE,
            raw_text="\n".join(run),
            headers=header_texts,
            rows=tuple(rows),
            cell_spans=tuple(cell_spans),
        )
        return block, end


def _is_list_item(stripped: str) -> bool:
    return bool(UNORDERED_ITEM_PATTERN.match(stripped) or ORDERED_ITEM_PATTERN.match(stripped))


def _split_row(line: str) -> List[str]:
    """Split a pipe row into stripped cell texts."""
    cells = [cell.strip() for cell in line.split("|")]
    if cells and cells[0] == "":
        cells = cells[1:]
    if cells and cells[-1] == "":
        cells = cells[:-1]
    return cells


def _process_cells(cells: List[str]) -> Tuple[Tuple[str, ...], Tuple[Tuple[InlineSpan, ...], ...]]:
    processed = [detect_inline_spans(cell) for cell in cells]
    return tuple(text for text, _ in processed), tuple(spans for _, spans in processed)
