"""Maps deferred format directives to real buffer offsets.

Directives are walked in the order their text was inserted while a cursor
moves forward through the flattened snapshot text. The cursor never drops
below the offset the directive's text must have (the length of everything
inserted before it), so an earlier occurrence of the same text cannot be
matched twice. Only when that fails does a whole-document search run, and its
result is accepted only inside the document's own scope.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from src.markdown_compiler import request_builders as rb
from src.markdown_compiler.models import DirectiveType, FormatDirective, SpanStyle

from .errors import PositionResolutionError
from .snapshot import DocumentSnapshot, FlattenedText

logger = logging.getLogger(__name__)

TITLE_HEADING_LEVEL = 1


@dataclass(frozen=True)
class ResolvedDirective:
    """A directive with real [start_index, end_index) offsets.

    Attributes:
        directive: The directive that was resolved
        start_index: Start of the literal text
        end_index: End of the literal text
        label_range: Real range of the code block label, if any
        span_ranges: Real ranges of inline spans
    """

    directive: FormatDirective
    start_index: int
    end_index: int
    label_range: Optional[Tuple[int, int]] = None
    span_ranges: Tuple[Tuple[int, int, SpanStyle], ...] = ()


class PositionResolver:
    """Resolves format directives against a post-apply snapshot."""

    def resolve(
        self,
        directives: Sequence[FormatDirective],
        snapshot: DocumentSnapshot,
        scope_start: int = 1,
        simulated_offsets: Optional[Sequence[int]] = None,
        scope_end: Optional[int] = None,
    ) -> List[ResolvedDirective]:
        """Resolve every directive that can be found; skip and log the rest.

        Args:
            directives: Directives of one document
            snapshot: Snapshot fetched after the content batch was applied
            scope_start: First real offset of this document's content
            simulated_offsets: Per request, the length of text inserted before
                it (from the compiler)
            scope_end: End of this document's content (default: end of body)

        Returns:
            Resolved directives in request order, non-overlapping and
            ascending
        """
        flat = snapshot.flatten()
        if scope_end is None:
            scope_end = snapshot.end_index
        scope = (scope_start, scope_end)

        scope_floor = flat.position_at_or_after(scope_start)
        cursor = scope_floor
        last_end = 0
        resolved: List[ResolvedDirective] = []

        for directive in sorted(directives, key=lambda d: d.request_index):
            anchor = _anchor_text(directive)
            if not anchor:
                continue

            floor = scope_floor
            if simulated_offsets is not None and directive.request_index < len(simulated_offsets):
                floor += simulated_offsets[directive.request_index]

            try:
                position = self._search_forward(flat, anchor, max(cursor, floor))
                if position is None:
                    position = self._search_fallback(flat, directive, anchor, last_end, scope)
            except PositionResolutionError as e:
                logger.warning(f"Skipping {directive.type.value} formatting: {e}")
                continue

            result = _build_resolution(flat, directive, position)
            resolved.append(result)
            last_end = result.end_index

            cursor = position + len(anchor)
            if flat.text.startswith(directive.trailing, cursor):
                cursor += len(directive.trailing)

        skipped = len([d for d in directives if _anchor_text(d)]) - len(resolved)
        logger.debug(f"Resolved {len(resolved)} directive(s), skipped {skipped}")
        return resolved

    def _search_forward(self, flat: FlattenedText, anchor: str, start: int) -> Optional[int]:
        position = flat.find(anchor + "\n", start)
        return position if position != -1 else None

    def _search_fallback(self, flat: FlattenedText, directive: FormatDirective,
                         anchor: str, last_end: int, scope: Tuple[int, int]) -> int:
        title_candidate = None
        for position in flat.find_all(anchor + "\n"):
            start_index, end_index = flat.to_real_range(position, position + len(anchor))
            if start_index < last_end:
                continue
            if scope[0] <= start_index and end_index <= scope[1]:
                return position
            if title_candidate is None and _is_title(directive):
                title_candidate = position

        if title_candidate is not None:
            logger.debug(f"Title heading '{anchor}' resolved outside document scope")
            return title_candidate

        raise PositionResolutionError(
            directive.literal_text, "text not found in document scope", scope
        )

    def build_requests(self, resolved: Sequence[ResolvedDirective]) -> List[Dict]:
        """Turn resolutions into updateTextStyle requests."""
        requests: List[Dict] = []
        for item in resolved:
            directive = item.directive

            if directive.type == DirectiveType.HEADING:
                requests.append(rb.update_text_style(
                    item.start_index, item.end_index,
                    rb.heading_style(directive.style_params.get("level", 1)),
                ))
            elif directive.type == DirectiveType.CODE_BLOCK:
                if item.label_range:
                    requests.append(rb.update_text_style(
                        item.label_range[0], item.label_range[1], rb.code_label_style()
                    ))
                if item.end_index > item.start_index:
                    requests.append(rb.update_text_style(
                        item.start_index, item.end_index, rb.code_content_style()
                    ))
            elif directive.type == DirectiveType.PARAGRAPH:
                requests.append(rb.update_text_style(
                    item.start_index, item.end_index, rb.paragraph_reset_style()
                ))

            for start, end, style in item.span_ranges:
                requests.append(rb.update_text_style(start, end, rb.span_style(style)))

        return requests


def _anchor_text(directive: FormatDirective) -> str:
    """Text searched for: the label line (if any) followed by the literal text."""
    if directive.label_text:
        return directive.label_text + "\n" + directive.literal_text
    return directive.literal_text


def _is_title(directive: FormatDirective) -> bool:
    return (directive.type == DirectiveType.HEADING
            and directive.style_params.get("level") == TITLE_HEADING_LEVEL)


def _build_resolution(flat: FlattenedText, directive: FormatDirective,
                      position: int) -> ResolvedDirective:
    label_range = None
    content_position = position
    if directive.label_text:
        label_range = flat.to_real_range(position, position + len(directive.label_text))
        content_position = position + len(directive.label_text) + 1

    if directive.literal_text:
        start_index, end_index = flat.to_real_range(
            content_position, content_position + len(directive.literal_text)
        )
    else:
        start_index = end_index = label_range[1] + 1 if label_range else 0

    span_ranges = tuple(
        flat.to_real_range(content_position + span.start, content_position + span.end) + (span.style,)
        for span in directive.spans
        if span.end > span.start
    )

    return ResolvedDirective(
        directive=directive,
        start_index=start_index,
        end_index=end_index,
        label_range=label_range,
        span_ranges=span_ranges,
    )
