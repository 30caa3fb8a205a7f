"""Compiles classified blocks into Google Docs content requests.

Every content request appends at the end of the body segment, so the order of
the request list is the only addressing available before the service applies
it. Anything that needs real offsets (text styling, table cell contents) is
recorded as a deferred directive tied to the index of the request that
inserted its text.
"""

import logging
from typing import Dict, List, Optional

from . import request_builders as rb
from .block_classifier import BlockClassifier
from .models import (
    Block,
    BlockKind,
    CompilationResult,
    DirectiveType,
    FormatDirective,
    InlineSpan,
    TableSpec,
)

logger = logging.getLogger(__name__)

BULLET_PREFIX = "• "


class MutationCompiler:
    """Turns blocks into ordered requests plus deferred directives.

    Compilation is pure: the same blocks always produce the same result.

    Example:
        >>> result = MutationCompiler().compile_markdown("# Title\\n\\nHello **world**.")
        >>> len(result.requests), len(result.format_directives)
        (2, 2)
    """

    def __init__(self, classifier: Optional[BlockClassifier] = None):
        self.classifier = classifier or BlockClassifier()

    def compile_markdown(self, markdown: str) -> CompilationResult:
        return self.compile(self.classifier.classify(markdown))

    def compile(self, blocks: List[Block]) -> CompilationResult:
        """Compile blocks in order.

        Args:
            blocks: Output of BlockClassifier.classify

        Returns:
            CompilationResult with requests, directives, table specs and the
            simulated text offset of each request
        """
        result = CompilationResult()

        for block in blocks:
            if block.kind == BlockKind.HEADING:
                self._compile_heading(block, result)
            elif block.kind == BlockKind.CODE_BLOCK:
                self._compile_code_block(block, result)
            elif block.kind == BlockKind.LIST:
                self._compile_list(block, result)
            elif block.kind == BlockKind.TABLE:
                self._compile_table(block, result)
            elif block.kind == BlockKind.PLACEHOLDER:
                self._compile_placeholder(block, result)
            else:
                self._compile_paragraph(block, result)

        logger.debug(
            f"Compiled {len(blocks)} block(s) into {len(result.requests)} request(s), "
            f"{len(result.format_directives)} directive(s), "
            f"{len(result.table_specs)} table(s)"
        )
        return result

    def _append(self, result: CompilationResult, request: Dict) -> int:
        """Append a request and return its index."""
        offset = 0
        if result.requests:
            offset = result.simulated_offsets[-1] + len(rb.inserted_text(result.requests[-1]))
        result.requests.append(request)
        result.simulated_offsets.append(offset)
        return len(result.requests) - 1

    def _compile_heading(self, block: Block, result: CompilationResult) -> None:
        index = self._append(result, rb.insert_text(block.text + "\n\n"))
        if not block.text:
            return
        result.format_directives.append(FormatDirective(
            type=DirectiveType.HEADING,
            literal_text=block.text,
            style_params={"level": block.level},
            request_index=index,
            trailing="\n\n",
        ))

    def _compile_code_block(self, block: Block, result: CompilationResult) -> None:
        label = f"[{block.language}]" if block.language else None
        text = (label + "\n" if label else "") + block.text + "\n\n"
        index = self._append(result, rb.insert_text(text))
        if not block.text and not label:
            return
        result.format_directives.append(FormatDirective(
            type=DirectiveType.CODE_BLOCK,
            literal_text=block.text,
            style_params={"language": block.language},
            request_index=index,
            label_text=label,
            trailing="\n\n",
        ))

    def _compile_list(self, block: Block, result: CompilationResult) -> None:
        lines: List[str] = []
        spans: List[InlineSpan] = []
        offset = 0
        for number, item in enumerate(block.items, start=1):
            prefix = f"{number}. " if block.ordered else BULLET_PREFIX
            for span in item.spans:
                spans.append(InlineSpan(
                    offset + len(prefix) + span.start,
                    offset + len(prefix) + span.end,
                    span.style,
                ))
            line = prefix + item.text
            lines.append(line)
            offset += len(line) + 1

        body = "\n".join(lines)
        index = self._append(result, rb.insert_text(body + "\n\n"))
        if spans:
            result.format_directives.append(FormatDirective(
                type=DirectiveType.LIST,
                literal_text=body,
                style_params={"ordered": block.ordered},
                request_index=index,
                spans=tuple(spans),
                trailing="\n\n",
            ))

    def _compile_table(self, block: Block, result: CompilationResult) -> None:
        index = self._append(
            result, rb.insert_table(rows=len(block.rows) + 1, columns=len(block.headers))
        )
        result.table_specs.append(TableSpec(
            headers=block.headers,
            rows=block.rows,
            request_index=index,
            cell_spans=block.cell_spans,
        ))

    def _compile_paragraph(self, block: Block, result: CompilationResult) -> None:
        index = self._append(result, rb.insert_text(block.processed_text + "\n"))
        if block.spans:
            result.format_directives.append(FormatDirective(
                type=DirectiveType.PARAGRAPH,
                literal_text=block.processed_text,
                style_params={},
                request_index=index,
                spans=block.spans,
                trailing="\n",
            ))

    def _compile_placeholder(self, block: Block, result: CompilationResult) -> None:
        if block.token is None:
            logger.warning(
                f"Dropping unrendered '{block.language}' diagram "
                f"({len(block.text.splitlines())} line(s)); no placeholder was produced for it"
            )
            result.skipped_blocks.append(block)
            return
        self._append(result, rb.insert_text(block.token + "\n"))
