"""Finds freshly inserted tables and addresses their cells.

Tables are inserted empty; the service decides where each cell's paragraph
lands. After the content batch is applied the new tables are paired with
their TableSpecs by position, skipping tables left by earlier documents in the
same run.

All inserts for one snapshot go out in one batch, so they are emitted from the
highest offset down: reverse row-major order inside a table, last table first.
Inline styles of cell text follow the inserts in the same batch, addressed by
where each cell's text ends up once every insert has been applied.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from src.markdown_compiler import request_builders as rb
from src.markdown_compiler.models import InlineSpan, TableSpec

from .errors import PositionResolutionError
from .snapshot import DocumentSnapshot, SnapshotElement, utf16_length

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CellInsert:
    """Text to insert at the start of a cell's first paragraph."""

    table_number: int
    row: int
    column: int
    index: int
    text: str
    spans: Tuple[InlineSpan, ...] = ()


class TableCellLocator:
    """Maps TableSpecs to real cell offsets."""

    def locate(self, table_specs: Sequence[TableSpec], snapshot: DocumentSnapshot,
               existing_table_count: int = 0) -> List[CellInsert]:
        """Compute cell inserts in strictly decreasing offset order.

        Args:
            table_specs: Specs in compile order
            snapshot: Snapshot fetched after the content batch
            existing_table_count: Tables that existed before this document's
                content was applied

        Returns:
            One CellInsert per non-empty cell that could be located
        """
        if not table_specs:
            return []

        new_tables = snapshot.tables()[existing_table_count:]
        if len(new_tables) != len(table_specs):
            logger.warning(
                f"Expected {len(table_specs)} new table(s) but found {len(new_tables)} "
                f"after skipping {existing_table_count} existing; pairing the first "
                f"{min(len(new_tables), len(table_specs))}"
            )

        per_table: List[List[CellInsert]] = []
        for number, (spec, table) in enumerate(zip(table_specs, new_tables)):
            inserts = self._locate_table(number, spec, table)
            inserts.reverse()
            per_table.append(inserts)

        ordered: List[CellInsert] = []
        for inserts in reversed(per_table):
            ordered.extend(inserts)
        return ordered

    def _locate_table(self, number: int, spec: TableSpec,
                      table: SnapshotElement) -> List[CellInsert]:
        inserts: List[CellInsert] = []
        for row in range(spec.row_count):
            for column in range(spec.column_count):
                text = spec.cell_text(row, column)
                if not text:
                    continue
                try:
                    index = self._cell_index(table, row, column, text)
                except PositionResolutionError as e:
                    logger.warning(f"Skipping table {number} cell ({row}, {column}): {e}")
                    continue
                inserts.append(CellInsert(number, row, column, index, text, spec.spans(row, column)))
        return inserts

    def _cell_index(self, table: SnapshotElement, row: int, column: int, text: str) -> int:
        cell = table.table.cell(row, column) if table.table else None
        if cell is None:
            raise PositionResolutionError(text, "cell missing from table structure")
        index = cell.first_paragraph_start
        if index is None:
            raise PositionResolutionError(text, "cell has no paragraph")
        return index

    def build_requests(self, inserts: Sequence[CellInsert]) -> List[Dict]:
        """Cell inserts in the given (descending) order, then the cells' inline styles."""
        requests = [rb.insert_text(insert.text, index=insert.index) for insert in inserts]

        # Each insert is shifted by every insert below it in the document.
        shift = 0
        for insert in reversed(inserts):
            start = insert.index + shift
            for span in insert.spans:
                if span.end <= span.start:
                    continue
                requests.append(rb.update_text_style(
                    start + utf16_length(insert.text[:span.start]),
                    start + utf16_length(insert.text[:span.end]),
                    rb.span_style(span.style),
                ))
            shift += utf16_length(insert.text)
        return requests
