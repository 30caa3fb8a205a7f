"""Reconciliation of deferred directives against fetched document snapshots."""

from .errors import ReconciliationError, PositionResolutionError
from .placeholder_resolver import PlaceholderLinkResolver, Replacement
from .position_resolver import PositionResolver, ResolvedDirective
from .snapshot import DocumentSnapshot, FlattenedText
from .table_cell_locator import CellInsert, TableCellLocator

__all__ = [
    "ReconciliationError",
    "PositionResolutionError",
    "PlaceholderLinkResolver",
    "Replacement",
    "PositionResolver",
    "ResolvedDirective",
    "DocumentSnapshot",
    "FlattenedText",
    "CellInsert",
    "TableCellLocator",
]
