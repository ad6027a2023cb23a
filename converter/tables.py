"""
Table Extraction

Turns a `<table>` element into a rectangular grid of cell strings, or
rejects it. A table is never reshaped: ragged rows reject the whole table.
"""

import logging
from dataclasses import dataclass

from converter.sink import TableGrid
from markup.nodes import Element

logger = logging.getLogger(__name__)

ROW_TAG = "tr"
CELL_TAGS = ("th", "td")

# Host table APIs may reject zero-length cells
EMPTY_CELL = " "


@dataclass(frozen=True)
class Rejected:
    """A table that cannot be inserted, with the reason why."""

    reason: str


class TableExtractor:
    """
    Extracts a `TableGrid` from table markup.

    Rows are every `tr` below the table (covering `thead`, `tbody` and
    `tfoot`), cells are the direct `th`/`td` children of a row. Rows with no
    cells are dropped; every remaining row must have the first row's length.
    """

    def extract(self, table: Element) -> TableGrid | Rejected:
        """
        Build a rectangular grid from a table element.

        Args:
            table: The `<table>` element.

        Returns:
            The grid, or `Rejected` when the table has no usable rows or its rows differ in length.
        """
        rows = list(table.iter_descendants(ROW_TAG))
        if not rows:
            return self._reject("table has no rows")

        grid: TableGrid = []
        for row in rows:
            cells = row.child_elements(*CELL_TAGS)
            if not cells:
                logger.debug("Dropping table row without cells")
                continue
            grid.append([cell.text_content().strip() or EMPTY_CELL for cell in cells])

        if not grid:
            return self._reject("table has no rows with cells")

        column_count = len(grid[0])
        lengths = [len(row) for row in grid]
        if any(length != column_count for length in lengths):
            return self._reject(f"inconsistent column counts {lengths}")

        logger.debug(f"Extracted {len(grid)}x{column_count} table")
        return grid

    @staticmethod
    def _reject(reason: str) -> Rejected:
        logger.debug(f"Rejecting table: {reason}")
        return Rejected(reason)


def extract_table(table: Element) -> TableGrid | Rejected:
    """Module-level shortcut for `TableExtractor().extract`."""
    return TableExtractor().extract(table)
