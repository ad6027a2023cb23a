"""
Document Sink Contract

This module defines the append-only document API the block projector writes
to (`DocumentSink`), the style and border vocabularies shared by every sink,
and `RecordingSink`, an in-memory sink that logs each operation as a
`DocumentOp` value.

Handles returned by append operations are opaque and write-only. Sinks that
defer property application only guarantee them until the next `commit()`.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from core.errors import CapabilityUnavailable, SinkFailure
from markup.inline import read_inline, runs_to_text

logger = logging.getLogger(__name__)

TableGrid = list[list[str]]


class ParagraphStyle(str, Enum):
    """Paragraph styles the projector can request; sinks map them to host styles."""

    NORMAL = "Normal"
    HEADING_1 = "Heading1"
    HEADING_2 = "Heading2"
    HEADING_3 = "Heading3"
    LIST_PARAGRAPH = "ListParagraph"


HEADING_STYLES: dict[str, ParagraphStyle] = {
    "h1": ParagraphStyle.HEADING_1,
    "h2": ParagraphStyle.HEADING_2,
    "h3": ParagraphStyle.HEADING_3,
}


class BorderEdge(str, Enum):
    """The six border positions of a table."""

    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"
    INSIDE_HORIZONTAL = "insideHorizontal"
    INSIDE_VERTICAL = "insideVertical"


@runtime_checkable
class DocumentSink(Protocol):
    """Append-only document host with a batched commit."""

    def append_paragraph(self, text: str) -> Any:
        """Append a plain paragraph and return its handle."""
        ...

    def append_empty_paragraph(self) -> Any:
        """Append an empty placeholder paragraph and return its handle."""
        ...

    def replace_content_with_markup_fragment(self, handle: Any, fragment: str) -> None:
        """Replace a placeholder paragraph's content with an inline markup fragment."""
        ...

    def append_table(self, grid: TableGrid) -> Any:
        """Append a table filled with `grid` and return its handle."""
        ...

    def set_style(self, handle: Any, style: ParagraphStyle) -> None:
        """Apply a paragraph style."""
        ...

    def set_border_color(self, table: Any, edge: BorderEdge, color: str) -> None:
        """Colour one border edge of a table."""
        ...

    def set_cell_shading(self, table: Any, row: int, col: int, color: str) -> None:
        """Fill one table cell."""
        ...

    def set_spacing(self, handle: Any, before: float | None = None, after: float | None = None) -> None:
        """Set spacing (points) around a paragraph or every paragraph of a table. May raise CapabilityUnavailable."""
        ...

    def clear_table_formats(self, table: Any) -> None:
        """Drop the host's default table formatting. May raise CapabilityUnavailable."""
        ...

    async def commit(self) -> None:
        """Apply all buffered mutations to the host document."""
        ...


# =============================================================================
# Document operations (the RecordingSink log)
# =============================================================================


@dataclass(frozen=True)
class ParagraphRef:
    """Handle to a paragraph in a RecordingSink."""

    index: int


@dataclass(frozen=True)
class TableRef:
    """Handle to a table in a RecordingSink."""

    index: int


@dataclass(frozen=True)
class AppendParagraph:
    handle: ParagraphRef
    text: str


@dataclass(frozen=True)
class AppendEmptyParagraph:
    handle: ParagraphRef


@dataclass(frozen=True)
class ReplaceWithMarkup:
    handle: ParagraphRef
    fragment: str


@dataclass(frozen=True)
class AppendTable:
    handle: TableRef
    grid: tuple[tuple[str, ...], ...]


@dataclass(frozen=True)
class SetParagraphStyle:
    handle: ParagraphRef
    style: ParagraphStyle


@dataclass(frozen=True)
class SetParagraphSpacing:
    handle: ParagraphRef | TableRef
    before: float | None
    after: float | None


@dataclass(frozen=True)
class SetTableBorder:
    handle: TableRef
    edge: BorderEdge
    color: str


@dataclass(frozen=True)
class SetTableCellShading:
    handle: TableRef
    row: int
    col: int
    color: str


@dataclass(frozen=True)
class ClearTableFormats:
    handle: TableRef


@dataclass(frozen=True)
class Commit:
    pass


DocumentOp = (
    AppendParagraph
    | AppendEmptyParagraph
    | ReplaceWithMarkup
    | AppendTable
    | SetParagraphStyle
    | SetParagraphSpacing
    | SetTableBorder
    | SetTableCellShading
    | ClearTableFormats
    | Commit
)


@dataclass
class RecordedParagraph:
    """State of a paragraph in a RecordingSink document."""

    text: str = ""
    style: ParagraphStyle = ParagraphStyle.NORMAL
    fragment: str | None = None
    space_before: float | None = None
    space_after: float | None = None


@dataclass
class RecordedTable:
    """State of a table in a RecordingSink document."""

    grid: TableGrid
    borders: dict[BorderEdge, str] = field(default_factory=dict)
    shading: dict[tuple[int, int], str] = field(default_factory=dict)
    formats_cleared: bool = False
    space_before: float | None = None
    space_after: float | None = None


class RecordingSink:
    """
    In-memory DocumentSink.

    Every call is appended to `ops` in issue order and mirrored into `blocks`,
    a simple model of the resulting document. Capabilities named in
    `unavailable` raise `CapabilityUnavailable`; operations named in `fail_on`
    raise `SinkFailure`, which makes the sink useful for exercising both error
    paths of a conversion.

    Example:
        >>> sink = RecordingSink()
        >>> handle = sink.append_paragraph("Hello")
        >>> sink.set_style(handle, ParagraphStyle.HEADING_1)
        >>> sink.paragraphs()[0].style
        <ParagraphStyle.HEADING_1: 'Heading1'>
    """

    def __init__(self, unavailable: tuple[str, ...] | list[str] = (), fail_on: tuple[str, ...] | list[str] = ()):
        self.ops: list[DocumentOp] = []
        self.blocks: list[RecordedParagraph | RecordedTable] = []
        self.commits = 0
        self._unavailable = set(unavailable)
        self._fail_on = set(fail_on)

    def _check(self, operation: str) -> None:
        if operation in self._fail_on:
            raise SinkFailure(f"Recording sink configured to fail on '{operation}'")
        if operation in self._unavailable:
            raise CapabilityUnavailable(operation)

    def _paragraph(self, handle: ParagraphRef) -> RecordedParagraph:
        block = self.blocks[handle.index]
        if not isinstance(block, RecordedParagraph):
            raise SinkFailure(f"Handle {handle} does not refer to a paragraph")
        return block

    def _table(self, handle: TableRef) -> RecordedTable:
        block = self.blocks[handle.index]
        if not isinstance(block, RecordedTable):
            raise SinkFailure(f"Handle {handle} does not refer to a table")
        return block

    def _record(self, op: DocumentOp) -> None:
        self.ops.append(op)
        logger.debug(f"Recorded {op}")

    def append_paragraph(self, text: str) -> ParagraphRef:
        self._check("append_paragraph")
        handle = ParagraphRef(len(self.blocks))
        self.blocks.append(RecordedParagraph(text=text))
        self._record(AppendParagraph(handle, text))
        return handle

    def append_empty_paragraph(self) -> ParagraphRef:
        self._check("append_empty_paragraph")
        handle = ParagraphRef(len(self.blocks))
        self.blocks.append(RecordedParagraph())
        self._record(AppendEmptyParagraph(handle))
        return handle

    def replace_content_with_markup_fragment(self, handle: ParagraphRef, fragment: str) -> None:
        self._check("replace_content_with_markup_fragment")
        paragraph = self._paragraph(handle)
        paragraph.fragment = fragment
        paragraph.text = runs_to_text(read_inline(fragment))
        self._record(ReplaceWithMarkup(handle, fragment))

    def append_table(self, grid: TableGrid) -> TableRef:
        self._check("append_table")
        if not grid or not grid[0]:
            raise SinkFailure("Cannot insert a table without rows or columns")
        handle = TableRef(len(self.blocks))
        self.blocks.append(RecordedTable(grid=[list(row) for row in grid]))
        self._record(AppendTable(handle, tuple(tuple(row) for row in grid)))
        return handle

    def set_style(self, handle: ParagraphRef, style: ParagraphStyle) -> None:
        self._check("set_style")
        self._paragraph(handle).style = style
        self._record(SetParagraphStyle(handle, style))

    def set_border_color(self, table: TableRef, edge: BorderEdge, color: str) -> None:
        self._check("set_border_color")
        self._table(table).borders[edge] = color
        self._record(SetTableBorder(table, edge, color))

    def set_cell_shading(self, table: TableRef, row: int, col: int, color: str) -> None:
        self._check("set_cell_shading")
        self._table(table).shading[(row, col)] = color
        self._record(SetTableCellShading(table, row, col, color))

    def set_spacing(
        self, handle: ParagraphRef | TableRef, before: float | None = None, after: float | None = None
    ) -> None:
        self._check("set_spacing")
        block = self.blocks[handle.index]
        if before is not None:
            block.space_before = before
        if after is not None:
            block.space_after = after
        self._record(SetParagraphSpacing(handle, before, after))

    def clear_table_formats(self, table: TableRef) -> None:
        self._check("clear_table_formats")
        self._table(table).formats_cleared = True
        self._record(ClearTableFormats(table))

    async def commit(self) -> None:
        self._check("commit")
        self.commits += 1
        self._record(Commit())

    def paragraphs(self) -> list[RecordedParagraph]:
        """Paragraph blocks in document order."""
        return [block for block in self.blocks if isinstance(block, RecordedParagraph)]

    def tables(self) -> list[RecordedTable]:
        """Table blocks in document order."""
        return [block for block in self.blocks if isinstance(block, RecordedTable)]

    def ops_of(self, op_type: type) -> list[DocumentOp]:
        """Logged operations of one type, in issue order."""
        return [op for op in self.ops if isinstance(op, op_type)]

    def to_dicts(self) -> list[dict[str, Any]]:
        """The operation log as JSON-serialisable dictionaries."""
        serialised = []
        for op in self.ops:
            entry = {"op": type(op).__name__}
            for key, value in asdict(op).items():
                if isinstance(value, dict) and "index" in value:
                    value = value["index"]
                elif isinstance(value, Enum):
                    value = value.value
                elif isinstance(value, tuple):
                    value = [list(row) for row in value]
                entry[key] = value
            serialised.append(entry)
        return serialised
