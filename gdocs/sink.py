"""
Google Docs Document Sink

This module provides `GoogleDocsSink`, a `DocumentSink` that turns projector
operations into Google Docs API `batchUpdate` requests.

The sink follows the "Index Tracker" pattern: `cursor_index` always points at
the start of the document's trailing paragraph, every append inserts there
and advances the cursor by the number of indices it consumed. Requests are
buffered in issue order and sent by `commit()`; since the batch is applied
sequentially, each request's indices already account for the ones before it.

Example:
    >>> sink = GoogleDocsSink(service, "doc-id")
    >>> handle = sink.append_paragraph("Title")
    >>> sink.set_style(handle, ParagraphStyle.HEADING_1)
    >>> [next(iter(r)) for r in sink.requests]
    ['insertText', 'updateParagraphStyle']
    >>> await sink.commit()
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from core.errors import CapabilityUnavailable, SinkFailure
from core.utils import handle_host_errors
from converter.sink import BorderEdge, ParagraphStyle, TableGrid
from gdocs.docs_helpers import (
    CODE_BACKGROUND_COLOR,
    CODE_FONT_FAMILY,
    LINE_BREAK,
    NAMED_STYLE_NORMAL,
    build_border,
    create_delete_bullets_request,
    create_format_text_request,
    create_insert_table_request,
    create_insert_text_request,
    create_paragraph_style_request,
    create_table_cell_style_request,
    table_cell_index,
    table_consumption,
    utf16_length,
)
from markup.inline import InlineRun, read_inline

logger = logging.getLogger(__name__)

# ParagraphStyle -> Docs API namedStyleType
NAMED_STYLE_MAP: dict[ParagraphStyle, str] = {
    ParagraphStyle.NORMAL: NAMED_STYLE_NORMAL,
    ParagraphStyle.HEADING_1: "HEADING_1",
    ParagraphStyle.HEADING_2: "HEADING_2",
    ParagraphStyle.HEADING_3: "HEADING_3",
    ParagraphStyle.LIST_PARAGRAPH: NAMED_STYLE_NORMAL,
}


@dataclass
class DocsParagraph:
    """Index range [start, end) of a paragraph, trailing newline included."""

    start: int
    end: int


@dataclass(frozen=True)
class DocsTable:
    """Position and shape of an inserted table."""

    start: int
    end: int
    rows: int
    columns: int


def _paragraph_text(element: dict) -> str | None:
    """Text of a body content element, or None when it is not a paragraph."""
    paragraph = element.get("paragraph")
    if paragraph is None:
        return None
    return "".join(pe.get("textRun", {}).get("content", "") for pe in paragraph.get("elements", []))


def _document_link(document_id: str) -> str:
    return f"https://docs.google.com/document/d/{document_id}/edit"


class GoogleDocsSink:
    """
    DocumentSink backed by the Google Docs API.

    Attributes:
        service: An authorized Docs API service (`googleapiclient.discovery.build("docs", "v1", ...)`).
        document_id: The document being written.
        cursor_index: Insertion point for the next block (1-based, as per the Docs API).
        requests: Requests buffered since the last commit.
        commits: Number of batches sent.
    """

    def __init__(self, service: Any, document_id: str, start_index: int = 1) -> None:
        if start_index < 1:
            raise ValueError(f"start_index must be at least 1, got {start_index}")
        self.service = service
        self.document_id = document_id
        self.cursor_index = start_index
        self.requests: list[dict] = []
        self.commits = 0

    @classmethod
    @handle_host_errors("read_document_end")
    async def at_end(cls, service: Any, document_id: str) -> "GoogleDocsSink":
        """
        Create a sink that appends after the existing content of a document.

        A document always ends with a paragraph. When that paragraph is empty
        the first block replaces it; otherwise a paragraph break is buffered
        first so the existing text keeps its own paragraph and style.
        """
        doc = await asyncio.to_thread(service.documents().get(documentId=document_id).execute)
        content = doc.get("body", {}).get("content", [])
        end_index = content[-1].get("endIndex", 2) if content else 2
        start_index = max(1, end_index - 1)
        logger.debug(f"Document {document_id} ends at {end_index}, appending at {start_index}")

        sink = cls(service, document_id, start_index=start_index)
        last_text = _paragraph_text(content[-1]) if content else ""
        if last_text is None or last_text.strip("\n"):
            sink._break_last_paragraph()
        return sink

    def _break_last_paragraph(self) -> None:
        """Split a fresh empty paragraph off the end of a non-empty one and reset its formatting."""
        self._add(create_insert_text_request(self.cursor_index, "\n"))
        self.cursor_index += 1
        # The new paragraph inherits heading and bullet formatting from the one it was split from
        end = self.cursor_index + 1
        self._add(create_paragraph_style_request(self.cursor_index, end, named_style_type=NAMED_STYLE_NORMAL))
        self._add(create_delete_bullets_request(self.cursor_index, end))

    @property
    def link(self) -> str:
        return _document_link(self.document_id)

    def _add(self, request: dict | None) -> None:
        if request is None:
            return
        self.requests.append(request)
        logger.debug(f"Buffered request {next(iter(request))}: {request}")

    # ------------------------------------------------------------------
    # Paragraphs
    # ------------------------------------------------------------------

    def append_paragraph(self, text: str) -> DocsParagraph:
        content = text + "\n"
        start = self.cursor_index
        self._add(create_insert_text_request(start, content))
        self.cursor_index += utf16_length(content)
        return DocsParagraph(start, self.cursor_index)

    def append_empty_paragraph(self) -> DocsParagraph:
        return self.append_paragraph("")

    def replace_content_with_markup_fragment(self, handle: DocsParagraph, fragment: str) -> None:
        """
        Fill an empty placeholder paragraph with the runs of an inline fragment.

        The text is inserted in one request and styled afterwards range by
        range, so inserted runs never inherit each other's style.
        """
        if handle.end != self.cursor_index or handle.end - handle.start != 1:
            raise SinkFailure("Only the most recently appended empty paragraph can be filled with markup")

        runs = read_inline(fragment)
        text = "".join(LINE_BREAK if run.is_line_break else run.text for run in runs)
        if not text:
            logger.debug("Markup fragment has no text, leaving paragraph empty")
            return

        self._add(create_insert_text_request(handle.start, text))

        position = handle.start
        for run in runs:
            length = utf16_length(LINE_BREAK if run.is_line_break else run.text)
            if not run.is_line_break and not run.is_plain:
                self._add(create_format_text_request(position, position + length, **self._run_style(run)))
            position += length

        inserted = utf16_length(text)
        handle.end += inserted
        self.cursor_index += inserted

    @staticmethod
    def _run_style(run: InlineRun) -> dict[str, Any]:
        style: dict[str, Any] = {}
        if run.bold:
            style["bold"] = True
        if run.italic:
            style["italic"] = True
        if run.underline:
            style["underline"] = True
        if run.strikethrough:
            style["strikethrough"] = True
        if run.code:
            style["font_family"] = CODE_FONT_FAMILY
            style["background_color"] = CODE_BACKGROUND_COLOR
        if run.link:
            style["link_url"] = run.link
        return style

    def set_style(self, handle: DocsParagraph, style: ParagraphStyle) -> None:
        named_style = NAMED_STYLE_MAP[ParagraphStyle(style)]
        self._add(create_paragraph_style_request(handle.start, handle.end, named_style_type=named_style))

    def set_spacing(
        self, handle: DocsParagraph | DocsTable, before: float | None = None, after: float | None = None
    ) -> None:
        """Set spacing on a paragraph, or on every paragraph inside a table."""
        self._add(create_paragraph_style_request(handle.start, handle.end, space_above=before, space_below=after))

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def append_table(self, grid: TableGrid) -> DocsTable:
        """
        Insert a table and fill its cells.

        Cells are filled in row-major order; each insertion shifts the cells
        after it by the length of the text already inserted.
        """
        rows = len(grid)
        columns = len(grid[0]) if grid else 0
        if rows == 0 or columns == 0:
            raise SinkFailure(f"Invalid table dimensions: {rows}x{columns}")

        table_start = self.cursor_index
        self._add(create_insert_table_request(table_start, rows, columns))

        text_offset = 0
        for r, row in enumerate(grid):
            for c, cell_text in enumerate(row):
                if not cell_text:
                    continue
                base_index = table_cell_index(table_start, r, c, columns)
                self._add(create_insert_text_request(base_index + text_offset, cell_text))
                text_offset += utf16_length(cell_text)

        self.cursor_index = table_start + table_consumption(rows, columns, text_offset)
        logger.debug(f"Table {rows}x{columns} at {table_start}, cursor now at {self.cursor_index}")
        return DocsTable(table_start, self.cursor_index, rows, columns)

    def set_border_color(self, table: DocsTable, edge: BorderEdge, color: str) -> None:
        """
        Colour one edge of a table.

        Docs borders belong to cells, so each table edge maps onto one cell
        border over a band of cells. Inside edges of a single-row or
        single-column table have no cells to style.
        """
        border = build_border(color)
        edge = BorderEdge(edge)
        last_row, last_col = table.rows - 1, table.columns - 1

        if edge is BorderEdge.TOP:
            band = (0, 0, 1, table.columns, "borderTop")
        elif edge is BorderEdge.BOTTOM:
            band = (last_row, 0, 1, table.columns, "borderBottom")
        elif edge is BorderEdge.LEFT:
            band = (0, 0, table.rows, 1, "borderLeft")
        elif edge is BorderEdge.RIGHT:
            band = (0, last_col, table.rows, 1, "borderRight")
        elif edge is BorderEdge.INSIDE_HORIZONTAL:
            if table.rows < 2:
                return
            band = (1, 0, table.rows - 1, table.columns, "borderTop")
        else:
            if table.columns < 2:
                return
            band = (0, 1, table.rows, table.columns - 1, "borderLeft")

        row, col, row_span, col_span, side = band
        self._add(create_table_cell_style_request(table.start, row, col, row_span, col_span, borders={side: border}))

    def set_cell_shading(self, table: DocsTable, row: int, col: int, color: str) -> None:
        if not (0 <= row < table.rows and 0 <= col < table.columns):
            raise SinkFailure(f"Cell ({row}, {col}) is outside a {table.rows}x{table.columns} table")
        self._add(create_table_cell_style_request(table.start, row, col, background_color=color))

    def clear_table_formats(self, table: DocsTable) -> None:
        raise CapabilityUnavailable("clear_table_formats", "Google Docs tables have no removable format presets")

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    @handle_host_errors("commit")
    async def commit(self) -> None:
        """Send the buffered requests as one batchUpdate, in issue order."""
        if not self.requests:
            logger.debug(f"Nothing to commit for document {self.document_id}")
            return

        requests, self.requests = self.requests, []
        logger.info(f"Sending {len(requests)} request(s) to document {self.document_id}")
        await asyncio.to_thread(
            self.service.documents().batchUpdate(documentId=self.document_id, body={"requests": requests}).execute
        )
        self.commits += 1
