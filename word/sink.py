"""
Word Document Sink

`DocxSink` writes projector operations into a python-docx `Document` and
saves it as a `.docx` file on commit. Handles are the python-docx
`Paragraph` and `Table` objects themselves.
"""

import asyncio
import logging
from html import escape
from pathlib import Path

from docx import Document
from docx.opc.constants import RELATIONSHIP_TYPE
from docx.oxml import parse_xml
from docx.oxml.ns import nsdecls, qn
from docx.shared import Pt
from docx.table import Table
from docx.text.paragraph import Paragraph

from core.errors import SinkFailure
from core.utils import handle_host_errors
from converter.sink import BorderEdge, ParagraphStyle, TableGrid
from markup.inline import InlineRun, read_inline

logger = logging.getLogger(__name__)

# ParagraphStyle -> built-in Word style name
WORD_STYLE_NAMES: dict[ParagraphStyle, str] = {
    ParagraphStyle.NORMAL: "Normal",
    ParagraphStyle.HEADING_1: "Heading 1",
    ParagraphStyle.HEADING_2: "Heading 2",
    ParagraphStyle.HEADING_3: "Heading 3",
    ParagraphStyle.LIST_PARAGRAPH: "List Paragraph",
}

# BorderEdge -> child of w:tblBorders; listed in schema order
BORDER_ELEMENTS: dict[BorderEdge, str] = {
    BorderEdge.TOP: "top",
    BorderEdge.LEFT: "left",
    BorderEdge.BOTTOM: "bottom",
    BorderEdge.RIGHT: "right",
    BorderEdge.INSIDE_HORIZONTAL: "insideH",
    BorderEdge.INSIDE_VERTICAL: "insideV",
}

# Eighths of a point
TABLE_BORDER_SIZE = 4

CODE_FONT_NAME = "Consolas"
HYPERLINK_COLOR = "0563C1"


def _word_color(color: str) -> str:
    return color.lstrip("#").upper()


def _table_borders(table: Table):
    """Return the table's w:tblBorders element, creating it when missing."""
    tbl_pr = table._tbl.tblPr
    borders = tbl_pr.find(qn("w:tblBorders"))
    if borders is None:
        borders = parse_xml(f"<w:tblBorders {nsdecls('w')}/>")
        look = tbl_pr.find(qn("w:tblLook"))
        if look is not None:
            look.addprevious(borders)
        else:
            tbl_pr.append(borders)
    return borders


class DocxSink:
    """
    DocumentSink backed by python-docx.

    Attributes:
        document: The python-docx Document being written.
        path: Where `commit()` saves the document; None keeps it in memory only.
        commits: Number of commits performed.
    """

    def __init__(self, path: str | Path | None = None, document=None) -> None:
        self.path = Path(path) if path is not None else None
        self.document = document if document is not None else Document()
        self.commits = 0

    def _style(self, style: ParagraphStyle):
        name = WORD_STYLE_NAMES[ParagraphStyle(style)]
        try:
            return self.document.styles[name]
        except KeyError as e:
            raise SinkFailure(f"Document template has no '{name}' style") from e

    # ------------------------------------------------------------------
    # Paragraphs
    # ------------------------------------------------------------------

    def append_paragraph(self, text: str) -> Paragraph:
        logger.debug(f"Adding paragraph: {text!r}")
        return self.document.add_paragraph(text)

    def append_empty_paragraph(self) -> Paragraph:
        return self.document.add_paragraph()

    def replace_content_with_markup_fragment(self, handle: Paragraph, fragment: str) -> None:
        for run in list(handle.runs):
            run._r.getparent().remove(run._r)
        for inline in read_inline(fragment):
            if inline.is_line_break:
                handle.add_run().add_break()
            elif inline.link:
                self._add_hyperlink(handle, inline)
            else:
                self._add_run(handle, inline)

    @staticmethod
    def _add_run(paragraph: Paragraph, inline: InlineRun) -> None:
        run = paragraph.add_run(inline.text)
        if inline.bold:
            run.bold = True
        if inline.italic:
            run.italic = True
        if inline.underline:
            run.underline = True
        if inline.strikethrough:
            run.font.strike = True
        if inline.code:
            run.font.name = CODE_FONT_NAME

    @staticmethod
    def _add_hyperlink(paragraph: Paragraph, inline: InlineRun) -> None:
        """Insert a clickable hyperlink run into a paragraph."""
        r_id = paragraph.part.relate_to(inline.link, RELATIONSHIP_TYPE.HYPERLINK, is_external=True)
        properties = "".join(
            tag
            for flag, tag in (
                (inline.bold, "<w:b/>"),
                (inline.italic, "<w:i/>"),
                (inline.strikethrough, "<w:strike/>"),
            )
            if flag
        )
        if inline.code:
            properties += f'<w:rFonts w:ascii="{CODE_FONT_NAME}" w:hAnsi="{CODE_FONT_NAME}"/>'
        hyperlink = parse_xml(
            f'<w:hyperlink {nsdecls("w", "r")} r:id="{r_id}">'
            f'<w:r><w:rPr><w:rStyle w:val="Hyperlink"/>{properties}'
            f'<w:color w:val="{HYPERLINK_COLOR}"/><w:u w:val="single"/></w:rPr>'
            f'<w:t xml:space="preserve">{escape(inline.text, quote=False)}</w:t></w:r></w:hyperlink>'
        )
        paragraph._p.append(hyperlink)

    def set_style(self, handle: Paragraph, style: ParagraphStyle) -> None:
        handle.style = self._style(style)

    def set_spacing(self, handle: Paragraph | Table, before: float | None = None, after: float | None = None) -> None:
        """Set spacing on a paragraph, or on every paragraph inside a table."""
        if isinstance(handle, Table):
            paragraphs = [p for row in handle.rows for cell in row.cells for p in cell.paragraphs]
        else:
            paragraphs = [handle]
        for paragraph in paragraphs:
            if before is not None:
                paragraph.paragraph_format.space_before = Pt(before)
            if after is not None:
                paragraph.paragraph_format.space_after = Pt(after)

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def append_table(self, grid: TableGrid) -> Table:
        rows = len(grid)
        cols = len(grid[0]) if grid else 0
        if rows == 0 or cols == 0:
            raise SinkFailure(f"Invalid table dimensions: {rows}x{cols}")

        table = self.document.add_table(rows=rows, cols=cols)
        for r, row in enumerate(grid):
            for c, text in enumerate(row):
                table.cell(r, c).text = text
        logger.debug(f"Added {rows}x{cols} table")
        return table

    def set_border_color(self, table: Table, edge: BorderEdge, color: str) -> None:
        borders = _table_borders(table)
        name = BORDER_ELEMENTS[BorderEdge(edge)]
        existing = borders.find(qn(f"w:{name}"))
        if existing is not None:
            borders.remove(existing)

        border = parse_xml(
            f'<w:{name} {nsdecls("w")} w:val="single" w:sz="{TABLE_BORDER_SIZE}" '
            f'w:space="0" w:color="{_word_color(color)}"/>'
        )
        order = list(BORDER_ELEMENTS.values())
        for later in order[order.index(name) + 1 :]:
            sibling = borders.find(qn(f"w:{later}"))
            if sibling is not None:
                sibling.addprevious(border)
                return
        borders.append(border)

    def set_cell_shading(self, table: Table, row: int, col: int, color: str) -> None:
        tc_pr = table.cell(row, col)._tc.get_or_add_tcPr()
        existing = tc_pr.find(qn("w:shd"))
        if existing is not None:
            tc_pr.remove(existing)
        tc_pr.append(parse_xml(f'<w:shd {nsdecls("w")} w:fill="{_word_color(color)}" w:val="clear"/>'))

    def clear_table_formats(self, table: Table) -> None:
        table.style = None

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    @handle_host_errors("commit")
    async def commit(self) -> None:
        """Save the document to `path`; a sink without a path only counts the commit."""
        if self.path is not None:
            logger.info(f"Saving document to {self.path}")
            await asyncio.to_thread(self.document.save, str(self.path))
        self.commits += 1
