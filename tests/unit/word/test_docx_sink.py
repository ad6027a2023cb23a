"""
Unit tests for DocxSink.

Writes into an in-memory python-docx Document and inspects the resulting
paragraphs, runs and table XML.
"""

import docx
import pytest
from docx.oxml.ns import qn

from converter.sink import BorderEdge, DocumentSink, ParagraphStyle
from core.errors import SinkFailure
from word.sink import DocxSink


@pytest.fixture
def sink():
    return DocxSink()


def _border(table, name):
    return table._tbl.tblPr.find(qn("w:tblBorders")).find(qn(f"w:{name}"))


class TestParagraphs:
    def test_satisfies_protocol(self, sink):
        assert isinstance(sink, DocumentSink)

    def test_append_paragraph(self, sink):
        paragraph = sink.append_paragraph("Hello")

        assert paragraph.text == "Hello"
        assert sink.document.paragraphs[-1].text == "Hello"

    @pytest.mark.parametrize(
        "style, name",
        [
            (ParagraphStyle.HEADING_1, "Heading 1"),
            (ParagraphStyle.HEADING_2, "Heading 2"),
            (ParagraphStyle.HEADING_3, "Heading 3"),
            (ParagraphStyle.LIST_PARAGRAPH, "List Paragraph"),
            (ParagraphStyle.NORMAL, "Normal"),
        ],
    )
    def test_set_style(self, sink, style, name):
        paragraph = sink.append_paragraph("Text")
        sink.set_style(paragraph, style)

        assert paragraph.style.name == name

    def test_set_spacing(self, sink):
        paragraph = sink.append_paragraph("Text")
        sink.set_spacing(paragraph, after=0)

        assert paragraph.paragraph_format.space_after == 0
        assert paragraph.paragraph_format.space_before is None


class TestMarkupParagraphs:
    def test_inline_formatting(self, sink):
        paragraph = sink.append_empty_paragraph()
        sink.replace_content_with_markup_fragment(
            paragraph, "plain <strong>bold</strong> <em>it</em> <del>gone</del> <code>x</code>"
        )

        runs = {run.text: run for run in paragraph.runs}
        assert runs["bold"].bold is True
        assert runs["it"].italic is True
        assert runs["gone"].font.strike is True
        assert runs["x"].font.name == "Consolas"
        assert paragraph.text == "plain bold it gone x"

    def test_line_break(self, sink):
        paragraph = sink.append_empty_paragraph()
        sink.replace_content_with_markup_fragment(paragraph, "one<br>two")

        assert len(paragraph._p.findall(f".//{qn('w:br')}")) == 1

    def test_hyperlink(self, sink):
        paragraph = sink.append_empty_paragraph()
        sink.replace_content_with_markup_fragment(paragraph, 'see <a href="https://example.com">a &amp; b</a>')

        [hyperlink] = paragraph._p.findall(qn("w:hyperlink"))
        r_id = hyperlink.get(qn("r:id"))
        assert paragraph.part.rels[r_id].target_ref == "https://example.com"
        texts = [t.text for t in hyperlink.iter(qn("w:t"))]
        assert texts == ["a & b"]

    def test_replacing_clears_existing_runs(self, sink):
        paragraph = sink.append_paragraph("old")
        sink.replace_content_with_markup_fragment(paragraph, "new")

        assert paragraph.text == "new"


class TestTables:
    def test_append_table(self, sink):
        table = sink.append_table([["x", "y"], ["1", "2"]])

        assert len(table.rows) == 2
        assert len(table.columns) == 2
        assert table.cell(1, 0).text == "1"

    def test_empty_table_fails(self, sink):
        with pytest.raises(SinkFailure):
            sink.append_table([])

    def test_borders_in_schema_order(self, sink):
        table = sink.append_table([["a"]])
        for edge in (BorderEdge.INSIDE_VERTICAL, BorderEdge.TOP, BorderEdge.BOTTOM, BorderEdge.LEFT):
            sink.set_border_color(table, edge, "#000000")

        borders = table._tbl.tblPr.find(qn("w:tblBorders"))
        assert [child.tag for child in borders] == [qn("w:top"), qn("w:left"), qn("w:bottom"), qn("w:insideV")]
        assert _border(table, "top").get(qn("w:color")) == "000000"

    def test_border_color_replaced(self, sink):
        table = sink.append_table([["a"]])
        sink.set_border_color(table, BorderEdge.TOP, "#000000")
        sink.set_border_color(table, BorderEdge.TOP, "#ff0000")

        borders = table._tbl.tblPr.find(qn("w:tblBorders"))
        assert len(borders.findall(qn("w:top"))) == 1
        assert _border(table, "top").get(qn("w:color")) == "FF0000"

    def test_cell_shading(self, sink):
        table = sink.append_table([["a", "b"]])
        sink.set_cell_shading(table, 0, 1, "#DDDDDD")

        shd = table.cell(0, 1)._tc.tcPr.find(qn("w:shd"))
        assert shd.get(qn("w:fill")) == "DDDDDD"

    def test_table_spacing_applies_to_cells(self, sink):
        table = sink.append_table([["a", "b"]])
        sink.set_spacing(table, before=0, after=0)

        for cell in table.rows[0].cells:
            assert cell.paragraphs[0].paragraph_format.space_before == 0
            assert cell.paragraphs[0].paragraph_format.space_after == 0

    def test_clear_table_formats(self, sink):
        table = sink.append_table([["a"]])
        sink.clear_table_formats(table)

        assert table._tbl.tblPr.find(qn("w:tblStyle")) is None


class TestCommit:
    @pytest.mark.asyncio
    async def test_commit_saves_document(self, temp_dir):
        path = temp_dir / "out.docx"
        sink = DocxSink(path)
        sink.set_style(sink.append_paragraph("Title"), ParagraphStyle.HEADING_1)
        sink.append_table([["x"]])

        await sink.commit()

        assert sink.commits == 1
        reopened = docx.Document(str(path))
        assert reopened.paragraphs[0].text == "Title"
        assert reopened.paragraphs[0].style.name == "Heading 1"
        assert reopened.tables[0].cell(0, 0).text == "x"

    @pytest.mark.asyncio
    async def test_commit_without_path_only_counts(self, sink):
        await sink.commit()
        assert sink.commits == 1

    @pytest.mark.asyncio
    async def test_save_error_becomes_sink_failure(self, temp_dir):
        sink = DocxSink(temp_dir / "missing" / "out.docx")

        with pytest.raises(SinkFailure, match="commit"):
            await sink.commit()
