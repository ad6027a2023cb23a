"""Tests for TableExtractor."""

import pytest

from converter.tables import EMPTY_CELL, Rejected, TableExtractor, extract_table
from markup.parser import MarkupParser, parse_html


@pytest.fixture
def extractor():
    return TableExtractor()


def _table(html: str):
    return parse_html(html).child_elements("table")[0]


class TestExtract:
    def test_gfm_table(self, extractor):
        root = MarkupParser().render("| x | y |\n|---|---|\n| 1 | 2 |\n| 3 | 4 |")
        grid = extractor.extract(root.child_elements("table")[0])
        assert grid == [["x", "y"], ["1", "2"], ["3", "4"]]

    def test_rectangular_grid_has_no_empty_strings(self, extractor):
        grid = extractor.extract(_table("<table><tr><td></td><td> b </td></tr><tr><td>c</td><td>  </td></tr></table>"))
        assert grid == [[EMPTY_CELL, "b"], ["c", EMPTY_CELL]]
        assert all(cell for row in grid for cell in row)

    def test_rows_without_cells_are_dropped(self, extractor):
        grid = extractor.extract(_table("<table><tr></tr><tr><th>a</th></tr><tr>\n</tr><tr><td>b</td></tr></table>"))
        assert grid == [["a"], ["b"]]

    def test_nested_table_rows_are_collected(self, extractor):
        html = "<table><tr><td>a<table><tr><td>inner</td></tr></table></td><td>b</td></tr></table>"
        result = extractor.extract(_table(html))
        assert isinstance(result, Rejected)

    def test_inconsistent_row_lengths_rejected(self, extractor):
        html = (
            "<table><tr><td>1</td><td>2</td></tr><tr><td>3</td><td>4</td></tr>"
            "<tr><td>5</td><td>6</td><td>7</td></tr></table>"
        )
        result = extractor.extract(_table(html))
        assert isinstance(result, Rejected)
        assert "inconsistent" in result.reason

    def test_table_without_rows_rejected(self, extractor):
        result = extractor.extract(_table("<table><caption>nothing</caption></table>"))
        assert result == Rejected("table has no rows")

    def test_table_with_only_empty_rows_rejected(self, extractor):
        result = extractor.extract(_table("<table><tr></tr></table>"))
        assert isinstance(result, Rejected)

    def test_extract_is_pure(self, extractor):
        table = _table("<table><tr><td>a</td><td>b</td></tr></table>")
        assert extractor.extract(table) == extractor.extract(table) == extract_table(table)
