"""
Google Docs Helper Functions

Request builders for the Google Docs API `batchUpdate` endpoint, plus the
index arithmetic for tables inserted at a known position.
"""

import logging
from typing import Any

from core.utils import validate_hex_color

logger = logging.getLogger(__name__)

# Named paragraph styles of the Docs API
NAMED_STYLE_NORMAL = "NORMAL_TEXT"
NAMED_STYLE_HEADINGS = ("HEADING_1", "HEADING_2", "HEADING_3")

# Code span styling
CODE_FONT_FAMILY = "Consolas"
CODE_BACKGROUND_COLOR = {"red": 0.96, "green": 0.96, "blue": 0.96}  # #f5f5f5

DEFAULT_BORDER_WIDTH_PT = 1.0

# Soft line break inside a paragraph
LINE_BREAK = "\v"

# Border property of tableCellStyle per side of a cell
BORDER_SIDES = ("borderTop", "borderBottom", "borderLeft", "borderRight")


def _normalize_color(color: str | None, param_name: str) -> dict[str, float] | None:
    """
    Convert a #RRGGBB colour into the Docs API rgbColor form (floats in 0..1).

    Returns None when `color` is None.
    """
    if color is None:
        return None
    hex_color = validate_hex_color(color, param_name)[1:]
    red, green, blue = (int(hex_color[i : i + 2], 16) / 255 for i in (0, 2, 4))
    return {"red": red, "green": green, "blue": blue}


def utf16_length(text: str) -> int:
    """Length of `text` in Docs API index units (UTF-16 code units)."""
    return len(text.encode("utf-16-le")) // 2


def build_text_style(
    bold: bool | None = None,
    italic: bool | None = None,
    underline: bool | None = None,
    strikethrough: bool | None = None,
    font_size: int | None = None,
    font_family: str | None = None,
    text_color: str | None = None,
    background_color: str | dict[str, float] | None = None,
    link_url: str | None = None,
) -> tuple[dict[str, Any], list[str]]:
    """
    Build a textStyle object and its fields mask.

    Only arguments that are not None are included.

    Returns:
        Tuple of (text_style, fields).
    """
    style: dict[str, Any] = {}
    fields: list[str] = []

    for name, value in (
        ("bold", bold),
        ("italic", italic),
        ("underline", underline),
        ("strikethrough", strikethrough),
    ):
        if value is not None:
            style[name] = value
            fields.append(name)

    if font_size is not None:
        style["fontSize"] = {"magnitude": font_size, "unit": "PT"}
        fields.append("fontSize")

    if font_family is not None:
        style["weightedFontFamily"] = {"fontFamily": font_family}
        fields.append("weightedFontFamily")

    if text_color is not None:
        style["foregroundColor"] = {"color": {"rgbColor": _normalize_color(text_color, "text_color")}}
        fields.append("foregroundColor")

    if background_color is not None:
        if isinstance(background_color, str):
            background_color = _normalize_color(background_color, "background_color")
        style["backgroundColor"] = {"color": {"rgbColor": background_color}}
        fields.append("backgroundColor")

    if link_url is not None:
        style["link"] = {"url": link_url}
        fields.append("link")

    return style, fields


def create_insert_text_request(index: int, text: str) -> dict[str, Any]:
    """Create an insertText request."""
    return {"insertText": {"location": {"index": index}, "text": text}}


def create_format_text_request(start_index: int, end_index: int, **style_kwargs: Any) -> dict[str, Any] | None:
    """
    Create an updateTextStyle request for a range.

    Accepts the keyword arguments of `build_text_style`. Returns None when no
    style property is given.
    """
    style, fields = build_text_style(**style_kwargs)
    if not style:
        return None
    return {
        "updateTextStyle": {
            "range": {"startIndex": start_index, "endIndex": end_index},
            "textStyle": style,
            "fields": ",".join(fields),
        }
    }


def create_paragraph_style_request(
    start_index: int,
    end_index: int,
    named_style_type: str | None = None,
    space_above: float | None = None,
    space_below: float | None = None,
) -> dict[str, Any] | None:
    """Create an updateParagraphStyle request, or None when nothing is set."""
    style: dict[str, Any] = {}
    if named_style_type is not None:
        style["namedStyleType"] = named_style_type
    if space_above is not None:
        style["spaceAbove"] = {"magnitude": space_above, "unit": "PT"}
    if space_below is not None:
        style["spaceBelow"] = {"magnitude": space_below, "unit": "PT"}
    if not style:
        return None
    return {
        "updateParagraphStyle": {
            "range": {"startIndex": start_index, "endIndex": end_index},
            "paragraphStyle": style,
            "fields": ",".join(style.keys()),
        }
    }


def create_delete_bullets_request(start_index: int, end_index: int) -> dict[str, Any]:
    """Create a deleteParagraphBullets request, for paragraphs that inherited list formatting."""
    return {"deleteParagraphBullets": {"range": {"startIndex": start_index, "endIndex": end_index}}}


def create_insert_table_request(index: int, rows: int, columns: int) -> dict[str, Any]:
    """Create an insertTable request."""
    return {"insertTable": {"location": {"index": index}, "rows": rows, "columns": columns}}


def build_border(color: str, width: float = DEFAULT_BORDER_WIDTH_PT) -> dict[str, Any]:
    """A solid tableCellBorder in the given colour."""
    return {
        "color": {"color": {"rgbColor": _normalize_color(color, "border_color")}},
        "width": {"magnitude": width, "unit": "PT"},
        "dashStyle": "SOLID",
    }


def create_table_cell_style_request(
    table_start_index: int,
    row_index: int,
    column_index: int,
    row_span: int = 1,
    column_span: int = 1,
    borders: dict[str, dict[str, Any]] | None = None,
    background_color: str | None = None,
) -> dict[str, Any]:
    """
    Create an updateTableCellStyle request for a rectangular range of cells.

    Args:
        table_start_index: Index of the table's start in the document.
        borders: Mapping of tableCellStyle border names (e.g. 'borderTop') to border objects.
        background_color: Optional #RRGGBB cell fill.
    """
    cell_style: dict[str, Any] = {}
    for side, border in (borders or {}).items():
        if side not in BORDER_SIDES:
            raise ValueError(f"Unknown border side '{side}', expected one of {BORDER_SIDES}")
        cell_style[side] = border
    if background_color is not None:
        cell_style["backgroundColor"] = {"color": {"rgbColor": _normalize_color(background_color, "background_color")}}

    return {
        "updateTableCellStyle": {
            "tableRange": {
                "tableCellLocation": {
                    "tableStartLocation": {"index": table_start_index},
                    "rowIndex": row_index,
                    "columnIndex": column_index,
                },
                "rowSpan": row_span,
                "columnSpan": column_span,
            },
            "tableCellStyle": cell_style,
            "fields": ",".join(cell_style.keys()),
        }
    }


# =============================================================================
# Table index math
# =============================================================================
#
# For a table inserted at index I with C columns:
#   - the table starts at I and the content of cell (0, 0) at I + 3
#   - each cell occupies 2 indices (content + cell boundary)
#   - each row adds 1 index for the row start
#   - an empty table consumes 2 + R * (2 * C + 1) indices
#
# The I + 3 cell offset is the empirically verified one (I + 4 was rejected
# with HttpError 400). Table, row and cell each open with one index before the
# cell content, so the table element itself sits at I and I is also the
# tableStartLocation for updateTableCellStyle.


def table_cell_index(table_start_index: int, row: int, column: int, columns: int) -> int:
    """Content index of cell (row, column) in a freshly inserted, still empty table."""
    return table_start_index + 3 + row * (2 * columns + 1) + column * 2


def table_consumption(rows: int, columns: int, text_length: int = 0) -> int:
    """Number of indices a table occupies once `text_length` units of cell text are inserted."""
    return 2 + rows * (2 * columns + 1) + text_length
