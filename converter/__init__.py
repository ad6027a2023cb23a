"""
Converter Package

Projects a markup tree onto an append-only document sink.
"""

from converter.driver import ConversionDriver, ConversionOutcome, convert_markdown
from converter.projector import BlockKind, BlockProjector, ListContext, classify
from converter.sink import (
    BorderEdge,
    DocumentOp,
    DocumentSink,
    ParagraphStyle,
    RecordingSink,
    TableGrid,
)
from converter.tables import Rejected, TableExtractor, extract_table

__all__ = [
    "BlockKind",
    "BlockProjector",
    "BorderEdge",
    "classify",
    "ConversionDriver",
    "ConversionOutcome",
    "convert_markdown",
    "DocumentOp",
    "DocumentSink",
    "extract_table",
    "ListContext",
    "ParagraphStyle",
    "RecordingSink",
    "Rejected",
    "TableExtractor",
    "TableGrid",
]
