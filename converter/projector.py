"""
Block Projector

This module provides the `BlockProjector` class that walks a markup tree and
projects each block-level construct onto the append-only `DocumentSink` API.

Every element is first classified into one `BlockKind`; the kinds are checked
in a fixed precedence order (heading, list, table, paragraph, container,
fallback) and each kind has exactly one handler. Malformed or empty blocks are
skipped with a warning instead of aborting the conversion; host failures on
structural operations propagate as `SinkFailure`.

Example:
    >>> sink = RecordingSink()
    >>> root = MarkupParser().render("# Title\n\n- a\n- b")
    >>> projector = BlockProjector(sink)
    >>> for child in root.children:
    ...     projector.project(child)
    >>> [p.text for p in sink.paragraphs()]
    ['Title', '• a', '• b']
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from enum import Enum

from core.config import ConversionConfig, get_config
from core.errors import ConversionWarning, structural_rejection
from core.utils import best_effort
from converter.sink import HEADING_STYLES, BorderEdge, DocumentSink, ParagraphStyle
from converter.tables import Rejected, TableExtractor
from markup.nodes import Element, MarkupNode, Text

logger = logging.getLogger(__name__)

LIST_TAGS = ("ul", "ol")
LIST_ITEM_TAG = "li"

# Tags that only group other blocks
CONTAINER_TAGS = frozenset(
    {"div", "section", "article", "blockquote", "main", "header", "footer", "aside", "nav", "figure", "details"}
)

# Block-level tags; an unknown element holding one of these is walked like a container
BLOCK_TAGS = frozenset(
    {"h1", "h2", "h3", "h4", "h5", "h6", "p", "ul", "ol", "li", "table", "pre", "hr", "dl", "figcaption", "summary"}
    | CONTAINER_TAGS
)

# Task list checkbox rendered by mdit_py_plugins.tasklists
TASK_CHECKBOX_CLASS = "task-list-item-checkbox"
CHECKBOX_UNCHECKED = "☐"  # U+2610 BALLOT BOX
CHECKBOX_CHECKED = "☑"  # U+2611 BALLOT BOX WITH CHECK

_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_NBSP_RE = re.compile(r"&nbsp;|&#160;|&#xa0;|\xa0", re.IGNORECASE)


class BlockKind(str, Enum):
    """Block categories, listed in dispatch precedence order."""

    HEADING = "heading"
    LIST = "list"
    TABLE = "table"
    PARAGRAPH = "paragraph"
    CONTAINER = "container"
    FALLBACK = "fallback"


def classify(element: Element) -> BlockKind:
    """Map an element onto the block kind that handles it."""
    tag = element.tag
    if tag in HEADING_STYLES:
        return BlockKind.HEADING
    if tag in LIST_TAGS:
        return BlockKind.LIST
    if tag == "table":
        return BlockKind.TABLE
    if tag == "p":
        return BlockKind.PARAGRAPH
    if tag in CONTAINER_TAGS:
        return BlockKind.CONTAINER
    if any(child.tag in BLOCK_TAGS for child in element.child_elements()):
        return BlockKind.CONTAINER
    return BlockKind.FALLBACK


@dataclass(frozen=True)
class ListContext:
    """List state threaded through the walk; never stored."""

    ordered: bool = False
    nesting_level: int = 0

    def __post_init__(self):
        if self.nesting_level < 0:
            raise ValueError("nesting_level cannot be negative")

    def for_list(self, ordered: bool) -> ListContext:
        return replace(self, ordered=ordered)

    def deeper(self) -> ListContext:
        return replace(self, nesting_level=self.nesting_level + 1)


def strip_empty_markup(fragment: str) -> str:
    """Remove `<br>` tags, non-breaking spaces and surrounding whitespace."""
    return _NBSP_RE.sub("", _BR_RE.sub("", fragment)).strip()


def nested_lists(item: Element) -> list[Element]:
    """Lists inside a list item, outermost only, in document order."""
    found: list[Element] = []
    stack: list[MarkupNode] = list(reversed(item.children))
    while stack:
        node = stack.pop()
        if isinstance(node, Element):
            if node.tag in LIST_TAGS:
                found.append(node)
            else:
                stack.extend(reversed(node.children))
    return found


def list_item_text(item: Element) -> str:
    """
    The item's own text: everything before its first nested list.

    A task-list checkbox in that part becomes a ballot-box glyph in front of
    the text.
    """
    parts: list[str] = []
    checkbox: str | None = None
    stack: list[MarkupNode] = list(reversed(item.children))
    while stack:
        node = stack.pop()
        if isinstance(node, Text):
            parts.append(node.text)
            continue
        if node.tag in LIST_TAGS:
            break
        if node.tag == "input" and node.has_class(TASK_CHECKBOX_CLASS):
            checkbox = CHECKBOX_CHECKED if "checked" in node.attrs else CHECKBOX_UNCHECKED
            continue
        stack.extend(reversed(node.children))
    text = " ".join("".join(parts).split())
    if checkbox:
        return f"{checkbox} {text}".rstrip()
    return text


@dataclass(frozen=True)
class _ListItem:
    """Work-list entry for one item of a list being projected."""

    element: Element
    number: int


# Nodes still to project, with the list context they are projected in
WorkItem = tuple[MarkupNode | _ListItem, ListContext]


class BlockProjector:
    """
    Projects markup nodes onto a DocumentSink.

    Attributes:
        sink: The document host receiving operations.
        config: Conversion settings (list indentation, bullet glyph, table colours).
    """

    def __init__(self, sink: DocumentSink, config: ConversionConfig | None = None) -> None:
        self.sink = sink
        self.config = config or get_config()
        self.tables = TableExtractor()
        self._handlers = {
            BlockKind.HEADING: self._project_heading,
            BlockKind.LIST: self._project_list,
            BlockKind.TABLE: self._project_table,
            BlockKind.PARAGRAPH: self._project_paragraph,
            BlockKind.CONTAINER: self._project_container,
            BlockKind.FALLBACK: self._project_fallback,
        }

    def project(
        self,
        node: MarkupNode,
        ctx: ListContext | None = None,
        warnings: list[ConversionWarning] | None = None,
    ) -> list[ConversionWarning]:
        """
        Emit the document operations for one node and everything below it.

        Args:
            node: A text or element node.
            ctx: List context of the enclosing walk; a fresh top-level context by default.
            warnings: List to append warnings to, so callers keep them even if a SinkFailure escapes.

        Returns:
            Non-fatal warnings collected while projecting the node.

        Raises:
            SinkFailure: If the sink rejects a structural operation.
        """
        if warnings is None:
            warnings = []
        try:
            self._walk(node, ctx or ListContext(), warnings)
        except RecursionError:
            # Inline markup is serialized recursively; a paragraph nested that deep is dropped
            tag = node.tag if isinstance(node, Element) else "#text"
            self._reject(warnings, "markup nested too deeply", tag)
        return warnings

    def _walk(self, node: MarkupNode, ctx: ListContext, warnings: list[ConversionWarning]) -> None:
        """Depth-first walk over an explicit work-list; handlers return the work they leave for later."""
        pending: list[WorkItem] = [(node, ctx)]
        while pending:
            current, current_ctx = pending.pop()
            if isinstance(current, Text):
                self._project_text(current)
                continue
            if isinstance(current, _ListItem):
                queued = self._project_list_item(current, current_ctx)
            else:
                kind = classify(current)
                logger.debug(f"Projecting <{current.tag}> as {kind.value}, nesting_level={current_ctx.nesting_level}")
                queued = self._handlers[kind](current, current_ctx, warnings)
            if queued:
                pending.extend(reversed(queued))

    def _reject(self, warnings: list[ConversionWarning], message: str, tag: str) -> None:
        logger.warning(f"Skipping <{tag}>: {message}")
        warnings.append(structural_rejection(message, tag))

    def _best_effort(self, warnings: list[ConversionWarning], operation: str, func, *args, **kwargs) -> None:
        warning = best_effort(operation, func, *args, **kwargs)
        if warning is not None:
            warnings.append(warning)

    def _project_text(self, node: Text) -> None:
        text = node.text.strip()
        if text:
            logger.debug(f"Inserting stray text as paragraph: {text!r}")
            self.sink.append_paragraph(text)

    def _project_heading(self, element: Element, ctx: ListContext, warnings: list[ConversionWarning]) -> None:
        text = element.text_content().strip()
        if not text:
            self._reject(warnings, "empty heading", element.tag)
            return

        style = HEADING_STYLES[element.tag]
        logger.debug(f"Inserting heading {style.value}: {text!r}")
        handle = self.sink.append_paragraph(text)
        self.sink.set_style(handle, style)
        self._best_effort(warnings, "heading spacing adjustment", self.sink.set_spacing, handle, after=0)

    def _project_list(self, element: Element, ctx: ListContext, warnings: list[ConversionWarning]) -> list[WorkItem]:
        list_ctx = ctx.for_list(ordered=element.tag == "ol")
        items = element.child_elements(LIST_ITEM_TAG)
        if not items:
            self._reject(warnings, "list without items", element.tag)
            return []
        return [(_ListItem(item, number), list_ctx) for number, item in enumerate(items, start=1)]

    def _project_list_item(self, entry: _ListItem, list_ctx: ListContext) -> list[WorkItem]:
        indent = self.config.indent_for(list_ctx.nesting_level)
        prefix = f"{entry.number}." if list_ctx.ordered else self.config.bullet_glyph
        line = f"{indent}{prefix} {list_item_text(entry.element)}"
        logger.debug(f"Inserting list item: {line!r}")

        handle = self.sink.append_paragraph(line)
        self.sink.set_style(handle, ParagraphStyle.LIST_PARAGRAPH)
        return [(nested, list_ctx.deeper()) for nested in nested_lists(entry.element)]

    def _project_table(self, element: Element, ctx: ListContext, warnings: list[ConversionWarning]) -> None:
        grid = self.tables.extract(element)
        if isinstance(grid, Rejected):
            self._reject(warnings, f"invalid table: {grid.reason}", element.tag)
            return

        logger.debug(f"Inserting table with {len(grid)} rows and {len(grid[0])} columns")
        handle = self.sink.append_table(grid)

        if self.config.clear_table_formats:
            self._best_effort(warnings, "table format clearing", self.sink.clear_table_formats, handle)

        color = self.config.table_border_color
        for edge in BorderEdge:
            self.sink.set_border_color(handle, edge, color)

        if self.config.table_header_shading:
            for col in range(len(grid[0])):
                self.sink.set_cell_shading(handle, 0, col, self.config.table_header_shading)

        self._best_effort(warnings, "table spacing adjustment", self.sink.set_spacing, handle, before=0, after=0)

    def _project_paragraph(self, element: Element, ctx: ListContext, warnings: list[ConversionWarning]) -> None:
        fragment = element.inner_markup()
        if not strip_empty_markup(fragment):
            self._reject(warnings, "empty paragraph", element.tag)
            return

        logger.debug(f"Inserting paragraph: {fragment!r}")
        handle = self.sink.append_empty_paragraph()
        self.sink.replace_content_with_markup_fragment(handle, fragment)

    def _project_container(
        self, element: Element, ctx: ListContext, warnings: list[ConversionWarning]
    ) -> list[WorkItem]:
        return [(child, ctx) for child in element.children]

    def _project_fallback(self, element: Element, ctx: ListContext, warnings: list[ConversionWarning]) -> None:
        text = element.text_content().strip()
        if text:
            logger.debug(f"Inserting fallback text for <{element.tag}>: {text!r}")
            self.sink.append_paragraph(text)
        else:
            logger.debug(f"Skipping <{element.tag}> with no text")
