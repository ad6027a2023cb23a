"""
Markdown to Markup Tree Parser

This module provides the `MarkupParser` class that renders Markdown into HTML
with markdown-it-py and rebuilds that HTML as a tree of `Text` / `Element`
nodes for the block projector.

Example:
    >>> parser = MarkupParser()
    >>> root = parser.render("# Hello World\n\nThis is **bold** text.")
    >>> [child.tag for child in root.child_elements()]
    ['h1', 'p']
"""

from __future__ import annotations

import logging
from html.parser import HTMLParser

from markdown_it import MarkdownIt
from mdit_py_plugins.tasklists import tasklists_plugin

from core.errors import ParseFailure
from markup.nodes import VOID_ELEMENTS, Element, Text

logger = logging.getLogger(__name__)

ROOT_TAG = "body"


class _MarkupTreeBuilder(HTMLParser):
    """Build a `MarkupNode` tree from HTML using stdlib."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.root = Element(ROOT_TAG)
        self._stack: list[Element] = [self.root]

    def handle_starttag(self, tag, attrs):
        element = Element(tag, dict(attrs))
        self._stack[-1].children.append(element)
        if tag not in VOID_ELEMENTS:
            self._stack.append(element)

    def handle_startendtag(self, tag, attrs):
        self._stack[-1].children.append(Element(tag, dict(attrs)))

    def handle_endtag(self, tag):
        # Unmatched end tags are ignored; a matched one closes everything opened after it
        for depth in range(len(self._stack) - 1, 0, -1):
            if self._stack[depth].tag == tag:
                del self._stack[depth:]
                return
        logger.debug(f"Ignoring unmatched end tag </{tag}>")

    def handle_data(self, data):
        if not data:
            return
        children = self._stack[-1].children
        if children and isinstance(children[-1], Text):
            children[-1].text += data
        else:
            children.append(Text(data))


def parse_html(html: str) -> Element:
    """Build a markup tree from an HTML string; the returned root is a `body` element."""
    builder = _MarkupTreeBuilder()
    builder.feed(html)
    builder.close()
    return builder.root


class MarkupParser:
    """
    Renders Markdown into a markup tree.

    The parser uses markdown-it-py with the CommonMark preset plus GFM tables,
    strikethrough and task-list checkboxes. Raw HTML in the source is passed
    through, so `<div>` and friends appear as ordinary elements.
    """

    def __init__(self) -> None:
        self.md = MarkdownIt("commonmark").enable("table").enable("strikethrough").use(tasklists_plugin)

    def to_html(self, markdown: str) -> str:
        """Render Markdown to HTML, raising `ParseFailure` on any parser error."""
        if not isinstance(markdown, str):
            raise ParseFailure(f"Markdown source must be a string, got {type(markdown).__name__}")
        try:
            html = self.md.render(markdown)
        except Exception as e:
            logger.error(f"Markdown rendering failed: {e}", exc_info=True)
            raise ParseFailure(f"Could not parse Markdown input: {e}") from e
        logger.debug(f"Rendered {len(markdown)} chars of Markdown into {len(html)} chars of HTML")
        return html

    def render(self, markdown: str) -> Element:
        """
        Render Markdown to a markup tree.

        Args:
            markdown: The Markdown source text.

        Returns:
            A root element whose children are the top-level blocks, in document order.

        Raises:
            ParseFailure: If the Markdown or the intermediate HTML cannot be processed.
        """
        html = self.to_html(markdown)
        try:
            root = parse_html(html)
        except Exception as e:
            logger.error(f"Markup tree construction failed: {e}", exc_info=True)
            raise ParseFailure(f"Could not build markup tree: {e}") from e
        logger.debug(f"Markup tree has {len(root.children)} top-level node(s)")
        return root
