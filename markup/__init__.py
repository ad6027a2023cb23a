"""
Markup Tree Package

Turns Markdown source into the `Text` / `Element` tree walked by the block
projector, and flattens inline fragments into styled runs.
"""

from markup.inline import InlineRun, read_inline, runs_to_text
from markup.nodes import Element, MarkupNode, Text
from markup.parser import MarkupParser, parse_html

__all__ = [
    "Element",
    "InlineRun",
    "MarkupNode",
    "MarkupParser",
    "parse_html",
    "read_inline",
    "runs_to_text",
    "Text",
]
