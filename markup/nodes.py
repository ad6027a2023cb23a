"""
Markup tree nodes.

The tree produced by `markup.parser.MarkupParser` is made of two node kinds:
`Text` leaves and `Element` nodes with a tag, attributes and ordered
children. Children order is document order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from html import escape

# Elements that never have children or a closing tag
VOID_ELEMENTS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"}
)


@dataclass
class Text:
    """A run of character data."""

    text: str

    def text_content(self) -> str:
        return self.text

    def to_markup(self) -> str:
        return escape(self.text, quote=False)


@dataclass
class Element:
    """An element node: tag name, attributes and ordered children."""

    tag: str
    attrs: dict[str, str | None] = field(default_factory=dict)
    children: list[MarkupNode] = field(default_factory=list)

    def text_content(self) -> str:
        """Concatenated text of all descendant text nodes."""
        parts: list[str] = []
        stack: list[MarkupNode] = [self]
        while stack:
            node = stack.pop()
            if isinstance(node, Text):
                parts.append(node.text)
            else:
                stack.extend(reversed(node.children))
        return "".join(parts)

    def child_elements(self, *tags: str) -> list[Element]:
        """Direct element children, optionally restricted to the given tags."""
        return [
            child for child in self.children if isinstance(child, Element) and (not tags or child.tag in tags)
        ]

    def iter_descendants(self, *tags: str):
        """Yield descendant elements in document order, optionally filtered by tag."""
        stack: list[MarkupNode] = list(reversed(self.children))
        while stack:
            node = stack.pop()
            if isinstance(node, Element):
                if not tags or node.tag in tags:
                    yield node
                stack.extend(reversed(node.children))

    def has_class(self, name: str) -> bool:
        return name in (self.attrs.get("class") or "").split()

    def inner_markup(self) -> str:
        """Children serialised back to HTML."""
        return "".join(child.to_markup() for child in self.children)

    def to_markup(self) -> str:
        attrs = "".join(
            f" {name}" if value is None else f' {name}="{escape(value, quote=True)}"'
            for name, value in self.attrs.items()
        )
        if self.tag in VOID_ELEMENTS:
            return f"<{self.tag}{attrs}>"
        return f"<{self.tag}{attrs}>{self.inner_markup()}</{self.tag}>"


MarkupNode = Text | Element
