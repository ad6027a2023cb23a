"""
Inline Markup Reader

Hosts such as Google Docs or python-docx have no "insert HTML" primitive, so
the raw inline fragment of a paragraph is flattened into styled text runs
that a sink can insert and format one range at a time.

Example:
    >>> runs = read_inline("Normal <strong>bold</strong> text")
    >>> [(run.text, run.bold) for run in runs]
    [('Normal ', False), ('bold', True), (' text', False)]
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from html.parser import HTMLParser

logger = logging.getLogger(__name__)

LINE_BREAK = "\n"

# Tag -> style attribute switched on while the tag is open
_STYLE_TAGS: dict[str, str] = {
    "strong": "bold",
    "b": "bold",
    "em": "italic",
    "i": "italic",
    "s": "strikethrough",
    "del": "strikethrough",
    "strike": "strikethrough",
    "u": "underline",
    "ins": "underline",
    "code": "code",
    "kbd": "code",
}

_COLLAPSIBLE_WS = re.compile(r"[ \t\r\n\f]+")


@dataclass(frozen=True)
class InlineRun:
    """A piece of paragraph text sharing one inline style."""

    text: str
    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    underline: bool = False
    code: bool = False
    link: str | None = None

    @property
    def is_line_break(self) -> bool:
        return self.text == LINE_BREAK

    @property
    def is_plain(self) -> bool:
        return not (self.bold or self.italic or self.strikethrough or self.underline or self.code or self.link)

    def same_style(self, other: InlineRun) -> bool:
        return replace(self, text="") == replace(other, text="")


class _InlineRunReader(HTMLParser):
    """Collect styled runs from an inline HTML fragment using stdlib."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.runs: list[InlineRun] = []
        self._active_styles: list[tuple[str, str | None]] = []

    def _current_style(self) -> dict:
        style: dict = {}
        for attr, value in self._active_styles:
            style[attr] = value if attr == "link" else True
        return style

    def handle_starttag(self, tag, attrs):
        if tag == "br":
            self.runs.append(InlineRun(LINE_BREAK))
        elif tag == "a":
            self._active_styles.append(("link", dict(attrs).get("href") or None))
        elif tag in _STYLE_TAGS:
            self._active_styles.append((_STYLE_TAGS[tag], None))
        elif tag == "img":
            alt = dict(attrs).get("alt")
            if alt:
                self._append_text(alt)

    def handle_startendtag(self, tag, attrs):
        self.handle_starttag(tag, attrs)
        if tag == "a" or tag in _STYLE_TAGS:
            self.handle_endtag(tag)

    def handle_endtag(self, tag):
        attr = "link" if tag == "a" else _STYLE_TAGS.get(tag)
        if attr is None:
            return
        for i in range(len(self._active_styles) - 1, -1, -1):
            if self._active_styles[i][0] == attr:
                self._active_styles.pop(i)
                return
        logger.warning(f"Closing </{tag}> without matching open tag")

    def handle_data(self, data):
        self._append_text(data)

    def _append_text(self, text: str) -> None:
        text = _COLLAPSIBLE_WS.sub(" ", text)
        if not text:
            return
        run = InlineRun(text, **self._current_style())
        if self.runs and not self.runs[-1].is_line_break and self.runs[-1].same_style(run):
            self.runs[-1] = replace(self.runs[-1], text=self.runs[-1].text + text)
        else:
            self.runs.append(run)


def _rstrip_line(runs: list[InlineRun]) -> None:
    while runs and not runs[-1].is_line_break:
        text = runs[-1].text.rstrip(" ")
        if text:
            runs[-1] = replace(runs[-1], text=text)
            return
        runs.pop()


def _trim_around_breaks(runs: list[InlineRun]) -> list[InlineRun]:
    """Drop collapsible spaces at paragraph edges and next to line breaks."""
    trimmed: list[InlineRun] = []
    at_line_start = True
    for run in runs:
        if run.is_line_break:
            _rstrip_line(trimmed)
            trimmed.append(run)
            at_line_start = True
            continue
        text = run.text.lstrip(" ") if at_line_start else run.text
        if text:
            trimmed.append(replace(run, text=text))
            at_line_start = False
    _rstrip_line(trimmed)
    return trimmed


def read_inline(fragment: str) -> list[InlineRun]:
    """
    Flatten an inline HTML fragment into styled runs.

    Whitespace is collapsed the way a browser would render it, `<br>` becomes
    a line-break run, and unknown tags contribute only their text.

    Args:
        fragment: Raw inner markup of a paragraph.

    Returns:
        Runs in document order; adjacent runs with the same style are merged.
    """
    reader = _InlineRunReader()
    reader.feed(fragment)
    reader.close()
    runs = _trim_around_breaks(reader.runs)
    logger.debug(f"Read {len(runs)} inline run(s) from {len(fragment)} chars of markup")
    return runs


def runs_to_text(runs: list[InlineRun]) -> str:
    """Plain text of a run list."""
    return "".join(run.text for run in runs)
