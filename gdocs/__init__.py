"""
Google Docs Package

Writes converted Markdown into a Google Doc through the Docs API.
"""

from gdocs.sink import DocsParagraph, DocsTable, GoogleDocsSink

__all__ = [
    "DocsParagraph",
    "DocsTable",
    "GoogleDocsSink",
]
