"""
Word Package

Writes converted Markdown into a `.docx` file with python-docx.
"""

from word.sink import DocxSink

__all__ = ["DocxSink"]
