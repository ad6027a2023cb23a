"""Shared pytest fixtures for md2doc tests."""

import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from converter.sink import RecordingSink
from core.config import ConversionConfig
from core.container import reset_container


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def recording_sink():
    """Create an in-memory sink that records every document operation."""
    return RecordingSink()


@pytest.fixture
def config():
    """Default configuration, independent of the caller's environment."""
    return ConversionConfig(
        list_indent=4,
        bullet_glyph="•",
        table_border_color="#000000",
        table_header_shading=None,
        clear_table_formats=True,
        commit_every=0,
        log_level="INFO",
    )


@pytest.fixture
def mock_docs_service():
    """Create a mock Google Docs service."""
    service = MagicMock()
    service.documents.return_value.batchUpdate.return_value.execute.return_value = {
        "documentId": "doc-123",
        "replies": [],
    }
    service.documents.return_value.get.return_value.execute.return_value = {
        "documentId": "doc-123",
        "body": {
            "content": [
                {"endIndex": 1, "sectionBreak": {}},
                {
                    "startIndex": 1,
                    "endIndex": 13,
                    "paragraph": {"elements": [{"textRun": {"content": "Hello world\n"}}]},
                },
            ]
        },
    }
    return service


@pytest.fixture(autouse=True)
def clean_container():
    """Reset the dependency container before and after each test."""
    reset_container()
    yield
    reset_container()


@pytest.fixture
def env_override(monkeypatch):
    """Helper to override environment variables."""

    def _override(**kwargs):
        for key, value in kwargs.items():
            if value is None:
                monkeypatch.delenv(key, raising=False)
            else:
                monkeypatch.setenv(key, value)

    return _override
