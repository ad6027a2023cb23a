"""
Dependency Injection Container for md2doc.

Provides a centralized container for the default collaborators of a
conversion, enabling testability through mock injection.
"""

import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from core.config import ConversionConfig, get_config

logger = logging.getLogger(__name__)


@runtime_checkable
class MarkupParserProtocol(Protocol):
    """Protocol for Markdown-to-markup-tree parsers."""

    def render(self, markdown: str):
        """Render Markdown source into a root markup element."""
        ...


@dataclass
class Container:
    """
    Dependency injection container.

    Holds the parser and configuration used when a driver is built without
    explicit collaborators. If not provided, defaults to the standard ones.
    """

    parser: MarkupParserProtocol | None = None
    config: ConversionConfig | None = None

    def __post_init__(self) -> None:
        """Initialize with defaults if not provided."""
        if self.parser is None:
            from markup.parser import MarkupParser

            self.parser = MarkupParser()

        if self.config is None:
            self.config = get_config()


# Global container instance
_container: Container | None = None


def get_container() -> Container:
    """
    Get the global container instance.

    Creates a new container with default implementations if none exists.

    Returns:
        The global Container instance.
    """
    global _container
    if _container is None:
        _container = Container()
        logger.debug("Initialized default dependency container")
    return _container


def set_container(container: Container) -> None:
    """
    Set the global container instance.

    Use this for testing to inject mock implementations.

    Args:
        container: The container to use as the global instance.
    """
    global _container
    _container = container
    logger.debug("Set custom dependency container")


def reset_container() -> None:
    """
    Reset the global container.

    Use this between tests to ensure a clean state.
    """
    global _container
    _container = None
    logger.debug("Reset dependency container")
