"""
Conversion Configuration for md2doc.

All tunable values are read from environment variables, with keyword
overrides taking precedence. Provides a single source of truth for the
projector, the driver and the CLI.
"""

import logging
import os
from typing import Any

from core.errors import ConfigurationError
from core.utils import validate_hex_color

ENV_PREFIX = "MD2DOC_"

DEFAULT_LIST_INDENT = 4
DEFAULT_BULLET_GLYPH = "•"
DEFAULT_TABLE_BORDER_COLOR = "#000000"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def _parse_bool(name: str, value: str | bool) -> bool:
    if isinstance(value, bool):
        return value
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}")


def _parse_non_negative_int(name: str, value: str | int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from e
    if parsed < 0:
        raise ConfigurationError(f"{name} cannot be negative")
    return parsed


class ConversionConfig:
    """
    Centralized conversion settings.

    Attributes:
        list_indent: Spaces of indentation per list nesting level.
        bullet_glyph: Prefix used for unordered list items.
        table_border_color: Colour applied to all six table border edges.
        table_header_shading: Optional fill colour for the first table row.
        clear_table_formats: Whether to ask the host to drop its default table style.
        commit_every: Commit after this many top-level blocks (0 = final commit only).
        log_level: Default logging level for the CLI.
    """

    _FIELDS = (
        "list_indent",
        "bullet_glyph",
        "table_border_color",
        "table_header_shading",
        "clear_table_formats",
        "commit_every",
        "log_level",
    )

    def __init__(self, **overrides: Any):
        unknown = set(overrides) - set(self._FIELDS)
        if unknown:
            raise ConfigurationError(f"Unknown configuration option(s): {', '.join(sorted(unknown))}")

        def pick(field: str, env_name: str, default: Any) -> Any:
            if field in overrides:
                return overrides[field]
            return _env(env_name, default)

        self.list_indent = _parse_non_negative_int(
            "list_indent", pick("list_indent", "LIST_INDENT", str(DEFAULT_LIST_INDENT))
        )

        self.bullet_glyph = pick("bullet_glyph", "BULLET_GLYPH", DEFAULT_BULLET_GLYPH)
        if not self.bullet_glyph or not self.bullet_glyph.strip():
            raise ConfigurationError("bullet_glyph cannot be empty")

        self.table_border_color = self._color(
            "table_border_color", pick("table_border_color", "TABLE_BORDER_COLOR", DEFAULT_TABLE_BORDER_COLOR)
        )

        shading = pick("table_header_shading", "TABLE_HEADER_SHADING", None)
        self.table_header_shading = self._color("table_header_shading", shading) if shading else None

        self.clear_table_formats = _parse_bool(
            "clear_table_formats", pick("clear_table_formats", "CLEAR_TABLE_FORMATS", "true")
        )
        self.commit_every = _parse_non_negative_int("commit_every", pick("commit_every", "COMMIT_EVERY", "0"))

        self.log_level = str(pick("log_level", "LOG_LEVEL", "INFO")).upper()
        if self.log_level not in _LOG_LEVELS:
            raise ConfigurationError(f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {self.log_level!r}")

    @staticmethod
    def _color(name: str, value: str) -> str:
        try:
            return validate_hex_color(value, name)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    def indent_for(self, nesting_level: int) -> str:
        """Return the indentation prefix for a list at the given nesting level."""
        return " " * (self.list_indent * nesting_level)

    def get_logging_level(self) -> int:
        """Return the numeric logging level for `log_level`."""
        return getattr(logging, self.log_level)

    def get_environment_summary(self) -> dict[str, Any]:
        """
        Get a summary of the effective configuration.

        Returns:
            Dictionary of every configuration field and its value
        """
        return {field: getattr(self, field) for field in self._FIELDS}

    def __repr__(self) -> str:
        values = ", ".join(f"{k}={v!r}" for k, v in self.get_environment_summary().items())
        return f"ConversionConfig({values})"


# Global configuration instance
_config: ConversionConfig | None = None


def get_config() -> ConversionConfig:
    """
    Get the global conversion configuration instance.

    Returns:
        The global ConversionConfig instance
    """
    global _config
    if _config is None:
        _config = ConversionConfig()
    return _config


def reload_config() -> ConversionConfig:
    """
    Reload the configuration from environment variables.

    Use this after changing environment variables at runtime.

    Returns:
        The reloaded ConversionConfig instance
    """
    global _config
    _config = ConversionConfig()
    return _config
