"""Core utilities for md2doc."""

from core.config import ConversionConfig, get_config, reload_config
from core.container import Container, get_container, reset_container, set_container
from core.errors import (
    CapabilityUnavailable,
    ConfigurationError,
    ConversionFailure,
    ConversionWarning,
    Md2DocError,
    ParseFailure,
    SinkFailure,
    WarningKind,
    capability_unavailable,
    structural_rejection,
)
from core.utils import best_effort, handle_host_errors, validate_hex_color

__all__ = [
    "best_effort",
    "CapabilityUnavailable",
    "capability_unavailable",
    "ConfigurationError",
    "Container",
    "ConversionConfig",
    "ConversionFailure",
    "ConversionWarning",
    "get_config",
    "get_container",
    "handle_host_errors",
    "Md2DocError",
    "ParseFailure",
    "reload_config",
    "reset_container",
    "set_container",
    "SinkFailure",
    "structural_rejection",
    "validate_hex_color",
    "WarningKind",
]
