"""
Error types for md2doc conversions.

Fatal failures are exceptions that end a conversion; non-fatal problems are
recorded as `ConversionWarning` values and the walk continues.
"""

from dataclasses import dataclass
from enum import Enum


class WarningKind(str, Enum):
    """Categories of non-fatal conversion problems."""

    STRUCTURAL_REJECTION = "structural_rejection"
    CAPABILITY_UNAVAILABLE = "capability_unavailable"


@dataclass(frozen=True)
class ConversionWarning:
    """A block that was skipped or a cosmetic host call that could not be applied."""

    kind: WarningKind
    message: str
    tag: str | None = None

    def __str__(self) -> str:
        if self.tag:
            return f"<{self.tag}>: {self.message}"
        return self.message


def structural_rejection(message: str, tag: str | None = None) -> ConversionWarning:
    """Build a warning for a block omitted from the output."""
    return ConversionWarning(WarningKind.STRUCTURAL_REJECTION, message, tag)


def capability_unavailable(message: str, tag: str | None = None) -> ConversionWarning:
    """Build a warning for an optional host operation that was not applied."""
    return ConversionWarning(WarningKind.CAPABILITY_UNAVAILABLE, message, tag)


# =============================================================================
# Base Exception Hierarchy
# =============================================================================


class Md2DocError(Exception):
    """Base exception for all md2doc errors."""

    pass


class ConfigurationError(Md2DocError, ValueError):
    """Raised when an environment variable or override has an invalid value."""

    pass


class CapabilityUnavailable(Md2DocError):
    """Raised by a sink when an optional cosmetic operation is not supported by the host."""

    def __init__(self, capability: str, reason: str | None = None):
        message = f"Host does not support '{capability}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.capability = capability
        self.reason = reason


# =============================================================================
# Fatal Conversion Errors
# =============================================================================


class ConversionFailure(Md2DocError):
    """Raised when a conversion cannot run to completion."""

    def __init__(self, message: str, warnings: list[ConversionWarning] | None = None):
        super().__init__(message)
        self.warnings: list[ConversionWarning] = list(warnings or [])


class ParseFailure(ConversionFailure):
    """Raised when the Markdown parser could not process the input."""

    pass


class SinkFailure(ConversionFailure):
    """Raised when the document host rejects a structural operation or a commit."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        warnings: list[ConversionWarning] | None = None,
    ):
        super().__init__(message, warnings)
        self.status_code = status_code
