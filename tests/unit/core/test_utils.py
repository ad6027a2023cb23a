"""Tests for core helpers: colour validation, best-effort calls and host error translation."""

from unittest.mock import MagicMock

import pytest
from googleapiclient.errors import HttpError

from core.errors import CapabilityUnavailable, SinkFailure, WarningKind
from core.utils import best_effort, handle_host_errors, validate_hex_color


def _http_error(status: int, message: str = "denied") -> HttpError:
    resp = MagicMock(status=status, reason="Error")
    content = f'{{"error": {{"message": "{message}"}}}}'.encode()
    return HttpError(resp, content)


class TestValidateHexColor:
    """Test colour validation."""

    def test_valid_color(self):
        assert validate_hex_color("#000000") == "#000000"

    def test_normalizes_case(self):
        assert validate_hex_color("#a1b2c3") == "#A1B2C3"

    def test_strips_whitespace(self):
        assert validate_hex_color("  #ffffff ") == "#FFFFFF"

    @pytest.mark.parametrize("value", ["000000", "#FFF", "#GGGGGG", "", None])
    def test_invalid_color_raises_error(self, value):
        with pytest.raises(ValueError, match="hex string"):
            validate_hex_color(value, "border")


class TestBestEffort:
    """Test the best-effort combinator."""

    def test_success_returns_none(self):
        func = MagicMock()
        assert best_effort("spacing", func, 1, after=0) is None
        func.assert_called_once_with(1, after=0)

    def test_capability_unavailable_becomes_warning(self):
        func = MagicMock(side_effect=CapabilityUnavailable("set_spacing"))

        warning = best_effort("heading spacing", func)

        assert warning is not None
        assert warning.kind == WarningKind.CAPABILITY_UNAVAILABLE
        assert "heading spacing" in warning.message

    def test_other_errors_propagate(self):
        func = MagicMock(side_effect=SinkFailure("boom"))
        with pytest.raises(SinkFailure):
            best_effort("spacing", func)


class TestHandleHostErrors:
    """Test host error translation."""

    @pytest.mark.asyncio
    async def test_async_success_passes_through(self):
        @handle_host_errors("commit")
        async def commit():
            return "done"

        assert await commit() == "done"

    @pytest.mark.asyncio
    async def test_http_error_becomes_sink_failure_with_status(self):
        @handle_host_errors("commit")
        async def commit():
            raise _http_error(403)

        with pytest.raises(SinkFailure) as exc_info:
            await commit()
        assert exc_info.value.status_code == 403
        assert "commit" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_sink_failure(self):
        @handle_host_errors("commit")
        async def commit():
            raise OSError("disk full")

        with pytest.raises(SinkFailure, match="disk full"):
            await commit()

    def test_sync_function_is_wrapped(self):
        @handle_host_errors("append")
        def append():
            raise RuntimeError("broken")

        with pytest.raises(SinkFailure, match="append"):
            append()

    def test_own_errors_pass_through_unchanged(self):
        @handle_host_errors("spacing")
        def set_spacing():
            raise CapabilityUnavailable("set_spacing")

        with pytest.raises(CapabilityUnavailable):
            set_spacing()
