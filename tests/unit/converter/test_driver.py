"""Tests for ConversionDriver and the conversion outcome."""

from unittest.mock import MagicMock

import pytest

from converter.driver import ConversionDriver, ConversionOutcome, convert_markdown
from converter.sink import AppendTable, Commit, ParagraphStyle, RecordingSink, SetTableBorder
from core.config import ConversionConfig
from core.container import Container, set_container
from core.errors import ConversionFailure, ParseFailure, SinkFailure, WarningKind
from markup.parser import MarkupParser

SAMPLE = "# Title\n\n- a\n- b\n\n| x | y |\n|---|---|\n| 1 | 2 |"


class TestConvert:
    @pytest.mark.asyncio
    async def test_end_to_end_operations(self, recording_sink, config):
        outcome = await ConversionDriver(config=config).convert(SAMPLE, recording_sink)

        assert outcome.ok
        assert outcome.warnings == []
        paragraphs = recording_sink.paragraphs()
        assert (paragraphs[0].text, paragraphs[0].style) == ("Title", ParagraphStyle.HEADING_1)
        assert [(p.text, p.style) for p in paragraphs[1:]] == [
            ("• a", ParagraphStyle.LIST_PARAGRAPH),
            ("• b", ParagraphStyle.LIST_PARAGRAPH),
        ]
        [table] = recording_sink.ops_of(AppendTable)
        assert table.grid == (("x", "y"), ("1", "2"))
        borders = recording_sink.ops_of(SetTableBorder)
        assert len(borders) == 6
        assert len({op.color for op in borders}) == 1

    @pytest.mark.asyncio
    async def test_final_commit_is_last_operation(self, recording_sink, config):
        outcome = await ConversionDriver(config=config).convert(SAMPLE, recording_sink)

        assert outcome.commits == 1
        assert recording_sink.commits == 1
        assert isinstance(recording_sink.ops[-1], Commit)

    @pytest.mark.asyncio
    async def test_blocks_counts_top_level_nodes(self, recording_sink, config):
        outcome = await ConversionDriver(config=config).convert("# A\n\nb", recording_sink)

        # h1, p and the newline text nodes between them
        assert outcome.blocks == len(MarkupParser().render("# A\n\nb").children)

    @pytest.mark.asyncio
    async def test_periodic_commits(self, recording_sink):
        config = ConversionConfig(commit_every=1)
        source = "# A\n\n# B\n\n# C"
        outcome = await ConversionDriver(config=config).convert(source, recording_sink)

        assert outcome.ok
        assert outcome.commits == outcome.blocks + 1
        assert recording_sink.commits == outcome.commits

    @pytest.mark.asyncio
    async def test_warnings_collected_in_order(self, recording_sink, config):
        source = "#\n\n<table><tr><td>1</td></tr><tr><td>2</td><td>3</td></tr></table>\n\nafter"
        outcome = await ConversionDriver(config=config).convert(source, recording_sink)

        assert outcome.ok
        assert [w.tag for w in outcome.warnings] == ["h1", "table"]
        assert all(w.kind == WarningKind.STRUCTURAL_REJECTION for w in outcome.warnings)
        assert recording_sink.paragraphs()[-1].text == "after"

    @pytest.mark.asyncio
    async def test_empty_source(self, recording_sink, config):
        outcome = await ConversionDriver(config=config).convert("", recording_sink)

        assert outcome.ok
        assert recording_sink.ops == [Commit()]


class TestFailures:
    @pytest.mark.asyncio
    async def test_parse_failure_issues_no_operations(self, recording_sink, config):
        outcome = await ConversionDriver(config=config).convert(None, recording_sink)

        assert not outcome.ok
        assert isinstance(outcome.error, ParseFailure)
        assert recording_sink.ops == []

    @pytest.mark.asyncio
    async def test_unexpected_parser_error_becomes_parse_failure(self, recording_sink, config):
        parser = MagicMock()
        parser.render.side_effect = RuntimeError("broken parser")

        outcome = await ConversionDriver(parser=parser, config=config).convert("# x", recording_sink)

        assert isinstance(outcome.error, ParseFailure)
        assert "broken parser" in str(outcome.error)

    @pytest.mark.asyncio
    async def test_sink_failure_stops_walk_and_keeps_prior_warnings(self, config):
        sink = RecordingSink(fail_on=["append_table"])
        source = "#\n\n- a\n\n| x |\n|---|\n| 1 |\n\n# Never"

        outcome = await ConversionDriver(config=config).convert(source, sink)

        assert isinstance(outcome.error, SinkFailure)
        assert [w.tag for w in outcome.warnings] == ["h1"]
        assert outcome.error.warnings == outcome.warnings
        assert [p.text for p in sink.paragraphs()] == ["• a"]
        assert sink.commits == 0

    @pytest.mark.asyncio
    async def test_commit_failure(self, config):
        sink = RecordingSink(fail_on=["commit"])

        outcome = await ConversionDriver(config=config).convert("# Title", sink)

        assert isinstance(outcome.error, SinkFailure)
        assert outcome.commits == 0
        with pytest.raises(SinkFailure):
            outcome.raise_for_error()

    @pytest.mark.asyncio
    async def test_unexpected_error_is_not_reported_as_sink_failure(self, config):
        sink = RecordingSink()
        sink.append_paragraph = MagicMock(side_effect=KeyError("boom"))

        outcome = await ConversionDriver(config=config).convert("# Title", sink)

        assert isinstance(outcome.error, ConversionFailure)
        assert not isinstance(outcome.error, SinkFailure)
        assert "boom" in str(outcome.error)

    @pytest.mark.asyncio
    async def test_required_capability_missing_is_sink_failure(self, config):
        sink = RecordingSink(unavailable=["set_border_color"])

        outcome = await ConversionDriver(config=config).convert("| x |\n|---|\n| 1 |", sink)

        assert isinstance(outcome.error, SinkFailure)
        assert "set_border_color" in str(outcome.error)

    @pytest.mark.asyncio
    async def test_deeply_nested_containers_convert(self, recording_sink, config):
        source = "<div>\n" * 800 + "\ntext\n\n" + "</div>\n" * 800

        outcome = await ConversionDriver(config=config).convert(source, recording_sink)

        assert outcome.ok
        assert [p.text for p in recording_sink.paragraphs()] == ["text"]


class TestDefaults:
    @pytest.mark.asyncio
    async def test_driver_uses_container_collaborators(self, recording_sink, config):
        parser = MagicMock(wraps=MarkupParser())
        set_container(Container(parser=parser, config=config))

        outcome = await ConversionDriver().convert("text", recording_sink)

        assert outcome.ok
        parser.render.assert_called_once_with("text")

    @pytest.mark.asyncio
    async def test_convert_markdown(self, recording_sink, config):
        outcome = await convert_markdown("- item", recording_sink, config=config)

        assert outcome.ok
        assert recording_sink.paragraphs()[0].text == "• item"


class TestOutcome:
    def test_ok_without_error(self):
        outcome = ConversionOutcome()
        assert outcome.ok
        outcome.raise_for_error()

    def test_summary(self):
        outcome = ConversionOutcome(blocks=3, commits=1)
        assert "succeeded" in outcome.summary()
        assert "3 block(s)" in outcome.summary()
