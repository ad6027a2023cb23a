"""Tests for flattening inline markup into styled runs."""

from markup.inline import LINE_BREAK, InlineRun, read_inline, runs_to_text


class TestReadInline:
    def test_plain_text(self):
        assert read_inline("hello world") == [InlineRun("hello world")]

    def test_styles(self):
        runs = read_inline("a <strong>b</strong> <em>c</em> <s>d</s> <code>e</code>")
        styled = {run.text: run for run in runs}

        assert styled["b"].bold
        assert styled["c"].italic
        assert styled["d"].strikethrough
        assert styled["e"].code
        assert runs_to_text(runs) == "a b c d e"

    def test_nested_styles_combine(self):
        runs = read_inline("<strong>bold <em>both</em></strong>")
        assert runs[-1] == InlineRun("both", bold=True, italic=True)

    def test_link(self):
        runs = read_inline('see <a href="https://example.com">docs</a>')
        assert runs[-1] == InlineRun("docs", link="https://example.com")

    def test_line_break(self):
        runs = read_inline("first<br>\nsecond")
        assert [run.text for run in runs] == ["first", LINE_BREAK, "second"]
        assert runs[1].is_line_break

    def test_whitespace_collapsed_and_trimmed(self):
        runs = read_inline("  lots   of\n\tspace  ")
        assert runs_to_text(runs) == "lots of space"

    def test_adjacent_same_style_runs_merge(self):
        runs = read_inline("<strong>a</strong><b>b</b>")
        assert runs == [InlineRun("ab", bold=True)]

    def test_image_contributes_alt_text(self):
        runs = read_inline('<img src="x.png" alt="diagram">')
        assert runs_to_text(runs) == "diagram"

    def test_entities_decoded(self):
        assert runs_to_text(read_inline("a &amp; b")) == "a & b"

    def test_empty_fragment(self):
        assert read_inline("") == []
