"""Unit tests for release-note text helpers."""

from patchworks.utils.text import (
    clean_fragment,
    heading_text,
    normalize_for_matching,
    split_lines,
    truncate_text,
)


class TestHeadingText:
    def test_atx_headings(self):
        assert heading_text("### Breaking Changes") == "Breaking Changes"
        assert heading_text("## [2.0.0] - 2024-03-01 ##") == "[2.0.0] - 2024-03-01"

    def test_non_headings(self):
        assert heading_text("- ### not a heading") is None
        assert heading_text("#123 fixed") is None
        assert heading_text("plain text") is None


class TestCleanFragment:
    def test_strips_markdown(self):
        line = "- **core:** removed `Session.close` ([#12](https://github.com/o/r/pull/12))"

        assert clean_fragment(line) == "core: removed `Session.close` (#12)"

    def test_task_list_and_numbered_items(self):
        assert clean_fragment("* [x] Drop Python 3.7") == "Drop Python 3.7"
        assert clean_fragment("2) Faster startup") == "Faster startup"

    def test_html_and_whitespace(self):
        assert clean_fragment("  Fixed <code>parse()</code>   crash ") == "Fixed parse() crash"


class TestSplitLines:
    def test_drops_blank_lines(self):
        assert split_lines("a\r\n\r\nb\n   \nc") == ["a", "b", "c"]

    def test_empty(self):
        assert split_lines("") == []


class TestNormalizeForMatching:
    def test_casefold_and_collapse(self):
        result = normalize_for_matching("  Dropped   SUPPORT\tfor Python ")

        assert result == "dropped support for python"


class TestTruncateText:
    def test_short_text_unchanged(self):
        assert truncate_text("requests", 40) == "requests"

    def test_prefers_word_break(self):
        result = truncate_text("alpha beta gamma delta epsilon", 20)

        assert result.endswith("...")
        assert len(result) <= 20
        assert result == "alpha beta gamma..."
