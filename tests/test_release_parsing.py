"""Unit tests for changelog parsing and commit-log rendering."""

from pathlib import Path

import pytest

from patchworks.fetchers import format_commit_changelog, parse_changelog
from patchworks.fetchers.commit_log import find_tag

FIXTURES = Path(__file__).parent / "fixtures"


class TestParseChangelog:
    """Tests for parse_changelog."""

    def test_keep_a_changelog_format(self):
        document = parse_changelog((FIXTURES / "CHANGELOG.md").read_text())

        assert [r.version for r in document.releases] == ["2.0.0", "1.5.0", "1.0.0"]
        assert document.releases[0].published_at == "2024-03-01"
        assert "### Security" in document.releases[0].notes
        assert "CVE-2024-35195" in document.releases[0].notes

    def test_unreleased_section_dropped(self):
        document = parse_changelog((FIXTURES / "CHANGELOG.md").read_text())

        assert all("Work in progress" not in r.notes for r in document.releases)

    def test_setext_headings(self):
        content = (
            "2.0.0 (2024-03-01)\n"
            "------------------\n"
            "- Removed `old_api` function\n"
            "\n"
            "1.0.0\n"
            "=====\n"
            "- Initial release\n"
        )

        document = parse_changelog(content)

        assert [r.version for r in document.releases] == ["2.0.0", "1.0.0"]
        assert document.releases[0].published_at == "2024-03-01"
        assert document.releases[0].notes == "- Removed `old_api` function"
        assert document.releases[1].published_at is None

    @pytest.mark.parametrize(
        "heading,version",
        [
            ("## Version 1.2.0", "1.2.0"),
            ("## pkg@1.2.0", "1.2.0"),
            ("## v1.2.0 (2024-01-01)", "1.2.0"),
            ("## [1.2.0rc1]", "1.2.0rc1"),
            ("### Release 1.2", "1.2"),
        ],
    )
    def test_heading_variants(self, heading, version):
        document = parse_changelog(f"{heading}\n- change\n")

        assert document.releases[0].version == version
        assert document.releases[0].notes == "- change"

    def test_release_please_format(self):
        document = parse_changelog((FIXTURES / "CHANGELOG-release-please.md").read_text())

        assert [r.version for r in document.releases] == ["1.6.0", "1.5.1", "1.5.0"]
        patch_release = document.releases[1]
        assert patch_release.published_at == "2024-02-01"
        assert patch_release.notes.startswith("### Bug Fixes")
        assert "removed the legacy `connect` method" in patch_release.notes
        assert "connect" not in document.releases[0].notes
        assert document.releases[2].notes.startswith("### Features\n\n* add retries")

    def test_same_level_section_stays_in_release(self):
        document = parse_changelog("## 1.0.0\n- a\n## Contributors\n- bob\n")

        assert document.releases[0].notes == "- a\n## Contributors\n- bob"

    def test_shallower_heading_closes_release(self):
        document = parse_changelog("## 1.0.0\n- a\n# Appendix\n- bob\n")

        assert document.releases[0].notes == "- a"

    def test_unreleased_heading_closes_release(self):
        document = parse_changelog("### 1.0.1\n- a\n### [Unreleased]\n- wip\n## 1.0.0\n- b\n")

        assert [r.notes for r in document.releases] == ["- a", "- b"]

    def test_empty_content(self):
        assert len(parse_changelog("")) == 0
        assert len(parse_changelog("# Changelog\n\nNothing yet.")) == 0


class TestFormatCommitChangelog:
    """Tests for format_commit_changelog."""

    def commit(self, message, sha="abcdef1234567", url="https://github.com/o/r/commit/abcdef1"):
        data = {"sha": sha, "commit": {"message": message}}
        if url:
            data["html_url"] = url
        return data

    def test_groups_by_type(self):
        text = format_commit_changelog(
            [
                self.commit("fix(parser): handle tabs"),
                self.commit("feat: add retry hooks"),
            ]
        )

        assert text.startswith("### Changelog")
        # Features render before Bug Fixes regardless of commit order
        assert text.index("#### Features") < text.index("#### Bug Fixes")
        expected = "- **parser:** handle tabs ([abcdef1](https://github.com/o/r/commit/abcdef1))"
        assert expected in text

    def test_breaking_footer(self):
        text = format_commit_changelog(
            [self.commit("feat: new parser\n\nBREAKING CHANGE: config keys renamed")]
        )

        assert "#### Breaking Changes\n- new parser" in text
        assert "#### Features" not in text

    def test_unconventional_commits_are_additional(self):
        text = format_commit_changelog([self.commit("wip: stuff"), self.commit("Bump version")])

        assert "### Changelog" not in text
        assert text.startswith("### Additional Commits")
        assert "- wip: stuff" in text
        assert "- Bump version" in text

    def test_link_without_url(self):
        text = format_commit_changelog([self.commit("fix: typo", url=None)])

        assert "- typo (abcdef1)" in text

    def test_empty_messages_skipped(self):
        assert format_commit_changelog([self.commit("   "), {"sha": "x"}]) == ""


class TestFindTag:
    def test_matches_semantically(self):
        assert find_tag(["v2.0", "v1.0"], "1.0.0") == "v1.0"

    def test_missing(self):
        assert find_tag(["v2.0.0"], "1.0.0") is None
        assert find_tag([], "1.0.0") is None
