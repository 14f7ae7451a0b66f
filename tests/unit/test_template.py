"""Tests for the Markdown changelog template."""

from __future__ import annotations

from datetime import date

import pytest

from monobump.core.commits import PRCategory
from monobump.core.document import ChangelogDocument, ChangelogSection
from monobump.core.template import (
    BREAKING_LABEL,
    NO_CHANGES,
    OTHER_LABEL,
    PR_CATEGORY_LABELS,
    TYPE_LABELS,
    MarkdownChangelogTemplate,
)


@pytest.fixture
def template() -> MarkdownChangelogTemplate:
    return MarkdownChangelogTemplate("api", "api-v")


@pytest.fixture
def document(make_commit, make_parsed) -> ChangelogDocument:
    """Two releases with a merged PR, a breaking change and stray commits."""
    merge = make_parsed(
        "Merge pull request #12 from acme/login",
        "1a2b3c4" + "0" * 33,
        parents=("a" * 40, "b" * 40),
        subsumed=(
            make_commit("feat(auth): add login endpoint", "5d6e7f8" + "0" * 33),
            make_commit("fix(auth): typo in error", "9a8b7c6" + "0" * 33),
        ),
    )
    return ChangelogDocument(
        [
            ChangelogSection(
                "1.2.0",
                [
                    merge,
                    make_parsed("refactor(core)!: drop legacy config", "c0ffee0" + "0" * 33),
                    make_parsed("fix(api, web): handle empty payloads", "beef000" + "0" * 33),
                    make_parsed("Update README", "f00d000" + "0" * 33),
                ],
                date=date(2024, 5, 1),
            ),
            ChangelogSection(
                "1.1.0",
                [make_parsed("perf: faster startup", "abc0000" + "0" * 33)],
                date=date(2024, 4, 2),
            ),
            ChangelogSection("1.0.0", []),
        ]
    )


class TestGenerateContent:
    """Tests for MarkdownChangelogTemplate.generate_content()."""

    def test_header(self, template: MarkdownChangelogTemplate):
        """The document starts with a title naming the package."""
        content = template.generate_content(ChangelogDocument())

        assert content.startswith("# Changelog\n")
        assert "api" in content.splitlines()[2]

    def test_section_headings(
        self, template: MarkdownChangelogTemplate, document: ChangelogDocument
    ):
        """One heading per section, newest first, with dates."""
        content = template.generate_content(document)
        headings = [line for line in content.splitlines() if line.startswith("## ")]

        assert headings == ["## [1.2.0] - 2024-05-01", "## [1.1.0] - 2024-04-02", "## [1.0.0]"]

    def test_groups_in_order(
        self, template: MarkdownChangelogTemplate, document: ChangelogDocument
    ):
        """PR groups come first, then breaking changes, then types, then other."""
        content = template.generate_content(document)
        section = content.split("## [1.2.0]")[1].split("## [1.1.0]")[0]
        groups = [line for line in section.splitlines() if line.startswith("### ")]

        assert groups == [
            PR_CATEGORY_LABELS[PRCategory.FEATURES],
            BREAKING_LABEL,
            TYPE_LABELS["fix"],
            OTHER_LABEL,
        ]

    def test_entries(self, template: MarkdownChangelogTemplate, document: ChangelogDocument):
        """Entries carry the normalised subject and the short hash."""
        content = template.generate_content(document)

        assert "- Merge pull request #12 from acme/login (`1a2b3c4`)" in content
        assert "  - feat(auth): add login endpoint (`5d6e7f8`)" in content
        assert "- refactor(core)!: drop legacy config (`c0ffee0`)" in content
        assert "- fix(api,web): handle empty payloads (`beef000`)" in content
        assert "- Update README (`f00d000`)" in content

    def test_empty_section(self, template: MarkdownChangelogTemplate, document: ChangelogDocument):
        """Sections without commits say so."""
        content = template.generate_content(document)

        assert content.rstrip().endswith(f"## [1.0.0]\n\n{NO_CHANGES}")

    def test_unreleased_label(self, template: MarkdownChangelogTemplate):
        """The unreleased marker keeps its brackets."""
        doc = ChangelogDocument([ChangelogSection("[Unreleased]")])

        assert "## [Unreleased]\n" in template.generate_content(doc)

    def test_commit_links(self, make_parsed):
        """With a repository URL hashes become links."""
        template = MarkdownChangelogTemplate("api", repo_url="https://github.com/acme/widgets/")
        sha = "abcdef1" + "0" * 33
        doc = ChangelogDocument([ChangelogSection("1.0.0", [make_parsed("fix: x", sha)])])

        content = template.generate_content(doc)

        assert f"- fix: x ([`abcdef1`](https://github.com/acme/widgets/commit/{sha}))" in content


class TestParseVersions:
    """Tests for MarkdownChangelogTemplate.parse_versions()."""

    def test_round_trip(self, template: MarkdownChangelogTemplate, document: ChangelogDocument):
        """Rendering a parsed document reproduces the text."""
        content = template.generate_content(document)

        assert template.generate_content(template.parse_versions(content)) == content

    def test_round_trip_empty_subject(self, template: MarkdownChangelogTemplate, make_parsed):
        """A commit without a message keeps its hash across a round trip."""
        sha = "b" * 40
        doc = ChangelogDocument(
            [
                ChangelogSection("1.1.0", [make_parsed("", sha)], date=date(2024, 4, 2)),
                ChangelogSection("1.0.0", [make_parsed("fix: x", "c" * 40)]),
            ]
        )
        content = template.generate_content(doc)

        parsed = template.parse_versions(content)

        assert parsed["1.1.0"].commits[0].sha == "bbbbbbb"
        assert parsed["1.1.0"].commits[0].description == ""
        assert template.generate_content(parsed) == content

    def test_round_trip_with_links(self, make_parsed):
        """Linked hashes survive a round trip with their full sha."""
        template = MarkdownChangelogTemplate("api", repo_url="https://example.com/r")
        sha = "abcdef1" + "0" * 33
        doc = ChangelogDocument([ChangelogSection("1.0.0", [make_parsed("fix: x", sha)])])
        content = template.generate_content(doc)

        parsed = template.parse_versions(content)

        assert parsed["1.0.0"].commits[0].sha == sha
        assert template.generate_content(parsed) == content

    def test_parse_labels_and_dates(
        self, template: MarkdownChangelogTemplate, document: ChangelogDocument
    ):
        """Labels and dates are recovered."""
        parsed = template.parse_versions(template.generate_content(document))

        assert parsed.labels == ["1.2.0", "1.1.0", "1.0.0"]
        assert parsed["1.2.0"].date == date(2024, 5, 1)
        assert parsed["1.0.0"].date is None
        assert parsed["1.0.0"].commits == []

    def test_parse_commit_fields(
        self, template: MarkdownChangelogTemplate, document: ChangelogDocument
    ):
        """Commit records are rebuilt from the entries."""
        parsed = template.parse_versions(template.generate_content(document))
        merge, breaking, fix, other = parsed["1.2.0"].commits

        assert merge.is_merge
        assert merge.pr_category is PRCategory.FEATURES
        assert [c.short_sha for c in merge.pr_commits] == ["5d6e7f8", "9a8b7c6"]
        assert breaking.is_breaking
        assert breaking.commit_type == "refactor"
        assert fix.scopes == ("api", "web")
        assert not other.is_conventional

    def test_parse_unreleased(self, template: MarkdownChangelogTemplate):
        """The unreleased heading maps back to its label."""
        doc = template.parse_versions("# Changelog\n\n## [Unreleased]\n\n- fix: x (`abc1234`)\n")

        assert doc.labels == ["[Unreleased]"]

    def test_parse_ignores_preamble_and_noise(self, template: MarkdownChangelogTemplate):
        """Text outside sections and non-entry lines are skipped."""
        content = (
            "# Changelog\n\n- not an entry yet\n\n"
            "## [1.0.0] - 2024-01-01\n\nSome prose.\n\n### ✨ Features\n\n- feat: a (`abc1234`)\n"
        )

        doc = template.parse_versions(content)

        assert doc.labels == ["1.0.0"]
        assert [c.description for c in doc["1.0.0"].commits] == ["a"]

    def test_parse_empty(self, template: MarkdownChangelogTemplate):
        """An empty changelog has no sections."""
        assert len(template.parse_versions("")) == 0
