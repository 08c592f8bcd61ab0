"""Tests for changelog rendering."""

import unittest
from typing import Optional, Sequence

from vc_changelog.changelog.renderer import format_entry, generate_changelog
from vc_changelog.grouping.group_model import (
    CommitAuthor,
    ParsedCommit,
    ParsedCommitExtra,
    PullRequestRef,
    RawCommit,
)


def make_commit(
    type_: Optional[str],
    subject: str,
    scope: Optional[str] = None,
    author: Optional[str] = "Jane",
    url: str = "https://x/commit/abc",
    pull_requests: Sequence[PullRequestRef] = (),
    breaking: bool = False,
) -> ParsedCommit:
    raw = RawCommit(
        sha="abc",
        message=f"{type_}: {subject}",
        author=CommitAuthor(name=author) if author is not None else None,
        url=url,
    )
    return ParsedCommit(
        type=type_,
        scope=scope,
        subject=subject,
        extra=ParsedCommitExtra(commit=raw, pull_requests=tuple(pull_requests), breaking_change=breaking),
    )


class TestFormatEntry(unittest.TestCase):
    def test_scope_without_pull_requests(self) -> None:
        commit = make_commit("feat", "add endpoint", scope="api")
        self.assertEqual(format_entry(commit), "- **api**: add endpoint ([Jane](https://x/commit/abc))")

    def test_two_pull_requests(self) -> None:
        commit = make_commit(
            "feat",
            "add endpoint",
            scope="api",
            pull_requests=[PullRequestRef(1, "url1"), PullRequestRef(2, "url2")],
        )
        self.assertEqual(
            format_entry(commit),
            "- **api**: add endpoint [#1](url1),[#2](url2) ([Jane](https://x/commit/abc))",
        )

    def test_without_scope(self) -> None:
        commit = make_commit("fix", "handle nulls", pull_requests=[PullRequestRef(9, "u9")])
        self.assertEqual(format_entry(commit), "- handle nulls [#9](u9) ([Jane](https://x/commit/abc))")

    def test_unknown_author(self) -> None:
        for author in [None, ""]:
            with self.subTest(author=author):
                commit = make_commit("fix", "x", author=author)
                self.assertEqual(format_entry(commit), "- x ([<unknown author>](https://x/commit/abc))")

    def test_missing_subject(self) -> None:
        raw = RawCommit(sha="abc", message="wip", author=CommitAuthor(name="Jane"), url="u")
        commit = ParsedCommit(type=None, header="wip", extra=ParsedCommitExtra(commit=raw))
        self.assertEqual(format_entry(commit), "-  ([Jane](u))")


class TestGenerateChangelog(unittest.TestCase):
    def test_empty_input(self) -> None:
        self.assertEqual(generate_changelog([]), "")

    def test_single_feature(self) -> None:
        commit = make_commit("feat", "add endpoint", scope="api")
        self.assertEqual(
            generate_changelog([commit]),
            "## Features\n- **api**: add endpoint ([Jane](https://x/commit/abc))",
        )

    def test_breaking_change_listed_twice(self) -> None:
        commit = make_commit("feat", "drop v1", breaking=True)
        line = format_entry(commit)
        self.assertEqual(
            generate_changelog([commit]),
            f"## Breaking Changes\n{line}\n\n## Features\n{line}",
        )

    def test_section_order_and_input_order(self) -> None:
        commits = [
            make_commit("chore", "bump deps"),
            make_commit("wip", "half done"),
            make_commit("fix", "first fix"),
            make_commit(None, "no header"),
            make_commit("feat", "feature one"),
            make_commit("fix", "second fix", breaking=True),
            make_commit("revert", "undo"),
            make_commit("docs", "guide"),
        ]
        changelog = generate_changelog(commits)
        headers = [line for line in changelog.splitlines() if line.startswith("## ")]
        self.assertEqual(
            headers,
            [
                "## Breaking Changes",
                "## Features",
                "## Bug Fixes",
                "## Documentation",
                "## Chores",
                "## Reverts",
                "## Commits",
            ],
        )
        fixes = changelog.split("## Bug Fixes\n")[1].split("\n\n")[0]
        self.assertEqual(
            fixes.splitlines(),
            [
                "- first fix ([Jane](https://x/commit/abc))",
                "- second fix ([Jane](https://x/commit/abc))",
            ],
        )
        others = changelog.split("## Commits\n")[1]
        self.assertEqual(
            others.splitlines(),
            [
                "- half done ([Jane](https://x/commit/abc))",
                "- no header ([Jane](https://x/commit/abc))",
            ],
        )

    def test_all_type_sections_in_order(self) -> None:
        types = ["ci", "revert", "style", "wip", "build", "perf", "chore", "test", "refactor", "docs", "fix", "feat"]
        commits = [make_commit(t, f"{t} change") for t in types]
        commits.append(make_commit("feat", "breaking", breaking=True))
        headers = [line for line in generate_changelog(commits).splitlines() if line.startswith("## ")]
        self.assertEqual(
            headers,
            [
                "## Breaking Changes",
                "## Features",
                "## Bug Fixes",
                "## Documentation",
                "## Styles",
                "## Code Refactoring",
                "## Performance Improvements",
                "## Tests",
                "## Builds",
                "## Continuous Integration",
                "## Chores",
                "## Reverts",
                "## Commits",
            ],
        )

    def test_every_commit_is_rendered(self) -> None:
        commits = [make_commit(t, f"subject {i}") for i, t in enumerate(["feat", "x", "ci", "perf", "style"])]
        entries = [line for line in generate_changelog(commits).splitlines() if line.startswith("- ")]
        self.assertEqual(len(entries), len(commits))

    def test_sections_separated_by_single_blank_line(self) -> None:
        changelog = generate_changelog([make_commit("feat", "a"), make_commit("fix", "b")])
        self.assertEqual(
            changelog,
            "## Features\n- a ([Jane](https://x/commit/abc))\n\n## Bug Fixes\n- b ([Jane](https://x/commit/abc))",
        )
        self.assertFalse(changelog.startswith("\n"))
        self.assertFalse(changelog.endswith("\n"))


if __name__ == "__main__":
    unittest.main()
