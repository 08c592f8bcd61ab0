"""
Markdown rendering of classified commits.

The changelog consists of ``##`` sections, each listing one entry per
commit:

1. ``Breaking Changes`` for every commit flagged as breaking,
2. one section per known Conventional Commit type, in the order of
   :data:`~vc_changelog.grouping.group_model.CONVENTIONAL_COMMIT_TYPES`,
3. ``Commits`` for commits whose type is not a known key.

Section membership is decided per section, so a breaking ``feat`` commit
is listed both under ``Breaking Changes`` and under ``Features``. Empty
sections are omitted.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Sequence, Tuple

from vc_changelog.grouping.group_model import (
    CONVENTIONAL_COMMIT_TYPES,
    ParsedCommit,
    conventional_commit_keys,
)


UNKNOWN_AUTHOR = "<unknown author>"
BREAKING_CHANGES_TITLE = "Breaking Changes"
OTHER_COMMITS_TITLE = "Commits"

Predicate = Callable[[ParsedCommit], bool]


def _format_pull_requests(commit: ParsedCommit) -> str:
    # e.g. "[#1](url1),[#2](url2)" or ""
    return ",".join(f"[#{pr.number}]({pr.url})" for pr in commit.extra.pull_requests)


def format_entry(commit: ParsedCommit) -> str:
    """Render a single commit as a Markdown list item.

    Parameters
    ----------
    commit : ParsedCommit
        The classified commit.

    Returns
    -------
    str
        ``- **scope**: subject [#1](url) ([author](commit-url))``. The scope
        prefix is omitted without a scope, the pull request fragment is
        omitted without pull requests, and the author falls back to
        ``<unknown author>``.
    """
    raw = commit.extra.commit
    author = raw.author.name if raw.author is not None and raw.author.name else UNKNOWN_AUTHOR
    pr_string = _format_pull_requests(commit)
    if pr_string:
        pr_string = " " + pr_string
    scope = f"**{commit.scope}**: " if commit.scope else ""
    return f"- {scope}{commit.subject or ''}{pr_string} ([{author}]({raw.url}))"


def _render_section(title: str, commits: Iterable[ParsedCommit]) -> str:
    body = "\n".join(format_entry(commit) for commit in commits).strip()
    if not body:
        return ""
    return f"## {title}\n{body}"


def _type_predicate(key: str) -> Predicate:
    return lambda commit: commit.type == key


def _sections() -> List[Tuple[str, Predicate]]:
    """Return ``(title, predicate)`` pairs in document order."""
    known = set(conventional_commit_keys())
    sections: List[Tuple[str, Predicate]] = [
        (BREAKING_CHANGES_TITLE, lambda c: c.extra.breaking_change),
    ]
    for key, title in CONVENTIONAL_COMMIT_TYPES:
        sections.append((title, _type_predicate(key)))
    sections.append((OTHER_COMMITS_TITLE, lambda c: c.type not in known))
    return sections


def generate_changelog(commits: Sequence[ParsedCommit]) -> str:
    """Render the changelog for ``commits``.

    Commits keep their input order inside each section. An empty list,
    or one that produces no sections, yields an empty string.
    """
    rendered = []
    for title, predicate in _sections():
        section = _render_section(title, [c for c in commits if predicate(c)])
        if section:
            rendered.append(section)
    return "\n\n".join(rendered).strip()
