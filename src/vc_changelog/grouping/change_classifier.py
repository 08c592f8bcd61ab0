"""
Classification of commits for the changelog.

Combines the tokenizer output for a commit message with the metadata
reported by the hosting service into a :class:`ParsedCommit`. The only
decision made here is whether a commit is a breaking change; the commit
type is taken verbatim from the header.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence, Tuple

from vc_changelog.grouping.group_model import (
    CommitMessage,
    ParsedCommit,
    ParsedCommitExtra,
    PullRequestRef,
    RawCommit,
)
from vc_changelog.parsing.commit_parser import CommitMessageParser
from vc_changelog.parsing.options import BREAKING_CHANGE_KEYWORD


SHORT_SHA_LENGTH = 7

_BREAKING_CHANGE_PATTERN = re.compile(r"^BREAKING\s+CHANGES?:\s+")


def get_short_sha(sha: str) -> str:
    """Return the abbreviated (7 character) form of a commit hash.

    Shorter input is returned unchanged.
    """
    return sha[:SHORT_SHA_LENGTH]


def is_breaking_change(body: Optional[str], footer: Optional[str]) -> bool:
    """Return True if the body or the footer announces a breaking change.

    Parameters
    ----------
    body : Optional[str]
        Commit body. ``None`` is treated as an empty string.
    footer : Optional[str]
        Commit footer. ``None`` is treated as an empty string.

    Returns
    -------
    bool
        True when either text starts with ``BREAKING CHANGE:`` or
        ``BREAKING CHANGES:`` followed by whitespace.
    """
    return bool(
        _BREAKING_CHANGE_PATTERN.match(body or "")
        or _BREAKING_CHANGE_PATTERN.match(footer or "")
    )


def has_breaking_note(message: CommitMessage, keywords: Sequence[str] = (BREAKING_CHANGE_KEYWORD,)) -> bool:
    """Return True if the tokenizer extracted a breaking-change note."""
    return any(note.title in keywords for note in message.notes)


def classify_commit(
    message: CommitMessage,
    commit: RawCommit,
    pull_requests: Iterable[PullRequestRef] = (),
) -> ParsedCommit:
    """Build the :class:`ParsedCommit` for a single commit.

    Parameters
    ----------
    message : CommitMessage
        Tokenizer output for ``commit.message``.
    commit : RawCommit
        The commit as reported by the host.
    pull_requests : Iterable[PullRequestRef]
        Pull requests associated with the commit, in display order.

    Returns
    -------
    ParsedCommit
        The classified commit. ``extra.breaking_change`` is set when the
        body/footer starts with a breaking-change marker or when a
        breaking-change note was extracted from the footer.
    """
    breaking = is_breaking_change(message.body, message.footer) or has_breaking_note(message)
    return ParsedCommit(
        type=message.type,
        scope=message.scope,
        subject=message.subject,
        merge=message.merge,
        header=message.header,
        body=message.body,
        footer=message.footer,
        notes=tuple(message.notes),
        references=tuple(message.references),
        mentions=tuple(message.mentions),
        revert=message.revert,
        extra=ParsedCommitExtra(
            commit=commit,
            pull_requests=tuple(pull_requests),
            breaking_change=breaking,
        ),
    )


def classify_commits(
    entries: Iterable[Tuple[RawCommit, Sequence[PullRequestRef]]],
    parser: Optional[CommitMessageParser] = None,
) -> List[ParsedCommit]:
    """Tokenize and classify commits, preserving their order."""
    parser = parser or CommitMessageParser()
    return [
        classify_commit(parser.parse(commit.message), commit, pull_requests)
        for commit, pull_requests in entries
    ]
