"""
Data models for commit classification.

A :class:`ParsedCommit` is the unit the changelog renderer works on. It
combines the fields extracted from a commit message by the tokenizer
(:class:`CommitMessage`) with metadata supplied by the hosting service:
the raw commit itself, its associated pull requests and the derived
``breaking_change`` flag.

:data:`CONVENTIONAL_COMMIT_TYPES` lists the known Conventional Commit
types as ordered ``(key, title)`` pairs. The order is the section order
of the rendered changelog.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


CONVENTIONAL_COMMIT_TYPES: List[Tuple[str, str]] = [
    ("feat", "Features"),
    ("fix", "Bug Fixes"),
    ("docs", "Documentation"),
    ("style", "Styles"),
    ("refactor", "Code Refactoring"),
    ("perf", "Performance Improvements"),
    ("test", "Tests"),
    ("build", "Builds"),
    ("ci", "Continuous Integration"),
    ("chore", "Chores"),
    ("revert", "Reverts"),
]


def conventional_commit_keys() -> List[str]:
    """Return the known commit type keys in section order."""
    return [key for key, _ in CONVENTIONAL_COMMIT_TYPES]


@dataclass(frozen=True)
class CommitAuthor:
    """Identity attached to a commit (author or committer)."""

    name: str
    email: str = ""
    username: Optional[str] = None


@dataclass(frozen=True)
class RawCommit:
    """A commit as reported by the source-control host.

    Attributes
    ----------
    sha : str
        Full commit hash.
    message : str
        Complete commit message (header, body and footer).
    author : Optional[CommitAuthor]
        Commit author. ``None`` if the host did not report one.
    committer : Optional[CommitAuthor]
        Committer identity, if known.
    timestamp : str
        ISO 8601 commit timestamp.
    url : str
        Web URL of the commit.
    """

    sha: str
    message: str
    author: Optional[CommitAuthor] = None
    committer: Optional[CommitAuthor] = None
    timestamp: str = ""
    url: str = ""


@dataclass(frozen=True)
class PullRequestRef:
    """A pull request associated with a commit."""

    number: int
    url: str


@dataclass(frozen=True)
class CommitNote:
    """A footer note such as ``BREAKING CHANGE: <text>``."""

    title: str
    text: str


@dataclass(frozen=True)
class CommitReference:
    """An issue reference found in a commit message (e.g. ``Closes #12``)."""

    issue: str
    raw: str
    prefix: str = "#"
    action: Optional[str] = None
    owner: Optional[str] = None
    repository: Optional[str] = None


@dataclass(frozen=True)
class RevertMeta:
    """Header and hash of the commit reverted by a revert commit."""

    header: Optional[str] = None
    hash: Optional[str] = None


@dataclass(frozen=True)
class ParsedCommitHeader:
    """The ``type(scope): subject`` decomposition of a header line."""

    type: Optional[str] = None
    scope: Optional[str] = None
    subject: Optional[str] = None


@dataclass
class CommitMessage:
    """Tokenizer output for a single commit message."""

    type: Optional[str] = None
    scope: Optional[str] = None
    subject: Optional[str] = None
    merge: Optional[str] = None
    header: Optional[str] = None
    body: Optional[str] = None
    footer: Optional[str] = None
    notes: List[CommitNote] = field(default_factory=list)
    references: List[CommitReference] = field(default_factory=list)
    mentions: List[str] = field(default_factory=list)
    revert: Optional[RevertMeta] = None


@dataclass(frozen=True)
class ParsedCommitExtra:
    """Host metadata attached to a parsed commit."""

    commit: RawCommit
    pull_requests: Tuple[PullRequestRef, ...] = ()
    breaking_change: bool = False


@dataclass(frozen=True)
class ParsedCommit:
    """A classified commit, ready to be rendered.

    ``type`` is one of the keys of :data:`CONVENTIONAL_COMMIT_TYPES` or an
    arbitrary string when the header did not use a known type (``None``
    when the header did not match the header pattern at all). Records
    are frozen: classification happens once and the renderer only reads
    them.
    """

    type: Optional[str]
    extra: ParsedCommitExtra
    scope: Optional[str] = None
    subject: Optional[str] = None
    merge: Optional[str] = None
    header: Optional[str] = None
    body: Optional[str] = None
    footer: Optional[str] = None
    notes: Tuple[CommitNote, ...] = ()
    references: Tuple[CommitReference, ...] = ()
    mentions: Tuple[str, ...] = ()
    revert: Optional[RevertMeta] = None
