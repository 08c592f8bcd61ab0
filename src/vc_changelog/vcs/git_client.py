"""
Git client implementation for vc_changelog.

This module reads the commits between two refs of a local Git checkout.
It is intentionally minimal: one ``git log`` call per changelog. All
subprocess calls go through :meth:`GitClient._run` so that unit tests can
mock them easily.
"""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path
from typing import List, Optional

from vc_changelog.grouping.group_model import CommitAuthor, RawCommit


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured. Logs will propagate to the root when configured by the CLI.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# Unit and record separators keep multi-line messages intact.
FIELD_SEP = "\x1f"
RECORD_SEP = "\x1e"
LOG_FORMAT = FIELD_SEP.join(["%H", "%an", "%ae", "%cn", "%ce", "%cI", "%B"]) + RECORD_SEP

_TAG_REF_PATTERN = re.compile(r"^(refs/)?tags/(.*)$")
# Remote URLs in web or ssh form, with an optional ".git" suffix.
_REMOTE_URL_PATTERN = re.compile(
    r"^(?:https?://(?:[^@/]+@)?|ssh://(?:[^@/]+@)?|[^@/]+@)([^/:]+)[:/](.+?)(?:\.git)?/?$"
)


class GitError(Exception):
    """Raised when a Git command fails."""

    pass


def parse_git_tag(ref: str) -> str:
    """Extract the tag name from a ref such as ``refs/tags/v1.2.0``.

    Returns an empty string when ``ref`` does not name a tag.
    """
    match = _TAG_REF_PATTERN.match(ref)
    if not match or not match.group(2):
        logger.debug('Input "%s" does not appear to be a tag', ref)
        return ""
    return match.group(2)


def commit_url_template_from_remote(remote_url: str) -> Optional[str]:
    """Derive a commit URL template from a remote URL.

    ``git@github.com:owner/repo.git`` and
    ``https://github.com/owner/repo.git`` both give
    ``https://github.com/owner/repo/commit/{sha}``. Returns ``None`` for
    remotes that do not point at a web host (e.g. local paths).
    """
    match = _REMOTE_URL_PATTERN.match(remote_url.strip())
    if not match:
        return None
    host, path = match.groups()
    return f"https://{host}/{path}/commit/{{sha}}"


class GitClient:
    """Client for reading commit history from a Git repository.

    Parameters
    ----------
    repo_root : Path
        Root of the working copy.
    commit_url_template : Optional[str]
        ``str.format`` template with a ``{sha}`` field, e.g.
        ``"https://github.com/owner/repo/commit/{sha}"``. Without it the
        template is derived from the ``origin`` remote; if that fails too
        the commit URL is left empty.
    """

    def __init__(self, repo_root: Path, commit_url_template: Optional[str] = None) -> None:
        self.repo_root = repo_root
        self.commit_url_template = commit_url_template

    # ------------------------------------------------------------------
    # Static helpers
    # ------------------------------------------------------------------
    @staticmethod
    def find_repo_root(start: Path) -> Optional[Path]:
        """Find the root of the Git repository starting from ``start``.

        Walk upwards until a ``.git`` entry is found or the filesystem
        root is reached.
        """
        current = start.resolve()
        while True:
            if (current / ".git").exists():
                return current
            if current.parent == current:
                return None
            current = current.parent

    # ------------------------------------------------------------------
    # Basic Git commands
    # ------------------------------------------------------------------
    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run a Git command in the repository root.

        Raises
        ------
        GitError
            If the command exits with a non-zero status when ``check`` is True.
        """
        full_cmd = ["git"] + args
        logger.debug("Executing Git command: %s", " ".join(full_cmd))
        try:
            result = subprocess.run(
                full_cmd,
                cwd=self.repo_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as exc:
            logger.error("Git executable not found: %s", exc)
            raise GitError("git executable not found") from exc

        if check and result.returncode != 0:
            logger.error(
                "Git command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                " ".join(full_cmd),
                result.stdout,
                result.stderr,
            )
            raise GitError(result.stderr.strip() or result.stdout.strip())
        return result

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------
    def _commit_url(self, sha: str) -> str:
        if not self.commit_url_template:
            return ""
        return self.commit_url_template.format(sha=sha)

    def _origin_url_template(self) -> Optional[str]:
        """Return a commit URL template for the ``origin`` remote, if any."""
        result = self._run(["remote", "get-url", "origin"], check=False)
        if result.returncode != 0:
            logger.warning("No 'origin' remote; commit links will be empty (set commit_url_template)")
            return None
        template = commit_url_template_from_remote(result.stdout)
        if template is None:
            logger.warning(
                "Cannot derive commit links from remote %r; set commit_url_template", result.stdout.strip()
            )
        else:
            logger.debug("Using commit URL template %s", template)
        return template

    def _parse_record(self, record: str) -> Optional[RawCommit]:
        # The message is the last field and may itself contain FIELD_SEP.
        fields = record.strip("\n").split(FIELD_SEP, 6)
        if len(fields) != 7:
            logger.warning("Skipping malformed git log record: %r", record)
            return None
        sha, author_name, author_email, committer_name, committer_email, timestamp, message = fields
        author = CommitAuthor(name=author_name, email=author_email) if author_name else None
        committer = CommitAuthor(name=committer_name, email=committer_email) if committer_name else None
        return RawCommit(
            sha=sha,
            message=message.strip("\n"),
            author=author,
            committer=committer,
            timestamp=timestamp,
            url=self._commit_url(sha),
        )

    def get_commits(self, base: str, head: str = "HEAD") -> List[RawCommit]:
        """Return the commits reachable from ``head`` but not from ``base``.

        Parameters
        ----------
        base : str
            The previous release point (tag, branch or SHA).
        head : str, optional
            The current release point. Defaults to ``HEAD``.

        Returns
        -------
        List[RawCommit]
            Commits in chronological order (oldest first).

        Raises
        ------
        GitError
            If either ref is unknown or ``git log`` fails.
        """
        result = self._run(
            ["log", "--reverse", f"--format={LOG_FORMAT}", f"{base}..{head}"],
            check=True,
        )
        records = [record for record in result.stdout.split(RECORD_SEP) if record.strip()]
        if records and not self.commit_url_template:
            self.commit_url_template = self._origin_url_template()
        commits = []
        for record in records:
            commit = self._parse_record(record)
            if commit is not None:
                commits.append(commit)
        logger.debug("Read %d commit(s) between %s and %s", len(commits), base, head)
        return commits
