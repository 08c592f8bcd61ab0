"""
Client for the GitHub REST API.

Fetches the commits between two refs (``GET /repos/{repo}/compare``) and
the pull requests associated with a commit
(``GET /repos/{repo}/commits/{sha}/pulls``). On error conditions (HTTP
errors, timeouts, unparsable bodies) a :class:`HostError` is raised.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from vc_changelog.grouping.group_model import CommitAuthor, PullRequestRef, RawCommit


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


API_VERSION = "2022-11-28"
PAGE_SIZE = 100
REDACTED = "== raw file buffer info removed =="


class HostError(Exception):
    """Raised when communication with the hosting service fails."""

    pass


def format_log_args(*args: Any) -> str:
    """Join request/response details into a single log line.

    ``None`` arguments are dropped, strings are kept as they are and
    mappings are serialised to JSON with any ``file`` or ``data`` buffer
    replaced by a placeholder.

    >>> format_log_args("GET", None, {"data": b"...", "page": 1})
    'GET {"data": "== raw file buffer info removed ==", "page": 1}'
    """
    parts = []
    for arg in args:
        if arg is None:
            continue
        if isinstance(arg, str):
            parts.append(arg)
            continue
        arg_copy = dict(arg)
        for key in ("file", "data"):
            if arg_copy.get(key):
                arg_copy[key] = REDACTED
        parts.append(json.dumps(arg_copy, default=str))
    return " ".join(parts)


def _author_from_payload(git_identity: Optional[Dict[str, Any]], account: Optional[Dict[str, Any]]) -> Optional[CommitAuthor]:
    if not git_identity:
        return None
    return CommitAuthor(
        name=git_identity.get("name") or "",
        email=git_identity.get("email") or "",
        username=(account or {}).get("login"),
    )


def commit_from_payload(item: Dict[str, Any]) -> RawCommit:
    """Convert one entry of the compare API's ``commits`` list."""
    details = item.get("commit") or {}
    author = details.get("author")
    return RawCommit(
        sha=item["sha"],
        message=details.get("message") or "",
        author=_author_from_payload(author, item.get("author")),
        committer=_author_from_payload(details.get("committer"), item.get("committer")),
        timestamp=(author or {}).get("date") or "",
        url=item.get("html_url") or "",
    )


@dataclass
class GitHubClient:
    """Client for reading commits and pull requests from GitHub.

    Parameters
    ----------
    api_url : str
        Base URL of the REST API, e.g. ``"https://api.github.com"``.
    repository : str
        Repository in ``owner/name`` form.
    token : str, optional
        API token sent as a bearer token.
    request_timeout : float, optional
        Timeout in seconds for HTTP requests. Defaults to 30 seconds.
    """

    api_url: str
    repository: str
    token: Optional[str] = None
    request_timeout: float = 30.0

    def _endpoint(self, path: str) -> str:
        return f"{self.api_url.rstrip('/')}/repos/{self.repository}/{path.lstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Issue a GET request and return the decoded JSON body.

        Raises
        ------
        HostError
            If the request fails, returns a non-200 status or the body is
            not valid JSON.
        """
        url = self._endpoint(path)
        logger.debug("Request: %s", format_log_args("GET", url, params))
        try:
            response = requests.get(
                url,
                headers=self._headers(),
                params=params,
                timeout=self.request_timeout,
            )
        except requests.RequestException as exc:
            logger.error("Failed to connect to GitHub: %s", exc)
            raise HostError(str(exc)) from exc
        if response.status_code != 200:
            logger.error(
                "GitHub returned non-200 status %s: %s", response.status_code, response.text
            )
            raise HostError(f"GitHub returned status {response.status_code}: {response.text}")
        try:
            return response.json()
        except ValueError as exc:
            logger.error("Failed to parse GitHub response: %s", exc)
            raise HostError("Failed to parse GitHub response") from exc

    def compare_commits(self, base: str, head: str) -> List[RawCommit]:
        """Return the commits between ``base`` and ``head``, oldest first.

        Raises
        ------
        HostError
            If any page cannot be fetched.
        """
        commits: List[RawCommit] = []
        page = 1
        while True:
            data = self._get(
                f"compare/{base}...{head}", params={"per_page": PAGE_SIZE, "page": page}
            )
            if not isinstance(data, dict):
                raise HostError("Unexpected response structure from GitHub")
            items = data.get("commits") or []
            try:
                commits.extend(commit_from_payload(item) for item in items)
            except (KeyError, TypeError, AttributeError) as exc:
                logger.error("Unexpected commit payload from GitHub: %s", exc)
                raise HostError("Unexpected response structure from GitHub") from exc
            if len(items) < PAGE_SIZE:
                break
            page += 1
        logger.debug("Fetched %d commit(s) between %s and %s", len(commits), base, head)
        return commits

    def list_pull_requests(self, sha: str) -> List[PullRequestRef]:
        """Return the pull requests associated with commit ``sha``."""
        data = self._get(f"commits/{sha}/pulls")
        if not isinstance(data, list):
            raise HostError("Unexpected response structure from GitHub")
        try:
            return [PullRequestRef(number=int(pr["number"]), url=pr["html_url"]) for pr in data]
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("Unexpected pull request payload from GitHub: %s", exc)
            raise HostError("Unexpected response structure from GitHub") from exc
