"""
Command line interface for the vc_changelog tool.

This module defines the ``main`` function which is used as the entry
point when executing the ``vc-changelog`` command. It orchestrates
repository detection, configuration loading, commit retrieval (from a
local Git checkout or from GitHub), classification and rendering.
Progress is reported on stderr so that stdout carries only the
changelog.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import click

from vc_changelog import __version__
from vc_changelog.changelog.renderer import generate_changelog
from vc_changelog.config.loader import ConfigError, load_config
from vc_changelog.grouping.change_classifier import classify_commits, get_short_sha
from vc_changelog.grouping.group_model import PullRequestRef, RawCommit
from vc_changelog.hosting.github_client import GitHubClient, HostError
from vc_changelog.vcs.git_client import GitClient, GitError, parse_git_tag

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_NO_REPO = 3
EXIT_NO_COMMITS = 4
EXIT_CONFIG_ERROR = 5
EXIT_SOURCE_FAILURE = 6

SOURCE_GIT = "git"
SOURCE_GITHUB = "github"

CommitEntry = Tuple[RawCommit, List[PullRequestRef]]


# ---------------------------------------------------------------------------
# Progress and status display utilities
# ---------------------------------------------------------------------------

class ProgressIndicator:
    """Report the start and duration of a step on stderr."""

    def __init__(self, message: str):
        self.message = message
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        click.echo(f"→ {self.message}...", err=True)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            elapsed = time.time() - self.start_time
            click.echo(f"  ✓ Done ({elapsed:.1f}s)", err=True)
        return False


def print_step(step_num: int, total_steps: int, message: str):
    """Print a step indicator."""
    click.echo(f"\n{'='*60}", err=True)
    click.echo(f"Step {step_num}/{total_steps}: {message}", err=True)
    click.echo(f"{'='*60}", err=True)


def print_info(message: str, indent: int = 0):
    prefix = "  " * indent
    click.echo(f"{prefix}ℹ {message}", err=True)


def print_success(message: str, indent: int = 0):
    prefix = "  " * indent
    click.echo(f"{prefix}✓ {message}", err=True)


def print_warning(message: str, indent: int = 0):
    prefix = "  " * indent
    click.echo(f"{prefix}⚠ {message}", err=True)


def print_error(message: str, indent: int = 0):
    prefix = "  " * indent
    click.echo(f"{prefix}✗ {message}", err=True)


# ---------------------------------------------------------------------------
# Core functionality
# ---------------------------------------------------------------------------

def detect_repository(start_dir: Path) -> Path:
    """Return the root of the Git repository containing ``start_dir``.

    Raises
    ------
    SystemExit
        With code EXIT_NO_REPO if no repository is found.
    """
    repo_root = GitClient.find_repo_root(start_dir)
    if repo_root is None:
        print_error("No Git repository found in current directory or parent directories.")
        raise SystemExit(EXIT_NO_REPO)
    print_success(f"Found Git repository at: {repo_root}")
    return repo_root


def fetch_commits(
    source: str,
    config: Dict[str, Any],
    repo_root: Path,
    base: str,
    head: str,
) -> List[CommitEntry]:
    """Fetch the commits between ``base`` and ``head`` with their pull requests.

    Parameters
    ----------
    source : str
        ``"git"`` to read the local checkout, ``"github"`` to query the
        GitHub REST API.
    config : Dict[str, Any]
        Configuration as returned by :func:`load_config`.
    repo_root : Path
        Root of the local checkout (used by the ``git`` source).
    base, head : str
        Previous and current release points.

    Returns
    -------
    List[CommitEntry]
        ``(commit, pull_requests)`` pairs, oldest commit first. Commits
        read from a local checkout have no pull requests.

    Raises
    ------
    ConfigError
        If the ``github`` source is used without a repository setting.
    GitError, HostError
        If the commits cannot be retrieved.
    """
    if source == SOURCE_GIT:
        client = GitClient(repo_root, commit_url_template=config.get("commit_url_template"))
        return [(commit, []) for commit in client.get_commits(base, head)]

    if not config.get("repository"):
        raise ConfigError("'repository' is required for the github source (or set GITHUB_REPOSITORY)")
    github = GitHubClient(
        api_url=config["api_url"],
        repository=config["repository"],
        token=config.get("token"),
        request_timeout=float(config["request_timeout"]),
    )
    entries: List[CommitEntry] = []
    for commit in github.compare_commits(base, head):
        pull_requests = github.list_pull_requests(commit.sha)
        logger.debug(
            "Commit %s has %d associated pull request(s)", get_short_sha(commit.sha), len(pull_requests)
        )
        entries.append((commit, pull_requests))
    return entries


def configure_logging(verbose: bool) -> None:
    """Configure the root logger and attach the package loggers to it."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )
    # Module loggers start detached from the root logger.
    for name, item in logging.root.manager.loggerDict.items():
        if name.startswith("vc_changelog") and isinstance(item, logging.Logger):
            item.propagate = True


def render_changelog(entries: Sequence[CommitEntry]) -> str:
    """Classify ``entries`` and render them as Markdown."""
    return generate_changelog(classify_commits(entries))


@click.command()
@click.argument("base")
@click.argument("head", required=False, default="HEAD")
@click.option(
    "--source",
    type=click.Choice([SOURCE_GIT, SOURCE_GITHUB]),
    default=SOURCE_GIT,
    show_default=True,
    help="Where to read the commits from.",
)
@click.option("--tag-ref", help="Ref of the release being prepared, e.g. refs/tags/v1.2.0.")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Write the changelog to this file instead of stdout.",
)
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.version_option(version=__version__, prog_name="vc-changelog")
def main(
    base: str,
    head: str,
    source: str,
    tag_ref: Optional[str],
    output: Optional[Path],
    verbose: bool,
) -> None:
    """Generate a Markdown changelog for the commits between BASE and HEAD.

    Commits are grouped by their Conventional Commit type, with breaking
    changes listed first. With the git source, commit links use
    commit_url_template from the config file or are derived from the
    origin remote; without either they are left empty.
    """
    configure_logging(verbose)

    total_steps = 4
    try:
        cwd = Path.cwd()

        # Step 1: Detect repository
        print_step(1, total_steps, "Detecting Repository")
        if source == SOURCE_GIT:
            try:
                repo_root = detect_repository(cwd)
            except SystemExit:
                raise click.exceptions.Exit(EXIT_NO_REPO)
        else:
            repo_root = GitClient.find_repo_root(cwd) or cwd
            print_info(f"Using configuration from: {repo_root}")

        if tag_ref:
            tag = parse_git_tag(tag_ref)
            if tag:
                print_info(f"Release tag: {tag}")
            else:
                print_warning(f"'{tag_ref}' does not name a tag")

        # Step 2: Load configuration
        print_step(2, total_steps, "Loading Configuration")
        try:
            config = load_config(repo_root)
        except ConfigError as exc:
            print_error(f"Configuration error: {exc}")
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)
        print_success("Configuration loaded successfully")

        # Step 3: Fetch commits
        print_step(3, total_steps, "Fetching Commits")
        try:
            with ProgressIndicator(f"Reading commits {base}..{head} from {source}"):
                entries = fetch_commits(source, config, repo_root, base, head)
        except ConfigError as exc:
            print_error(f"Configuration error: {exc}")
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)
        except (GitError, HostError) as exc:
            print_error(f"Failed to fetch commits: {exc}")
            raise click.exceptions.Exit(EXIT_SOURCE_FAILURE)

        if not entries:
            print_warning(f"No commits found between {base} and {head}.")
            raise click.exceptions.Exit(EXIT_NO_COMMITS)
        print_success(f"Found {len(entries)} commit{'s' if len(entries) != 1 else ''}")

        # Step 4: Render
        print_step(4, total_steps, "Generating Changelog")
        changelog = render_changelog(entries)
        if output is not None:
            output.write_text(changelog + "\n", encoding="utf-8")
            print_success(f"Changelog written to: {output}")
        else:
            click.echo(changelog)

        raise click.exceptions.Exit(EXIT_SUCCESS)

    except click.exceptions.Exit:
        raise
    except Exception as exc:
        logging.exception("Unhandled error: %s", exc)
        print_error(f"Unexpected error: {exc}")
        raise click.exceptions.Exit(EXIT_GENERIC_ERROR)
