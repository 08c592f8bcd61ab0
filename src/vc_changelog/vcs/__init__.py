"""
Version control system (VCS) integration.

Reads the commits between two release points from a local Git checkout.
"""

from .git_client import GitClient, GitError, commit_url_template_from_remote, parse_git_tag  # noqa: F401
