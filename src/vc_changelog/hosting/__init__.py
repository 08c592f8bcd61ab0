"""
Source-control hosting integration.

Contains the :class:`GitHubClient` used to fetch commits and their
associated pull requests from the GitHub REST API.
"""

from .github_client import GitHubClient, HostError  # noqa: F401
