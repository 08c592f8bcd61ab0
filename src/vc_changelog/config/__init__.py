"""
Configuration loading for vc_changelog.

Provides a loader for the optional ``.changelog_config.json`` file and
its environment overrides. See :mod:`vc_changelog.config.loader` for
implementation details.
"""

from .loader import ConfigError, load_config  # noqa: F401
