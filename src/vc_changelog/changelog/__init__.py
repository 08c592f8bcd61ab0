"""
Changelog rendering.

See :mod:`vc_changelog.changelog.renderer` for the section layout.
"""

from .renderer import format_entry, generate_changelog  # noqa: F401
