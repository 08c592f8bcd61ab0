"""
Top-level package for vc_changelog.

Generates grouped Markdown changelogs from Conventional Commit
messages. The command line entry point lives in
:mod:`vc_changelog.cli`; the rendering core in
:mod:`vc_changelog.changelog.renderer`.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
