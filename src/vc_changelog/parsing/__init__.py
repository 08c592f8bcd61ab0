"""
Commit message tokenization.

:mod:`vc_changelog.parsing.options` holds the static pattern
configuration and :mod:`vc_changelog.parsing.commit_parser` applies it
to raw commit messages.
"""

from .commit_parser import CommitMessageParser, parse_commit_message  # noqa: F401
from .options import CommitParserOptions, get_changelog_options  # noqa: F401
