"""
Commit classification.

This package holds the data model for classified commits
(:mod:`vc_changelog.grouping.group_model`) and the logic that decides
whether a commit is a breaking change
(:mod:`vc_changelog.grouping.change_classifier`). Only the model is
re-exported here because the tokenizer in :mod:`vc_changelog.parsing`
depends on it.
"""

from .group_model import CONVENTIONAL_COMMIT_TYPES, ParsedCommit  # noqa: F401
