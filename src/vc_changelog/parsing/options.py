"""
Static configuration of the commit message tokenizer.

Every commit is tokenized with the same :class:`CommitParserOptions`
instance. The options describe how to split the header line into its
``type``, ``scope`` and ``subject`` parts, how to recognise merge and
revert commits, and which footer keywords open a note.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Pattern, Tuple


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


HEADER_PATTERN = re.compile(r"^(\w*)(?:\((.*)\))?: (.*)$")
MERGE_PATTERN = re.compile(r"^Merge pull request #(.*) from (.*)$")
REVERT_PATTERN = re.compile(
    r'^(?:Revert|revert:)\s"?([\s\S]+?)"?\s*This reverts commit (\w{7,40})\b',
    re.IGNORECASE,
)
BREAKING_CHANGE_KEYWORD = "BREAKING CHANGE"


@dataclass(frozen=True)
class CommitParserOptions:
    """Patterns and their capture-group correspondences.

    Attributes
    ----------
    header_pattern : Pattern[str]
        Matches the header line; groups map to ``header_correspondence``.
    header_correspondence : Tuple[str, ...]
        Field names for the header groups, in group order.
    note_keywords : Tuple[str, ...]
        Footer keywords that start a note (e.g. ``BREAKING CHANGE``).
    merge_pattern : Pattern[str]
        Matches a merge commit header; groups map to ``merge_correspondence``.
    merge_correspondence : Tuple[str, ...]
        Field names for the merge groups.
    revert_pattern : Pattern[str]
        Matches a revert commit message; groups map to ``revert_correspondence``.
    revert_correspondence : Tuple[str, ...]
        Field names for the revert groups.
    """

    header_pattern: Pattern[str]
    header_correspondence: Tuple[str, ...]
    note_keywords: Tuple[str, ...]
    merge_pattern: Pattern[str]
    merge_correspondence: Tuple[str, ...]
    revert_pattern: Pattern[str]
    revert_correspondence: Tuple[str, ...]

    def as_dict(self) -> Dict[str, Any]:
        """Return a JSON-serialisable view of the options."""
        return {
            "headerPattern": self.header_pattern.pattern,
            "headerCorrespondence": list(self.header_correspondence),
            "noteKeywords": list(self.note_keywords),
            "mergePattern": self.merge_pattern.pattern,
            "mergeCorrespondence": list(self.merge_correspondence),
            "revertPattern": self.revert_pattern.pattern,
            "revertCorrespondence": list(self.revert_correspondence),
        }


def get_changelog_options() -> CommitParserOptions:
    """Build the tokenizer configuration used for every commit."""
    options = CommitParserOptions(
        header_pattern=HEADER_PATTERN,
        header_correspondence=("type", "scope", "subject"),
        note_keywords=(BREAKING_CHANGE_KEYWORD,),
        merge_pattern=MERGE_PATTERN,
        merge_correspondence=("issueId", "source"),
        revert_pattern=REVERT_PATTERN,
        revert_correspondence=("header", "hash"),
    )
    logger.debug("Changelog options: %s", json.dumps(options.as_dict()))
    return options
