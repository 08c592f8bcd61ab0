"""
Tokenizer for Conventional Commit messages.

:class:`CommitMessageParser` splits a raw commit message into the
fields described by a :class:`~vc_changelog.parsing.options.CommitParserOptions`
instance: the header parts, the merge line, the body, the footer, the
notes introduced by a note keyword, issue references, ``@`` mentions and
revert metadata.

The parser never raises for malformed input. A message whose header
does not match the header pattern simply yields ``None`` for ``type``,
``scope`` and ``subject``.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Pattern, Sequence

from vc_changelog.grouping.group_model import (
    CommitMessage,
    CommitNote,
    CommitReference,
    ParsedCommitHeader,
    RevertMeta,
)
from vc_changelog.parsing.options import CommitParserOptions, get_changelog_options


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


REFERENCE_ACTIONS = (
    "close",
    "closes",
    "closed",
    "fix",
    "fixes",
    "fixed",
    "resolve",
    "resolves",
    "resolved",
)

_ISSUE_PATTERN = re.compile(r"(?:([\w.-]+?)/([\w.-]+?))?(#)(\d+)")
_MENTION_PATTERN = re.compile(r"@([\w-]+)")


def _append(text: str, line: str) -> str:
    return f"{text}\n{line}" if text else line


def _trim_newlines(text: str) -> str:
    return text.strip("\r\n")


def _groups_to_fields(match: Optional[re.Match], names: Sequence[str]) -> Dict[str, Optional[str]]:
    """Map the capture groups of ``match`` onto ``names``."""
    if match is None:
        return {name: None for name in names}
    return {name: match.group(index) for index, name in enumerate(names, start=1)}


class CommitMessageParser:
    """Split commit messages according to a fixed set of patterns."""

    def __init__(self, options: Optional[CommitParserOptions] = None) -> None:
        self.options = options or get_changelog_options()
        keywords = "|".join(re.escape(k) for k in self.options.note_keywords)
        self._notes_pattern: Pattern[str] = re.compile(rf"^[\s|*]*({keywords})[:\s]+(.*)")
        actions = "|".join(REFERENCE_ACTIONS)
        self._reference_line_pattern: Pattern[str] = re.compile(
            rf"\b({actions})\b\s+(.*?)(?=\b(?:{actions})\b|$)", re.IGNORECASE
        )

    # ------------------------------------------------------------------
    # Header
    # ------------------------------------------------------------------
    def parse_header(self, header: str) -> ParsedCommitHeader:
        """Split ``header`` into type, scope and subject."""
        fields = _groups_to_fields(
            self.options.header_pattern.match(header), self.options.header_correspondence
        )
        return ParsedCommitHeader(
            type=fields.get("type"),
            scope=fields.get("scope"),
            subject=fields.get("subject"),
        )

    # ------------------------------------------------------------------
    # References
    # ------------------------------------------------------------------
    @staticmethod
    def _issue_references(text: str, action: Optional[str]) -> List[CommitReference]:
        references = []
        for match in _ISSUE_PATTERN.finditer(text):
            references.append(
                CommitReference(
                    issue=match.group(4),
                    raw=text.strip(),
                    prefix=match.group(3),
                    action=action,
                    owner=match.group(1),
                    repository=match.group(2),
                )
            )
        return references

    def _line_references(self, line: str) -> List[CommitReference]:
        references: List[CommitReference] = []
        for match in self._reference_line_pattern.finditer(line):
            references.extend(self._issue_references(match.group(2), match.group(1)))
        return references

    # ------------------------------------------------------------------
    # Message
    # ------------------------------------------------------------------
    def parse(self, message: Optional[str]) -> CommitMessage:
        """Tokenize a complete commit message.

        Parameters
        ----------
        message : Optional[str]
            The raw commit message. ``None`` and blank messages produce an
            empty :class:`CommitMessage`.

        Returns
        -------
        CommitMessage
            The extracted fields.
        """
        raw = _trim_newlines(message or "")
        if not raw.strip():
            logger.debug("Empty commit message; nothing to tokenize")
            return CommitMessage()

        lines = raw.splitlines()
        first = lines.pop(0)
        merge: Optional[str] = None
        merge_match = self.options.merge_pattern.match(first)
        if merge_match:
            merge = merge_match.group(0)
            header = ""
            while lines:
                candidate = lines.pop(0)
                if candidate.strip():
                    header = candidate
                    break
            header = header or merge
        else:
            header = first

        parts = self.parse_header(header)
        references = self._issue_references(header, None)

        body = ""
        footer = ""
        notes: List[CommitNote] = []
        is_body = True
        continue_note = False
        for line in lines:
            note_match = self._notes_pattern.match(line)
            if note_match:
                continue_note = True
                is_body = False
                footer = _append(footer, line)
                notes.append(CommitNote(title=note_match.group(1), text=note_match.group(2)))
                continue
            line_references = self._line_references(line)
            if line_references:
                continue_note = False
                is_body = False
                footer = _append(footer, line)
                references.extend(line_references)
                continue
            if continue_note:
                last = notes[-1]
                notes[-1] = CommitNote(title=last.title, text=_append(last.text, line))
                footer = _append(footer, line)
            elif is_body:
                body = _append(body, line)
            else:
                footer = _append(footer, line)

        revert: Optional[RevertMeta] = None
        revert_match = self.options.revert_pattern.match(raw)
        if revert_match:
            fields = _groups_to_fields(revert_match, self.options.revert_correspondence)
            revert = RevertMeta(header=fields.get("header"), hash=fields.get("hash"))

        return CommitMessage(
            type=parts.type,
            scope=parts.scope,
            subject=parts.subject,
            merge=merge,
            header=header,
            body=_trim_newlines(body) or None,
            footer=_trim_newlines(footer) or None,
            notes=[CommitNote(title=n.title, text=_trim_newlines(n.text)) for n in notes],
            references=references,
            mentions=_MENTION_PATTERN.findall(raw),
            revert=revert,
        )


_DEFAULT_PARSER: Optional[CommitMessageParser] = None


def parse_commit_message(message: Optional[str]) -> CommitMessage:
    """Tokenize ``message`` with the default options."""
    global _DEFAULT_PARSER
    if _DEFAULT_PARSER is None:
        _DEFAULT_PARSER = CommitMessageParser()
    return _DEFAULT_PARSER.parse(message)
