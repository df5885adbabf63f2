"""
Selection resolver for ephemeral option lists.

Options shown to a user are paired with an opaque stable id of the form
``<tag>:<record id>``. A chosen label is matched back to its entry after
normalization and the caller acts on the record through the stable id,
never by re-parsing the label or by list position.
"""

import logging
import re
import unicodedata
from typing import List, Tuple, Union

from .sessions import SelectionEntry, Session

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


class _NotFound:
    """Sentinel returned when no option matches."""

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __bool__(self) -> bool:
        return False


NOT_FOUND = _NotFound()

# Option tags
ANSWERS_VIEW = "answers-view"
ANSWER_DELETE = "answer-delete"
QUESTION_DELETE = "question-delete"
CURRENT_DELETE = "current-delete"
ARCHIVE_DELETE = "archive-delete"


def normalize_label(text: str) -> str:
    """NFKC-normalize, collapse runs of whitespace and strip."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", unicodedata.normalize("NFKC", text)).strip()


def clip(text: str, max_chars: int) -> str:
    text = normalize_label(text)
    if max_chars <= 0 or len(text) <= max_chars:
        return text
    return text[: max(0, max_chars - 1)].rstrip() + "…"


def option_key(tag: str, record_id: str) -> str:
    return f"{tag}:{record_id}"


def parse_option_key(stable_id: str) -> Tuple[str, str]:
    """Split a stable id into (tag, record id)."""
    tag, sep, record_id = stable_id.partition(":")
    if not sep or not tag or not record_id:
        raise ValueError(f"Malformed option key: {stable_id!r}")
    return tag, record_id


def resolve(session: Session, incoming_text: str) -> Union[str, _NotFound]:
    """Return the stable id of the option whose label matches, else NOT_FOUND."""
    if not session.selection:
        return NOT_FOUND
    wanted = normalize_label(incoming_text)
    if not wanted:
        return NOT_FOUND
    for entry in session.selection:
        if normalize_label(entry.label) == wanted:
            logger.info(f"Selection resolved in {session.conversation_id}: {entry.stable_id}")
            return entry.stable_id
    logger.info(f"No option matched in {session.conversation_id}: {incoming_text!r}")
    return NOT_FOUND


class SelectionBuilder:
    """
    Collects options for one selection list.

    Labels are kept unique after normalization: a colliding label gets a
    numeric suffix so every displayed button maps to exactly one entry.
    """

    def __init__(self, label_max_chars: int = 100):
        self.label_max_chars = label_max_chars
        self._entries: List[SelectionEntry] = []
        self._seen: set = set()

    def add(self, label: str, tag: str, record_id: str) -> str:
        candidate = clip(label, self.label_max_chars)
        n = 2
        while normalize_label(candidate) in self._seen:
            suffix = f" ({n})"
            limit = max(1, self.label_max_chars - len(suffix)) if self.label_max_chars > 0 else 0
            candidate = clip(label, limit) + suffix
            n += 1
        self._seen.add(normalize_label(candidate))
        self._entries.append(SelectionEntry(candidate, option_key(tag, record_id)))
        return candidate

    @property
    def entries(self) -> Tuple[SelectionEntry, ...]:
        return tuple(self._entries)

    @property
    def labels(self) -> List[str]:
        return [e.label for e in self._entries]

    def __len__(self) -> int:
        return len(self._entries)
