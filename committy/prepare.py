"""Turn an arbitrarily large staged change set into a bounded model input.

Auto mode prefers the richest signal that fits the budget:

1. zero-context diff, only if it fits whole (a truncated hunk is often worse
   than no hunk),
2. ``--stat`` summary, truncated if needed (label included),
3. plain file names, truncated, possibly empty.

Query failures in the first two tiers fall through to the next tier.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .errors import VcsQueryError
from .git import ChangeSetReader

logger = logging.getLogger(__name__)


class InputMode(str, enum.Enum):
    AUTO = "auto"
    FULL = "full"
    UNIFIED0 = "unified0"
    STAT = "stat"
    NAMES = "names"


class SourceKind(str, enum.Enum):
    DIFF_FULL = "DIFF_FULL"
    DIFF_U0 = "DIFF_U0"
    DIFF_STAT = "DIFF_STAT"
    FILENAMES = "FILENAMES"


@dataclass(frozen=True)
class PreparedPayload:
    kind: SourceKind
    text: str

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()

    def render(self) -> str:
        """Label line followed by the content, as sent to the model."""
        return f"{self.kind.value}\n{self.text}"

    @classmethod
    def fit(cls, kind: SourceKind, text: str, max_chars: int) -> "PreparedPayload":
        """Truncate so the rendered form, label line included, stays within max_chars."""
        return cls(kind, truncate(text, max_chars - len(kind.value) - 1))


def truncate(text: str, max_chars: int) -> str:
    if max_chars <= 0:
        return ""
    return text if len(text) <= max_chars else text[:max_chars]


class InputPreparer:
    def __init__(self, reader: ChangeSetReader):
        self.reader = reader

    def prepare(self, mode: InputMode, max_chars: int) -> PreparedPayload:
        mode = InputMode(mode)
        if mode is InputMode.AUTO:
            payload = self._prepare_auto(max_chars)
        elif mode is InputMode.FULL:
            payload = PreparedPayload.fit(SourceKind.DIFF_FULL, self.reader.read_full_diff(3), max_chars)
        elif mode is InputMode.UNIFIED0:
            payload = PreparedPayload.fit(SourceKind.DIFF_U0, self.reader.read_full_diff(0), max_chars)
        elif mode is InputMode.STAT:
            payload = PreparedPayload.fit(SourceKind.DIFF_STAT, self.reader.read_stat(), max_chars)
        else:
            payload = PreparedPayload.fit(SourceKind.FILENAMES, self.reader.read_names(), max_chars)
        logger.debug("prepared %s payload: %d chars (mode=%s, budget=%d)", payload.kind.value, len(payload.text), mode.value, max_chars)
        return payload

    # -----------------------------
    # Auto-mode tiers
    # -----------------------------

    def _prepare_auto(self, max_chars: int) -> PreparedPayload:
        tiers: List[Callable[[int], Optional[PreparedPayload]]] = [self._try_unified0, self._try_stat]
        for tier in tiers:
            payload = tier(max_chars)
            if payload is not None:
                return payload
        return self._names(max_chars)

    def _try_unified0(self, max_chars: int) -> Optional[PreparedPayload]:
        try:
            diff = self.reader.read_full_diff(0)
        except VcsQueryError as e:
            logger.debug("zero-context diff failed, falling back: %s", e)
            return None
        if not diff.strip():
            logger.debug("zero-context diff is empty")
            return None
        if len(diff) > max_chars:
            logger.debug("zero-context diff is %d chars, over budget of %d", len(diff), max_chars)
            return None
        return PreparedPayload(SourceKind.DIFF_U0, diff)

    def _try_stat(self, max_chars: int) -> Optional[PreparedPayload]:
        try:
            stat = self.reader.read_stat()
        except VcsQueryError as e:
            logger.debug("diff stat failed, falling back: %s", e)
            return None
        if not stat.strip():
            return None
        return PreparedPayload.fit(SourceKind.DIFF_STAT, stat, max_chars)

    def _names(self, max_chars: int) -> PreparedPayload:
        return PreparedPayload.fit(SourceKind.FILENAMES, self.reader.read_names(), max_chars)
