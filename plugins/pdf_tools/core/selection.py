"""Exclusive merge/split selection state.

A session holds exactly one of :class:`NoSelection`, :class:`MergeSelection`
or :class:`SplitSelection`. Choosing documents for one operation replaces
whatever was chosen for the other.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Union

DEFAULT_SELECTION_TTL = 60 * 60


@dataclass(frozen=True)
class SourceDocument:
    """An uploaded PDF together with its authoritative page count."""

    name: str
    data: bytes
    page_count: int

    def describe(self) -> dict:
        return {"name": self.name, "pages": self.page_count, "size_bytes": len(self.data)}


@dataclass(frozen=True)
class NoSelection:
    mode = "none"

    def describe(self) -> dict:
        return {"mode": self.mode, "documents": []}


@dataclass(frozen=True)
class MergeSelection:
    documents: tuple[SourceDocument, ...]
    mode = "merge"

    def __post_init__(self) -> None:
        if not self.documents:
            raise ValueError("A merge selection needs at least one document")

    def describe(self) -> dict:
        return {"mode": self.mode, "documents": [doc.describe() for doc in self.documents]}


@dataclass(frozen=True)
class SplitSelection:
    document: SourceDocument
    mode = "split"

    def describe(self) -> dict:
        return {"mode": self.mode, "documents": [self.document.describe()]}


Selection = Union[NoSelection, MergeSelection, SplitSelection]


def choose_for_merge(documents: Iterable[SourceDocument]) -> Selection:
    """Select documents to merge; an empty pick still drops any split choice."""

    documents = tuple(documents)
    if not documents:
        return NoSelection()
    return MergeSelection(documents=documents)


def choose_for_split(document: SourceDocument) -> Selection:
    return SplitSelection(document=document)


def clear_after_success(state: Selection, completed: type) -> Selection:
    """Clear ``state`` if it belongs to the operation that just completed."""

    if isinstance(state, completed):
        return NoSelection()
    return state


class SelectionStore:
    """Thread-safe per-session selection slots with idle expiry."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_SELECTION_TTL,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._items: dict[str, tuple[Selection, float]] = {}

    def _purge_locked(self) -> None:
        now = self._clock()
        expired = [
            session_id
            for session_id, (_, touched) in self._items.items()
            if now - touched > self.ttl_seconds
        ]
        for session_id in expired:
            self._items.pop(session_id, None)

    def get(self, session_id: str) -> Selection:
        with self._lock:
            self._purge_locked()
            item = self._items.get(session_id)
            if item is None:
                return NoSelection()
            state = item[0]
            self._items[session_id] = (state, self._clock())
            return state

    def update(self, session_id: str, transition: Callable[[Selection], Selection]) -> Selection:
        with self._lock:
            self._purge_locked()
            item = self._items.get(session_id)
            new_state = transition(item[0] if item else NoSelection())
            if isinstance(new_state, NoSelection):
                self._items.pop(session_id, None)
            else:
                self._items[session_id] = (new_state, self._clock())
            return new_state

    def reset(self, session_id: str) -> None:
        with self._lock:
            self._items.pop(session_id, None)

    def __len__(self) -> int:
        with self._lock:
            self._purge_locked()
            return len(self._items)


__all__ = [
    "DEFAULT_SELECTION_TTL",
    "SourceDocument",
    "NoSelection",
    "MergeSelection",
    "SplitSelection",
    "Selection",
    "choose_for_merge",
    "choose_for_split",
    "clear_after_success",
    "SelectionStore",
]
