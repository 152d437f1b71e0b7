"""Per-session orchestration of merge and split operations."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Tuple

from common.io import secure_filename, timestamped_filename, write_new_file
from common.logging import get_logger

from .codec import DocumentCodec
from .planner import ExtractionPlan, describe_rejection, plan
from .selection import (
    MergeSelection,
    NoSelection,
    Selection,
    SelectionStore,
    SourceDocument,
    SplitSelection,
    choose_for_merge,
    choose_for_split,
    clear_after_success,
)

logger = get_logger()

RANGE_FORMAT_HINT = "Invalid page range format! Use format like: 1-3,5,7-9"


class SelectionError(ValueError):
    """Raised when an operation runs without the selection it needs."""


class NoValidPagesError(ValueError):
    """Raised when a split plan resolves to zero pages."""

    def __init__(self, message: str, plan: ExtractionPlan, notices: List[str]):
        super().__init__(message)
        self.plan = plan
        self.notices = notices


@dataclass(frozen=True)
class OperationResult:
    filename: str
    path: Path
    pages: int
    message: str
    notices: List[str] = field(default_factory=list)
    plan: ExtractionPlan | None = None


class SelectionController:
    """Drive the codec from the current selection of each session."""

    def __init__(
        self,
        codec: DocumentCodec,
        documents_root: Path,
        *,
        store: SelectionStore | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.codec = codec
        self.documents_root = Path(documents_root)
        self.store = store or SelectionStore()
        self.clock = clock

    def _load(self, name: str, data: bytes) -> SourceDocument:
        page_count = self.codec.page_count(data)
        return SourceDocument(
            name=secure_filename(name, fallback="document.pdf"),
            data=data,
            page_count=page_count,
        )

    def current(self, session_id: str) -> Selection:
        return self.store.get(session_id)

    def reset(self, session_id: str) -> None:
        self.store.reset(session_id)

    def select_for_merge(
        self, session_id: str, uploads: Iterable[Tuple[str, bytes]]
    ) -> Tuple[Selection, str]:
        # Any split choice is dropped before the new files are inspected.
        self.store.update(session_id, lambda _: NoSelection())
        documents = [self._load(name, data) for name, data in uploads]
        state = self.store.update(session_id, lambda _: choose_for_merge(documents))
        logger.info("session %s selected %d document(s) for merge", session_id[:8], len(documents))
        return state, f"Selected {len(documents)} PDF Files."

    def select_for_split(self, session_id: str, name: str, data: bytes) -> Tuple[Selection, str]:
        self.store.update(session_id, lambda _: NoSelection())
        document = self._load(name, data)
        state = self.store.update(session_id, lambda _: choose_for_split(document))
        logger.info(
            "session %s selected %s (%d pages) for split",
            session_id[:8],
            document.name,
            document.page_count,
        )
        return state, "Selected PDF File for Split."

    def _clear_if_unchanged(self, session_id: str, used: Selection) -> None:
        def transition(state: Selection) -> Selection:
            if state is used:
                return clear_after_success(state, type(used))
            return state

        self.store.update(session_id, transition)

    def _write(self, suffix: str, data: bytes) -> Path:
        filename = timestamped_filename(suffix, clock=self.clock)
        return write_new_file(self.documents_root, filename, data)

    def merge(self, session_id: str) -> OperationResult:
        selection = self.store.get(session_id)
        if not isinstance(selection, MergeSelection):
            raise SelectionError("Please select file!")

        merged = self.codec.merge(doc.data for doc in selection.documents)
        path = self._write("merged.pdf", merged)
        self._clear_if_unchanged(session_id, selection)

        pages = sum(doc.page_count for doc in selection.documents)
        logger.info(
            "merged %d document(s), %d pages, into %s",
            len(selection.documents),
            pages,
            path,
        )
        return OperationResult(
            filename=path.name,
            path=path,
            pages=pages,
            message="PDF files merged successfully.",
        )

    def split(self, session_id: str, expression: str | None) -> OperationResult:
        selection = self.store.get(session_id)
        if not isinstance(selection, SplitSelection):
            raise SelectionError("Please select a PDF file to split!")

        document = selection.document
        # EmptyExpressionError propagates to the caller.
        extraction = plan(expression, document.page_count)
        notices = [
            describe_rejection(item, document.page_count)
            for item in extraction.rejected_tokens
        ]
        for notice in notices:
            logger.info("session %s: %s", session_id[:8], notice)

        if extraction.is_empty:
            message = (
                RANGE_FORMAT_HINT
                if extraction.only_malformed
                else "No valid pages found to extract!"
            )
            raise NoValidPagesError(message, extraction, notices)

        output = self.codec.extract(document.data, extraction.pages)
        path = self._write("split.pdf", output)
        self._clear_if_unchanged(session_id, selection)

        logger.info(
            "extracted %d page(s) from %s into %s",
            extraction.total_accepted,
            document.name,
            path,
        )
        return OperationResult(
            filename=path.name,
            path=path,
            pages=extraction.total_accepted,
            message=f"PDF split successfully! {extraction.total_accepted} pages extracted.",
            notices=notices,
            plan=extraction,
        )


__all__ = [
    "RANGE_FORMAT_HINT",
    "SelectionError",
    "NoValidPagesError",
    "OperationResult",
    "SelectionController",
]
