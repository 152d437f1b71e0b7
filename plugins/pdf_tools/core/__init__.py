from __future__ import annotations

from dataclasses import dataclass

from .codec import CODECS, DocumentCodec, DocumentCodecError, PyPDF2Codec, get_codec
from .controller import (
    RANGE_FORMAT_HINT,
    NoValidPagesError,
    OperationResult,
    SelectionController,
    SelectionError,
)
from .planner import (
    EmptyExpressionError,
    ExtractionPlan,
    PageRangeToken,
    RejectedToken,
    RejectReason,
    describe_rejection,
    parse_token,
    plan,
)
from .selection import (
    DEFAULT_SELECTION_TTL,
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


@dataclass(frozen=True)
class PdfMetadata:
    """Metadata extracted from a PDF document."""

    pages: int
    size_bytes: int


def pdf_metadata(data: bytes, codec: DocumentCodec | None = None) -> PdfMetadata:
    codec = codec or get_codec()
    return PdfMetadata(pages=codec.page_count(data), size_bytes=len(data))


__all__ = [
    "CODECS",
    "DocumentCodec",
    "DocumentCodecError",
    "PyPDF2Codec",
    "get_codec",
    "RANGE_FORMAT_HINT",
    "NoValidPagesError",
    "OperationResult",
    "SelectionController",
    "SelectionError",
    "EmptyExpressionError",
    "ExtractionPlan",
    "PageRangeToken",
    "RejectedToken",
    "RejectReason",
    "describe_rejection",
    "parse_token",
    "plan",
    "DEFAULT_SELECTION_TTL",
    "MergeSelection",
    "NoSelection",
    "Selection",
    "SelectionStore",
    "SourceDocument",
    "SplitSelection",
    "choose_for_merge",
    "choose_for_split",
    "clear_after_success",
    "PdfMetadata",
    "pdf_metadata",
]
