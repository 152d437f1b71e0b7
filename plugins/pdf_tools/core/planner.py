"""Page range planning for split operations.

A range expression such as ``"1-3,5,7-9"`` is resolved against the page count
of a source document into an :class:`ExtractionPlan`. Bad tokens never abort
the whole expression: they are collected in ``rejected_tokens`` and the
remaining tokens still contribute pages.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import List, Tuple


class EmptyExpressionError(ValueError):
    """Raised when a range expression has no content."""


class RejectReason(str, enum.Enum):
    MALFORMED_NUMBER = "MalformedNumber"
    OUT_OF_RANGE = "OutOfRange"


@dataclass(frozen=True)
class PageRangeToken:
    """A single page or an inclusive ``[start, end]`` interval, 1-indexed."""

    start: int
    end: int

    @property
    def is_reversed(self) -> bool:
        return self.start > self.end

    def expand(self) -> range:
        # Reversed intervals expand to nothing.
        return range(self.start, self.end + 1)


@dataclass(frozen=True)
class RejectedToken:
    text: str
    reason: RejectReason


@dataclass(frozen=True)
class ExtractionPlan:
    """Resolved pages plus diagnostics for one range expression."""

    page_count: int
    pages: Tuple[int, ...] = ()
    accepted_tokens: Tuple[PageRangeToken, ...] = ()
    rejected_tokens: Tuple[RejectedToken, ...] = ()

    @property
    def total_accepted(self) -> int:
        return len(self.pages)

    @property
    def is_empty(self) -> bool:
        return not self.pages

    @property
    def only_malformed(self) -> bool:
        """True when nothing was accepted and every token failed to parse."""

        return (
            not self.accepted_tokens
            and bool(self.rejected_tokens)
            and all(
                item.reason is RejectReason.MALFORMED_NUMBER
                for item in self.rejected_tokens
            )
        )

    def to_dict(self) -> dict:
        return {
            "page_count": self.page_count,
            "pages": list(self.pages),
            "total_accepted": self.total_accepted,
            "accepted_tokens": [
                {"start": token.start, "end": token.end, "reversed": token.is_reversed}
                for token in self.accepted_tokens
            ],
            "rejected_tokens": [
                {"token": item.text, "reason": item.reason.value}
                for item in self.rejected_tokens
            ],
        }


_NUMBER_RE = re.compile(r"^\+?\d+$", re.ASCII)


def _split_dropping_trailing(text: str, separator: str) -> List[str]:
    parts = text.split(separator)
    while parts and parts[-1] == "":
        parts.pop()
    return parts


def _to_int(value: str) -> int:
    value = value.strip()
    if not _NUMBER_RE.match(value):
        raise ValueError(f"not a page number: {value!r}")
    return int(value)


def parse_token(text: str) -> PageRangeToken:
    """Parse one comma-separated unit into a :class:`PageRangeToken`.

    Only the first two dash-separated parts are read, so ``"1-3-5"`` means
    ``1-3``. Raises :class:`ValueError` when a part is not a page number.

    Numbers are an optional ``+`` and ASCII digits of any length: non-ASCII
    digits are rejected here, while huge values parse and are later reported
    as out of range.
    """

    parts = _split_dropping_trailing(text, "-")
    if not parts:
        raise ValueError(f"not a page range: {text!r}")
    start = _to_int(parts[0])
    end = _to_int(parts[1]) if len(parts) > 1 else start
    return PageRangeToken(start=start, end=end)


def plan(expression: str | None, page_count: int) -> ExtractionPlan:
    """Resolve ``expression`` against a document of ``page_count`` pages."""

    if page_count < 0:
        raise ValueError("page_count must be >= 0")
    if not expression or not expression.strip():
        raise EmptyExpressionError("Range expression is empty")

    pages: List[int] = []
    accepted: List[PageRangeToken] = []
    rejected: List[RejectedToken] = []

    for raw in _split_dropping_trailing(expression, ","):
        text = raw.strip()
        try:
            token = parse_token(text)
        except ValueError:
            rejected.append(RejectedToken(text, RejectReason.MALFORMED_NUMBER))
            continue

        if not (1 <= token.start <= page_count and 1 <= token.end <= page_count):
            rejected.append(RejectedToken(text, RejectReason.OUT_OF_RANGE))
            continue

        accepted.append(token)
        pages.extend(token.expand())

    return ExtractionPlan(
        page_count=page_count,
        pages=tuple(pages),
        accepted_tokens=tuple(accepted),
        rejected_tokens=tuple(rejected),
    )


def describe_rejection(rejection: RejectedToken, page_count: int) -> str:
    if rejection.reason is RejectReason.OUT_OF_RANGE:
        return f"Invalid page range: {rejection.text}. PDF has {page_count} pages."
    return f"Invalid page number in: {rejection.text}"


__all__ = [
    "EmptyExpressionError",
    "RejectReason",
    "PageRangeToken",
    "RejectedToken",
    "ExtractionPlan",
    "parse_token",
    "plan",
    "describe_rejection",
]
