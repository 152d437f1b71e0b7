"""Document codec capability used by the selection controller."""

from __future__ import annotations

from abc import ABC, abstractmethod
from io import BytesIO
from typing import Iterable, Sequence

from PyPDF2 import PdfReader, PdfWriter


class DocumentCodecError(ValueError):
    """Raised when a document cannot be read or assembled."""


class DocumentCodec(ABC):
    """Abstract PDF capability: count pages, merge, copy selected pages."""

    name: str = ""

    @abstractmethod
    def page_count(self, data: bytes) -> int:
        """
        Return the number of pages in ``data``.

        Raises:
            DocumentCodecError: If the document cannot be opened
        """

    @abstractmethod
    def merge(self, sources: Iterable[bytes]) -> bytes:
        """Return one document holding every page of ``sources`` in order."""

    @abstractmethod
    def extract(self, data: bytes, pages: Sequence[int]) -> bytes:
        """
        Copy ``pages`` (1-indexed, in the given order) into a new document.

        Page numbers are expected to be valid for ``data``; callers resolve
        them with :func:`plugins.pdf_tools.core.planner.plan` first.
        """


class PyPDF2Codec(DocumentCodec):
    name = "pypdf2"

    def _open(self, data: bytes) -> PdfReader:
        try:
            reader = PdfReader(BytesIO(data))
            encrypted = reader.is_encrypted
            if not encrypted:
                # Walk the page tree now so a broken /Pages fails here.
                len(reader.pages)
        except Exception as exc:  # PyPDF2 surfaces malformed input as many types
            raise DocumentCodecError(f"Unable to read PDF: {exc}") from exc
        if encrypted:
            raise DocumentCodecError("Encrypted PDFs are not supported")
        return reader

    @staticmethod
    def _write(writer: PdfWriter) -> bytes:
        buf = BytesIO()
        writer.write(buf)
        return buf.getvalue()

    def page_count(self, data: bytes) -> int:
        return len(self._open(data).pages)

    def merge(self, sources: Iterable[bytes]) -> bytes:
        writer = PdfWriter()
        for data in sources:
            reader = self._open(data)
            try:
                for page in reader.pages:
                    writer.add_page(page)
            except Exception as exc:
                raise DocumentCodecError(f"Unable to copy pages: {exc}") from exc
        return self._write(writer)

    def extract(self, data: bytes, pages: Sequence[int]) -> bytes:
        reader = self._open(data)
        total = len(reader.pages)
        writer = PdfWriter()
        for page_num in pages:
            if page_num < 1 or page_num > total:
                raise DocumentCodecError(
                    f"Page {page_num} is outside a {total} page document"
                )
            try:
                writer.add_page(reader.pages[page_num - 1])
            except Exception as exc:
                raise DocumentCodecError(f"Unable to copy page {page_num}: {exc}") from exc
        return self._write(writer)


CODECS: dict[str, type[DocumentCodec]] = {PyPDF2Codec.name: PyPDF2Codec}


def get_codec(name: str | None = None) -> DocumentCodec:
    key = (name or PyPDF2Codec.name).strip().lower()
    try:
        return CODECS[key]()
    except KeyError as exc:
        raise ValueError(f"Unknown document codec: {name}") from exc


__all__ = [
    "DocumentCodec",
    "DocumentCodecError",
    "PyPDF2Codec",
    "CODECS",
    "get_codec",
]
