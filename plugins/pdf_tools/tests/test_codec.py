from io import BytesIO

import pytest
from PyPDF2 import PdfReader, PdfWriter

from plugins.pdf_tools.core import (
    DocumentCodecError,
    PyPDF2Codec,
    get_codec,
    pdf_metadata,
)


def _blank_pdf(pages: int, width: int = 200) -> bytes:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=width, height=200)
    buf = BytesIO()
    writer.write(buf)
    return buf.getvalue()


def _widths(data: bytes) -> list[int]:
    reader = PdfReader(BytesIO(data))
    return [int(float(page.mediabox.width)) for page in reader.pages]


def test_page_count_and_metadata():
    pdf = _blank_pdf(3)
    codec = PyPDF2Codec()
    assert codec.page_count(pdf) == 3
    meta = pdf_metadata(pdf, codec)
    assert meta.pages == 3
    assert meta.size_bytes == len(pdf)


def test_merge_appends_every_page_in_order():
    codec = PyPDF2Codec()
    merged = codec.merge([_blank_pdf(2, width=100), _blank_pdf(1, width=300)])
    assert _widths(merged) == [100, 100, 300]


def test_extract_follows_requested_order_and_duplicates():
    codec = PyPDF2Codec()
    writer = PdfWriter()
    for width in (100, 200, 300):
        writer.add_blank_page(width=width, height=200)
    buf = BytesIO()
    writer.write(buf)

    extracted = codec.extract(buf.getvalue(), [3, 1, 1])
    assert _widths(extracted) == [300, 100, 100]


def test_extract_refuses_pages_outside_document():
    with pytest.raises(DocumentCodecError):
        PyPDF2Codec().extract(_blank_pdf(2), [3])


def test_unreadable_input_raises_codec_error():
    with pytest.raises(DocumentCodecError):
        PyPDF2Codec().page_count(b"%PDF-1.4 definitely broken")


def test_broken_page_tree_raises_codec_error():
    broken = _blank_pdf(2).replace(b"/Pages", b"/Pagex")
    codec = PyPDF2Codec()
    with pytest.raises(DocumentCodecError):
        codec.page_count(broken)
    with pytest.raises(DocumentCodecError):
        codec.merge([_blank_pdf(1), broken])
    with pytest.raises(DocumentCodecError):
        pdf_metadata(broken, codec)


def test_get_codec_by_name():
    assert isinstance(get_codec(), PyPDF2Codec)
    assert isinstance(get_codec("PyPDF2"), PyPDF2Codec)
    with pytest.raises(ValueError):
        get_codec("itext")
