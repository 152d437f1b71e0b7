"""PDF tools plugin."""

manifest = {
    "title": "PDF Tools",
    "summary": "Merge several PDFs into one, or extract page ranges into a new PDF.",
    "slug": "pdf_tools",
    "category": "Document Utilities",
    "api": "/api/pdf_tools",
}


__all__ = ["manifest"]
