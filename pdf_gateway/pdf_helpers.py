"""
Helper functions for PDF responses.

Filename sanitizing and response header construction for generated
documents.
"""

import re
from typing import Dict

from .models import DEFAULT_FILENAME, RenderedDocument

PDF_MEDIA_TYPE = "application/pdf"


def sanitize_for_path(text: str) -> str:
    """
    Sanitize text for use in a download filename.

    Replaces anything but ASCII word chars, spaces, hyphens and dots with
    underscores, turns spaces into underscores, collapses repeats and trims
    leading/trailing separators.

    Example:
        >>> sanitize_for_path("Q3 Report (Final)")
        "Q3_Report_Final"
    """
    cleaned = re.sub(r"[^\w .-]", "_", text, flags=re.ASCII)
    cleaned = cleaned.replace(" ", "_")
    cleaned = re.sub(r"_+", "_", cleaned)
    # No hidden files or path tricks like "..": strip separators at the ends
    return cleaned.strip("._-")


def build_pdf_filename(requested: str) -> str:
    """Turn a caller-supplied filename into a safe *.pdf name."""
    stem = requested.strip()
    if stem.lower().endswith(".pdf"):
        stem = stem[:-4]
    stem = sanitize_for_path(stem)
    if not stem:
        return DEFAULT_FILENAME
    return f"{stem}.pdf"


def pdf_response_headers(document: RenderedDocument) -> Dict[str, str]:
    """Headers for a downloadable PDF response."""
    return {
        "Content-Disposition": f'attachment; filename="{document.filename}"',
        "Content-Length": str(document.size),
    }
