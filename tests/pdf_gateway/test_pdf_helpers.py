"""
Unit tests for PDF response helpers.
"""

import pytest

from pdf_gateway.models import RenderedDocument
from pdf_gateway.pdf_helpers import build_pdf_filename, pdf_response_headers, sanitize_for_path


class TestSanitizeForPath:

    @pytest.mark.parametrize("text, expected", [
        ("report", "report"),
        ("Q3 Report (Final)", "Q3_Report_Final"),
        ("Test & Co.", "Test_Co"),
        ("../../etc/passwd", "etc_passwd"),
        ("line\r\nbreak", "line_break"),
        ("résumé", "r_sum"),
        ("already_clean-name.v2", "already_clean-name.v2"),
    ])
    def test_sanitize(self, text, expected):
        assert sanitize_for_path(text) == expected


class TestBuildPdfFilename:

    def test_adds_extension(self):
        assert build_pdf_filename("invoice") == "invoice.pdf"

    def test_keeps_single_extension(self):
        assert build_pdf_filename("My Report.PDF") == "My_Report.pdf"

    @pytest.mark.parametrize("requested", ["", "   ", ".pdf", "报告", "../"])
    def test_unusable_names_fall_back_to_default(self, requested):
        assert build_pdf_filename(requested) == "document.pdf"


def test_pdf_response_headers():
    document = RenderedDocument(content=b"%PDF-1.4 abc", filename="a.pdf")

    headers = pdf_response_headers(document)

    assert headers == {
        "Content-Disposition": 'attachment; filename="a.pdf"',
        "Content-Length": "12",
    }
