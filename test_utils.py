"""Tests for file helpers and export options."""
from datetime import date

import pytest

from chat_to_pdf.exceptions import FileSizeLimitExceededError, InvalidFileError
from chat_to_pdf.export_options import ExportOptions
from chat_to_pdf.utils import (
    build_output_filename,
    check_file_size_limit,
    clean_filename,
    validate_html_path,
)


def test_output_filenames():
    day = date(2024, 5, 1)
    assert build_output_filename("chat-history", export_date=day) == "chat-history-2024-05-01.pdf"
    assert build_output_filename("chat-history", True, day) == "chat-history-text-2024-05-01.pdf"


def test_clean_filename():
    assert clean_filename("/tmp/My Chat (copy).html") == "My-Chat-copy"
    assert clean_filename("???.html") == "document"


def test_validate_html_path(tmp_path):
    page = tmp_path / "chat.htm"
    page.write_text("<html></html>")
    validate_html_path(str(page))

    with pytest.raises(InvalidFileError):
        validate_html_path(str(tmp_path / "missing.html"))
    with pytest.raises(InvalidFileError):
        validate_html_path("")

    other = tmp_path / "chat.pdf"
    other.write_bytes(b"%PDF")
    with pytest.raises(InvalidFileError):
        validate_html_path(str(other))


def test_file_size_limit(tmp_path):
    page = tmp_path / "chat.html"
    page.write_bytes(b"x" * 2048)
    assert check_file_size_limit(str(page), max_mb=1) == pytest.approx(2048 / (1024 * 1024))

    with pytest.raises(FileSizeLimitExceededError):
        check_file_size_limit(str(page), max_mb=0)


def test_options_resolve_document_name():
    assert ExportOptions("a.html").resolved_document_name == "chat-history"
    assert ExportOptions("a.html", original_filename="saved chat.html").resolved_document_name == "saved-chat"
    assert ExportOptions("a.html", document_name="notes").resolved_document_name == "notes"


def test_options_validation():
    with pytest.raises(ValueError):
        ExportOptions("a.html", document_name="  ")
    with pytest.raises(ValueError):
        ExportOptions("a.html", render_width_px=0)
    assert ExportOptions("a.html", render_formulas=False).text_mode
