import io

import pytest
import PyPDF2
from openpyxl import Workbook

from src.notebook.exceptions import ExtractionError, UnsupportedFileTypeError
from src.notebook.file_processor import (
    SUPPORTED_EXTENSIONS,
    extract_text,
    get_extension,
)


def _xlsx_bytes():
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "People"
    sheet.append(["Name", "Age"])
    sheet.append(["Ann", 30])
    other = workbook.create_sheet("Notes")
    other.append(["hello"])
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def _blank_pdf_bytes():
    writer = PyPDF2.PdfWriter()
    writer.add_blank_page(width=72, height=72)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def test_get_extension():
    assert get_extension("Report.PDF") == "pdf"
    assert get_extension("archive.tar.gz") == "gz"
    assert get_extension("README") == ""


def test_supported_extensions():
    assert set(SUPPORTED_EXTENSIONS) == {".txt", ".md", ".pdf", ".xlsx"}


def test_plain_text_and_markdown():
    assert extract_text("a.txt", "Héllo wörld.".encode("utf-8")) == "Héllo wörld."
    assert extract_text("b.md", b"# Title\n\nBody.") == "# Title\n\nBody."


def test_plain_text_strips_bom_and_replaces_bad_bytes():
    assert extract_text("a.txt", b"\xef\xbb\xbfHi.") == "Hi."
    assert extract_text("a.txt", b"ok \xff.") == "ok �."


def test_unsupported_extension():
    with pytest.raises(UnsupportedFileTypeError) as exc_info:
        extract_text("deck.docx", b"")
    assert str(exc_info.value) == "Unsupported file type: .docx"
    assert exc_info.value.extension == "docx"


def test_missing_extension_is_unsupported():
    with pytest.raises(UnsupportedFileTypeError):
        extract_text("README", b"text")


def test_spreadsheet_rows_become_lines():
    text = extract_text("people.xlsx", _xlsx_bytes())
    assert text == "Name, Age\nAnn, 30\n\nhello\n\n"


def test_blank_pdf_has_no_text():
    assert extract_text("blank.pdf", _blank_pdf_bytes()).strip() == ""


def test_corrupt_pdf_is_extraction_error():
    with pytest.raises(ExtractionError):
        extract_text("broken.pdf", b"this is not a pdf")


def test_corrupt_spreadsheet_is_extraction_error():
    with pytest.raises(ExtractionError):
        extract_text("broken.xlsx", b"not a zip file")
