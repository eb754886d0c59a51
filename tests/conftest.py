import fitz
import pytest


def build_pdf(pages):
    """Build an in-memory PDF; each item is one page, newlines become separate text lines."""
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        y = 72
        for line in text.splitlines():
            page.insert_text((72, y), line, fontsize=10)
            y += 14
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def make_pdf():
    return build_pdf


@pytest.fixture
def report_pdf():
    return build_pdf([
        "Order ID: 12345, Name: John Doe\nGender/Age: 45 Male",
        "",
        "Collected On: 01-Jan-2024, Sample: Blood",
    ])
