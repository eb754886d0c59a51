import pytest

from medreport.errors import DocumentParseError
from medreport.pdf_extractor import PDFTextExtractor


def test_one_string_per_page_in_order(report_pdf):
    pages = PDFTextExtractor().extract(report_pdf)
    assert len(pages) == 3
    assert "Order ID: 12345" in pages[0]
    assert pages[1] == ""
    assert "Collected On: 01-Jan-2024" in pages[2]


def test_fragments_joined_with_single_space(make_pdf):
    pages = PDFTextExtractor().extract(make_pdf(["Name: Jane\nAge: 30"]))
    assert "\n" not in pages[0]
    assert pages[0].split() == ["Name:", "Jane", "Age:", "30"]


def test_keep_line_breaks(make_pdf):
    pages = PDFTextExtractor(keep_line_breaks=True).extract(make_pdf(["Name: Jane\nAge: 30"]))
    assert [l.strip() for l in pages[0].split("\n")] == ["Name: Jane", "Age: 30"]


def test_failed_page_becomes_empty_string(make_pdf):
    class FlakyExtractor(PDFTextExtractor):
        def _page_text(self, page):
            if page.number == 1:
                raise RuntimeError("broken content stream")
            return super()._page_text(page)

    pages = FlakyExtractor().extract(make_pdf(["first", "second", "third"]))
    assert len(pages) == 3
    assert pages[1] == ""
    assert "first" in pages[0] and "third" in pages[2]


@pytest.mark.parametrize("data", [b"", b"this is not a pdf"])
def test_unreadable_document_raises(data):
    with pytest.raises(DocumentParseError):
        PDFTextExtractor().extract(data)


def test_page_limit(make_pdf):
    with pytest.raises(DocumentParseError):
        PDFTextExtractor(max_pages=2).extract(make_pdf(["a", "b", "c"]))


def test_page_text_is_clipped(make_pdf):
    pages = PDFTextExtractor(max_page_chars=5).extract(make_pdf(["Hemoglobin 13.5 g/dL"]))
    assert pages == ["Hemog"]
