import json

from medreport.errors import DocumentParseError
from medreport.pipeline import dump_debug, process_report, process_upload
from medreport.settings import Settings
from medreport.text_structurer import MedicalTextStructurer


class SpyStructurer(MedicalTextStructurer):
    def __init__(self):
        super().__init__()
        self.calls = 0

    def structure(self, pages, context=None):
        self.calls += 1
        return super().structure(pages, context)


def test_success_payload(report_pdf):
    status, payload = process_upload(report_pdf, "application/pdf", Settings())
    assert status == 200
    assert payload["success"] is True
    # page 3 carries patient info too, and the last page wins
    assert payload["data"]["patientInfo"] == {"date": "01-Jan-2024", "sample": "Blood"}


def test_first_page_fields(make_pdf):
    data = make_pdf(["Order ID: 12345, Name: John Doe\nGender/Age: 45 Male"])
    status, payload = process_upload(data, "application/pdf; charset=binary", Settings())
    assert status == 200
    assert payload["data"]["patientInfo"] == {
        "orderId": "12345",
        "name": "John Doe",
        "age": "45",
        "gender": "Male",
    }


def test_line_breaks_setting_enables_table_rows(make_pdf):
    data = make_pdf(["Investigation Value Unit Ref\nGlucose 95 mg/dL 70-110"])
    status, payload = process_upload(data, "application/pdf", Settings(keep_line_breaks=True))
    assert status == 200
    assert payload["data"]["testResults"]["investigation"] == ["Glucose"]


def test_wrong_content_type_is_rejected_before_extraction():
    spy = SpyStructurer()
    status, payload = process_upload(b"hello", "text/plain", Settings(), structurer=spy)
    assert status == 400
    assert payload == {"error": "Invalid file type"}
    assert spy.calls == 0


def test_missing_content_type():
    status, payload = process_upload(None, None)
    assert status == 400


def test_corrupt_pdf_never_reaches_structuring():
    spy = SpyStructurer()
    status, payload = process_upload(b"not a pdf", "application/pdf", Settings(), structurer=spy)
    assert status == 500
    assert payload == {"error": "Error processing PDF file"}
    assert spy.calls == 0


def test_process_report_raises_parse_error():
    try:
        process_report(b"not a pdf", Settings())
    except DocumentParseError:
        pass
    else:
        raise AssertionError("expected DocumentParseError")


def test_structuring_failure_is_generic(make_pdf):
    def broken_resolver(header_line):
        raise RuntimeError("secret detail")

    structurer = MedicalTextStructurer(column_resolver=broken_resolver)
    data = make_pdf(["Investigation Value Unit Ref\nGlucose 95 mg/dL 70-110"])
    status, payload = process_upload(
        data, "application/pdf", Settings(keep_line_breaks=True), structurer=structurer
    )
    assert status == 500
    assert "secret" not in json.dumps(payload)


def test_debug_dumps(tmp_path, report_pdf):
    settings = Settings(debug_dump_dir=str(tmp_path / "dumps"))
    process_report(report_pdf, settings)
    names = sorted(p.name.split("_")[0] for p in (tmp_path / "dumps").iterdir())
    assert names == ["initialPdfData", "structuredData"]


def test_dump_failure_is_not_fatal(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory")
    assert dump_debug(str(blocker), "structuredData", {"a": 1}) is None
    assert dump_debug(None, "structuredData", {"a": 1}) is None
