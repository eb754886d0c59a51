"""
Module 2: Rule-based structuring
Keyword/regex heuristics that turn page text into patient info and test-result columns
"""
import logging
import re
from dataclasses import fields
from typing import Dict, List, Optional, Sequence

from medreport.errors import StructuringError
from medreport.extraction_rules import (
    BUCKETS,
    DIAGNOSIS_RULE,
    MEDICATION_RULE,
    PATIENT_INFO_TRIGGERS,
    TABLE_COLUMNS,
    extract_fields,
    match_line,
    match_measurements,
)
from medreport.model_context import ProcessingContext
from medreport.models import PatientInfo, StructuredMedicalRecord, TestResults

logger = logging.getLogger("medreport.text_structurer")

_HSPACE = re.compile(r"[^\S\n]+")
_REPEATED_WORD = re.compile(r"\b(\w+)\b(?:\s+\1\b)+")
_NEWLINES = re.compile(r"[\r\n]+")


def normalize_line(line: str) -> str:
    line = _HSPACE.sub(" ", line).strip()
    # PDF column duplication: "Glucose Glucose Glucose" -> "Glucose"
    return _REPEATED_WORD.sub(r"\1", line)


def split_lines(text: str) -> List[str]:
    lines = (normalize_line(l) for l in _NEWLINES.split(text))
    return [l for l in lines if l]


def is_patient_info(line: str) -> bool:
    low = line.lower()
    return any(k in low for k in PATIENT_INFO_TRIGGERS)


def is_table_header(line: str) -> bool:
    low = line.lower()
    return "investigation" in low and ("observed" in low or "value" in low) and "unit" in low


def resolve_columns(header_line: str) -> Dict[str, int]:
    """Map each table column to the token index it occupies in the header.

    Tokens are tested in order; when a column name spans several tokens
    ("Observed Value", "Biological Ref Interval") the last matching token wins.
    """
    columns: Dict[str, int] = {}
    for index, token in enumerate(header_line.split()):
        low = token.lower()
        if "investigation" in low:
            columns["investigation"] = index
        elif "observed" in low or "value" in low:
            columns["observed_value"] = index
        elif "unit" in low:
            columns["unit"] = index
        elif "biological" in low or "ref" in low:
            columns["biological_ref_interval"] = index
    return columns


def column_value(tokens: Sequence[str], index: Optional[int]) -> Optional[str]:
    if index is None or index >= len(tokens):
        return None
    return tokens[index].strip()


# ---------- Page policies ----------

def last_page_wins(record: StructuredMedicalRecord, patient_info: Optional[PatientInfo],
                   test_results: Optional[TestResults]):
    """A later page replaces patient info / test results wholesale."""
    if patient_info is not None:
        record.patient_info = patient_info
    if test_results is not None:
        record.test_results = test_results


def fill_missing(record: StructuredMedicalRecord, patient_info: Optional[PatientInfo],
                 test_results: Optional[TestResults]):
    """Earlier pages keep their values; later pages fill gaps and append rows."""
    if patient_info is not None:
        if record.patient_info is None:
            record.patient_info = patient_info
        else:
            for f in fields(PatientInfo):
                if getattr(record.patient_info, f.name) is None:
                    setattr(record.patient_info, f.name, getattr(patient_info, f.name))
    if test_results is not None:
        if record.test_results is None:
            record.test_results = test_results
        else:
            for f in fields(TestResults):
                getattr(record.test_results, f.name).extend(getattr(test_results, f.name))


PAGE_POLICIES = {
    "last_page_wins": last_page_wins,
    "fill_missing": fill_missing,
}


class MedicalTextStructurer:
    def __init__(self, page_policy: str = "last_page_wins", column_resolver=resolve_columns,
                 enable_model: bool = False):
        if page_policy not in PAGE_POLICIES:
            raise ValueError(f"Unknown page policy: {page_policy}")
        self.page_policy = PAGE_POLICIES[page_policy]
        self.column_resolver = column_resolver
        self.enable_model = enable_model

    @classmethod
    def from_settings(cls, settings):
        return cls(page_policy=settings.page_policy, enable_model=settings.enable_model)

    def classify(self, page_text: str) -> Dict[str, list]:
        """Bucket a page's lines; "measurement" holds (label, value) pairs."""
        sections: Dict[str, list] = {k: [] for k in BUCKETS}
        columns: Dict[str, int] = {}

        for line in split_lines(page_text):
            if is_patient_info(line):
                sections["patient_info"].append(line)

            if is_table_header(line):
                columns = self.column_resolver(line)
                continue

            if columns:
                tokens = line.split()
                if len(tokens) >= 3:
                    for name, index in columns.items():
                        value = column_value(tokens, index)
                        if value:
                            sections[name].append(value)

            sections["measurement"].extend(match_measurements(line))
            sections["diagnosis"].extend(match_line(DIAGNOSIS_RULE, line))
            sections["medication"].extend(match_line(MEDICATION_RULE, line))

        return sections

    def structure(self, pages: Sequence[str],
                  context: Optional[ProcessingContext] = None) -> StructuredMedicalRecord:
        owns_context = context is None
        ctx = context if context is not None else ProcessingContext(enable_model=self.enable_model)
        try:
            ctx.ensure_model()
            record = StructuredMedicalRecord()
            for i, page_text in enumerate(pages):
                logger.debug("Structuring page %d (%d chars)", i + 1, len(page_text))
                self._apply_page(record, self.classify(page_text))
        except Exception as e:
            ctx.release()
            raise StructuringError(f"Structuring failed: {e}") from e

        if owns_context:
            ctx.release()
        logger.info("Structured %d page(s): patient_info=%s, test_rows=%d",
                    len(pages), record.patient_info is not None,
                    len(record.test_results.investigation) if record.test_results else 0)
        return record

    def _apply_page(self, record: StructuredMedicalRecord, sections: Dict[str, list]):
        patient_info = None
        if sections["patient_info"]:
            patient_info = PatientInfo(**extract_fields("\n".join(sections["patient_info"])))

        test_results = None
        if sections["investigation"]:
            test_results = TestResults(**{c: sections[c] for c in TABLE_COLUMNS})

        self.page_policy(record, patient_info, test_results)

        record.measurements.update(sections["measurement"])
        record.diagnosis.extend(sections["diagnosis"])
        record.medications.extend(sections["medication"])
