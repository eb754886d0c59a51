"""
Extraction rules as data
Each patient field is a label / value / terminator triple; one routine applies them all
"""
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Tuple

BUCKETS = (
    "patient_info",
    "investigation",
    "observed_value",
    "unit",
    "biological_ref_interval",
    "measurement",
    "diagnosis",
    "medication",
)

TABLE_COLUMNS = ("investigation", "observed_value", "unit", "biological_ref_interval")

PATIENT_INFO_TRIGGERS = (
    "order id", "name", "collected on", "gender", "age", "sample", "ref. by",
)

VALUE_SEPARATOR = r"\s*[.:]\s*"
UNTIL_COMMA_OR_NEWLINE = r"[,\n]|$"


@dataclass(frozen=True)
class FieldRule:
    field: str
    label: str
    terminator: str = UNTIL_COMMA_OR_NEWLINE
    separator: str = VALUE_SEPARATOR
    value: str = r"[^,\n]+?"

    @property
    def pattern(self) -> Pattern:
        return _compile(
            f"(?:{self.label}){self.separator}(?P<value>{self.value})(?={self.terminator})"
        )

    def apply(self, text: str) -> Dict[str, str]:
        m = self.pattern.search(text)
        if not m:
            return {}
        return {self.field: m.group("value").strip()}


@dataclass(frozen=True)
class JointFieldRule:
    """One regex filling several fields from named groups."""
    fields: Tuple[str, ...]
    regex: str

    @property
    def pattern(self) -> Pattern:
        return _compile(self.regex)

    def apply(self, text: str) -> Dict[str, str]:
        m = self.pattern.search(text)
        if not m:
            return {}
        return {f: (m.group(f) or "").strip() for f in self.fields}


_PATTERN_CACHE: Dict[str, Pattern] = {}


def _compile(regex: str) -> Pattern:
    if regex not in _PATTERN_CACHE:
        _PATTERN_CACHE[regex] = re.compile(regex, re.I)
    return _PATTERN_CACHE[regex]


NAME_BOUNDARY = r"\s*,|\n|$|\s+(?:Collected|Gender|Age|Sample|Ref)\b"
AGE_SUFFIX = r"(?:\s*(?:Years?|Yrs?)\b\.?)?"

# Order matters: the first rule yielding a non-empty value for a field wins.
PATIENT_FIELD_RULES = [
    FieldRule("order_id", r"Order\s*ID"),
    FieldRule("name", r"\bName", terminator=NAME_BOUNDARY, separator=r"\s*[.:]?\s*"),
    FieldRule("date", r"Collected\s*On"),
    JointFieldRule(
        ("age", "gender"),
        r"Gender\s*/?\s*Age\s*[.:]?\s*(?P<age>\d+)(?!\d)" + AGE_SUFFIX + r"\s*[/,]?\s*(?P<gender>[A-Za-z]+)",
    ),
    JointFieldRule(
        ("age", "gender"),
        r"Age\s*/\s*(?:Gender|Sex)\s*[.:]?\s*(?P<age>\d+)(?!\d)" + AGE_SUFFIX + r"\s*[/,]?\s*(?P<gender>[A-Za-z]+)",
    ),
    FieldRule("age", r"\bAge", value=r"\d{1,3}", terminator=r"\D|$"),
    FieldRule("gender", r"\b(?:Gender|Sex)", value=r"[A-Za-z]+", terminator=r"\W|$"),
    FieldRule("sample", r"\bSample(?:\s*Type)?"),
    FieldRule("referred_by", r"Ref\.?\s*By"),
]

FIELD_NORMALIZERS = {
    "gender": str.capitalize,
}


def extract_fields(text: str, rules=None) -> Dict[str, str]:
    """Apply every rule to text; return field -> value for the fields found."""
    found: Dict[str, str] = {}
    for rule in PATIENT_FIELD_RULES if rules is None else rules:
        for name, value in rule.apply(text).items():
            if value and name not in found:
                normalize = FIELD_NORMALIZERS.get(name)
                found[name] = normalize(value) if normalize else value
    return found


# ---------- Free-form lines ----------

@dataclass(frozen=True)
class LineRule:
    label: str
    regex: str
    split: Optional[str] = None

    @property
    def pattern(self) -> Pattern:
        return _compile(self.regex)


MEASUREMENT_UNITS = r"mm\s*Hg|bpm|breaths/min|/min|kg/m2|kg|lbs?|cm|°\s*[CF]|[CF]|%"
MEASUREMENT_VALUE = (
    r"(?P<value>\d+(?:\.\d+)?(?:\s*/\s*\d+(?:\.\d+)?)?"
    r"(?:\s*(?:" + MEASUREMENT_UNITS + r")(?![A-Za-z]))?)"
)

MEASUREMENT_RULES = [
    LineRule("Blood Pressure", r"(?:Blood\s*Pressure|\bBP\b)\s*[:=.-]?\s*" + MEASUREMENT_VALUE),
    LineRule("Pulse", r"\b(?:Pulse(?:\s*Rate)?|Heart\s*Rate|HR)\b\s*[:=.-]?\s*" + MEASUREMENT_VALUE),
    LineRule("Temperature", r"\b(?:Temperature|Temp)\b\.?\s*[:=.-]?\s*" + MEASUREMENT_VALUE),
    LineRule("Weight", r"\bWeight\b\s*[:=.-]?\s*" + MEASUREMENT_VALUE),
    LineRule("Height", r"\bHeight\b\s*[:=.-]?\s*" + MEASUREMENT_VALUE),
    LineRule("BMI", r"\bBMI\b\s*[:=.-]?\s*" + MEASUREMENT_VALUE),
    LineRule("SpO2", r"\bSp\s*O2\b\s*[:=.-]?\s*" + MEASUREMENT_VALUE),
    LineRule("Respiratory Rate", r"\b(?:Respiratory\s*Rate|RR)\b\s*[:=.-]?\s*" + MEASUREMENT_VALUE),
]

DIAGNOSIS_RULE = LineRule(
    "diagnosis",
    r"^(?:(?:Provisional|Final|Clinical)\s+)?(?:Diagnosis|Impression)\s*[:.-]\s*(?P<value>.+)$",
)
MEDICATION_RULE = LineRule(
    "medication",
    r"^(?:Medications?|Rx|Prescribed(?:\s+Medications?)?)\s*[:.-]\s*(?P<value>.+)$",
    split=r"\s*;\s*|\s*,(?!\d)\s*",
)


def match_measurements(line: str) -> List[Tuple[str, str]]:
    out = []
    for rule in MEASUREMENT_RULES:
        m = rule.pattern.search(line)
        if m:
            out.append((rule.label, re.sub(r"\s+", " ", m.group("value")).strip()))
    return out


def match_line(rule: LineRule, line: str) -> List[str]:
    m = rule.pattern.search(line)
    if not m:
        return []
    value = m.group("value").strip()
    if rule.split:
        return [v for v in re.split(rule.split, value) if v]
    return [value] if value else []
