"""
Module 5: Structured record
Dataclasses for the extracted report and their JSON shape
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class PatientInfo:
    name: Optional[str] = None
    age: Optional[str] = None
    date: Optional[str] = None  # "Collected On" value, as printed
    gender: Optional[str] = None
    order_id: Optional[str] = None
    sample: Optional[str] = None
    referred_by: Optional[str] = None

    def to_dict(self) -> Dict:
        out = {
            "name": self.name,
            "age": self.age,
            "date": self.date,
            "gender": self.gender,
            "orderId": self.order_id,
            "sample": self.sample,
            "referredBy": self.referred_by,
        }
        return {k: v for k, v in out.items() if v is not None}


@dataclass
class TestResults:
    # Columns are filled independently; a row only contributes non-empty cells,
    # so the lists can differ in length.
    investigation: List[str] = field(default_factory=list)
    observed_value: List[str] = field(default_factory=list)
    unit: List[str] = field(default_factory=list)
    biological_ref_interval: List[str] = field(default_factory=list)

    __test__ = False  # not a pytest class

    def to_dict(self) -> Dict:
        return {
            "investigation": list(self.investigation),
            "observedValue": list(self.observed_value),
            "unit": list(self.unit),
            "biologicalRefInterval": list(self.biological_ref_interval),
        }


@dataclass
class StructuredMedicalRecord:
    patient_info: Optional[PatientInfo] = None
    test_results: Optional[TestResults] = None
    measurements: Dict[str, str] = field(default_factory=dict)
    diagnosis: List[str] = field(default_factory=list)
    medications: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        out = {}
        if self.patient_info is not None:
            out["patientInfo"] = self.patient_info.to_dict()
        if self.test_results is not None:
            out["testResults"] = self.test_results.to_dict()
        if self.measurements:
            out["measurements"] = dict(self.measurements)
        if self.diagnosis:
            out["diagnosis"] = list(self.diagnosis)
        if self.medications:
            out["medications"] = list(self.medications)
        return out
