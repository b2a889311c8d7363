# Patient data models - canonical, scored and alert-list shapes
from typing import Dict, List, Optional
from dataclasses import dataclass, field

UNKNOWN = "Unknown"


class InvalidRecordError(ValueError):
    """Raised when a raw record is outside the schema entirely (not per-field garbage)."""


@dataclass(frozen=True)
class CanonicalPatient:
    """Patient record after normalization - every field has a defined value or None"""
    patient_id: str
    name: str
    age: Optional[float] = None
    gender: str = UNKNOWN
    blood_pressure: Optional[str] = None  # "SYS/DIA" text, not validated here
    temperature: Optional[float] = None  # Fahrenheit
    visit_date: str = UNKNOWN
    diagnosis: str = UNKNOWN
    medications: str = UNKNOWN

    def to_dict(self) -> Dict:
        return {
            "patient_id": self.patient_id,
            "name": self.name,
            "age": self.age,
            "gender": self.gender,
            "blood_pressure": self.blood_pressure,
            "temperature": self.temperature,
            "visit_date": self.visit_date,
            "diagnosis": self.diagnosis,
            "medications": self.medications,
        }


@dataclass(frozen=True)
class RiskScore:
    """Per-factor risk points. total is derived and cannot be set."""
    bloodPressure: int = 0  # 0-4
    temperature: int = 0  # 0-2
    age: int = 0  # 0-2

    @property
    def total(self) -> int:
        return self.bloodPressure + self.temperature + self.age

    def to_dict(self) -> Dict[str, int]:
        return {
            "bloodPressure": self.bloodPressure,
            "temperature": self.temperature,
            "age": self.age,
            "total": self.total,
        }


@dataclass(frozen=True)
class ScoredPatient:
    """Canonical patient plus its risk score and alert flags"""
    patient: CanonicalPatient
    riskScore: RiskScore
    hasDataQualityIssues: bool
    hasFever: bool
    isHighRisk: bool

    @property
    def patient_id(self) -> str:
        return self.patient.patient_id

    def to_dict(self) -> Dict:
        """Flattened wire shape: patient fields + riskScore + flags"""
        data = self.patient.to_dict()
        data["riskScore"] = self.riskScore.to_dict()
        data["hasDataQualityIssues"] = self.hasDataQualityIssues
        data["hasFever"] = self.hasFever
        data["isHighRisk"] = self.isHighRisk
        return data


@dataclass
class AlertLists:
    """Filter views over one scored batch. Membership, not ownership."""
    highRisk: List[ScoredPatient] = field(default_factory=list)
    fever: List[ScoredPatient] = field(default_factory=list)
    dataQuality: List[ScoredPatient] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[Dict]]:
        return {
            "highRisk": [p.to_dict() for p in self.highRisk],
            "fever": [p.to_dict() for p in self.fever],
            "dataQuality": [p.to_dict() for p in self.dataQuality],
        }
