# Data-quality classification - which vitals could not be used
from __future__ import annotations

from typing import List, Optional

from models import CanonicalPatient
from normalizer import is_number, parse_int_prefix

BLOOD_PRESSURE_ISSUE = "blood_pressure"
TEMPERATURE_ISSUE = "temperature"
AGE_ISSUE = "age"

# NOTE: these checks restate the risk functions' validity rules instead of
# calling them. Keep both in sync when a rule changes. The wording differs on
# one point: a "120/80/70" reading passes here but scores 0 in the risk table.


def blood_pressure_is_invalid(blood_pressure: Optional[str]) -> bool:
    if not blood_pressure or blood_pressure == "N/A" or "INVALID" in blood_pressure:
        return True
    if "/" not in blood_pressure:
        return True
    return any(part == "" or parse_int_prefix(part) is None for part in blood_pressure.split("/"))


def data_quality_reasons(patient: CanonicalPatient) -> List[str]:
    """Which of blood pressure / temperature / age are missing or unusable"""
    reasons = []
    if blood_pressure_is_invalid(patient.blood_pressure):
        reasons.append(BLOOD_PRESSURE_ISSUE)
    if not is_number(patient.temperature):
        reasons.append(TEMPERATURE_ISSUE)
    if not is_number(patient.age):
        reasons.append(AGE_ISSUE)
    return reasons


def has_data_quality_issues(patient: CanonicalPatient) -> bool:
    return bool(data_quality_reasons(patient))
