# Risk scoring - per-factor rule tables, aggregate score and alert flags
from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Tuple

from models import CanonicalPatient, RiskScore, ScoredPatient
from normalizer import is_number, parse_int_prefix
from quality import has_data_quality_issues

HIGH_RISK_THRESHOLD = 4
FEVER_THRESHOLD = 99.6

# Ordered rule tables: first match wins. Ranges overlap, so order is the tie-break.
BLOOD_PRESSURE_RULES: List[Tuple[str, Callable[[int, int], bool], int]] = [
    ("Stage 2", lambda sys, dia: sys >= 140 or dia >= 90, 4),
    ("Stage 1", lambda sys, dia: 130 <= sys <= 139 or 80 <= dia <= 89, 3),
    ("Elevated", lambda sys, dia: 120 <= sys <= 129 and dia < 80, 2),
    ("Normal", lambda sys, dia: sys < 120 and dia < 80, 1),
]

TEMPERATURE_RULES: List[Tuple[str, Callable[[float], bool], int]] = [
    ("High Fever", lambda t: t >= 101.0, 2),
    ("Low Fever", lambda t: 99.6 <= t <= 100.9, 1),
    ("Normal", lambda t: t <= 99.5, 0),
]

AGE_RULES: List[Tuple[str, Callable[[float], bool], int]] = [
    ("Over 65", lambda a: a > 65, 2),
    ("40-65", lambda a: 40 <= a <= 65, 1),
    ("Under 40", lambda a: a < 40, 1),
]


def _first_match(rules, *values) -> Optional[Tuple[str, int]]:
    for label, predicate, points in rules:
        if predicate(*values):
            return label, points
    return None


def parse_blood_pressure(blood_pressure: Optional[str]) -> Optional[Tuple[int, int]]:
    """Split "SYS/DIA" into integers, None for missing or malformed readings"""
    if not blood_pressure or blood_pressure in ("N/A", "INVALID") or "INVALID" in blood_pressure:
        return None

    parts = blood_pressure.split("/")
    if len(parts) != 2:
        return None
    if parts[0] == "" or parts[1] == "":
        return None

    systolic = parse_int_prefix(parts[0])
    diastolic = parse_int_prefix(parts[1])
    if systolic is None or diastolic is None:
        return None
    return systolic, diastolic


def blood_pressure_category(blood_pressure: Optional[str]) -> Optional[str]:
    """Category label ("Stage 2", "Normal", ...) or None when unclassifiable"""
    reading = parse_blood_pressure(blood_pressure)
    if reading is None:
        return None
    match = _first_match(BLOOD_PRESSURE_RULES, *reading)
    return match[0] if match else None


def calculate_blood_pressure_risk(blood_pressure: Optional[str]) -> int:
    reading = parse_blood_pressure(blood_pressure)
    if reading is None:
        return 0  # Invalid/missing data
    match = _first_match(BLOOD_PRESSURE_RULES, *reading)
    return match[1] if match else 0  # Fallback for combinations no rule covers


def calculate_temperature_risk(temperature: Optional[float]) -> int:
    if not is_number(temperature):
        return 0
    match = _first_match(TEMPERATURE_RULES, temperature)
    # 100.9 < t < 101.0 and 99.5 < t < 99.6 fall through every rule
    return match[1] if match else 0


def calculate_age_risk(age: Optional[float]) -> int:
    """No zero band for valid ages: every known age scores at least 1."""
    if not is_number(age):
        return 0
    match = _first_match(AGE_RULES, age)
    return match[1] if match else 0


def calculate_risk_score(patient: CanonicalPatient) -> RiskScore:
    return RiskScore(
        bloodPressure=calculate_blood_pressure_risk(patient.blood_pressure),
        temperature=calculate_temperature_risk(patient.temperature),
        age=calculate_age_risk(patient.age),
    )


def is_high_risk(score: RiskScore) -> bool:
    return score.total >= HIGH_RISK_THRESHOLD


def has_fever(patient: CanonicalPatient) -> bool:
    # Compares the reading directly instead of reading temperature risk points.
    # Duplicates the low-fever threshold on purpose: 99.6 is both risk 1 and fever.
    if not is_number(patient.temperature):
        return False
    return patient.temperature >= FEVER_THRESHOLD


def score_patient(patient: CanonicalPatient) -> ScoredPatient:
    """Score one canonical record. Pure: same input, same output."""
    score = calculate_risk_score(patient)
    return ScoredPatient(
        patient=patient,
        riskScore=score,
        hasDataQualityIssues=has_data_quality_issues(patient),
        hasFever=has_fever(patient),
        isHighRisk=is_high_risk(score),
    )


def score_patients(patients: Iterable[CanonicalPatient]) -> List[ScoredPatient]:
    return [score_patient(p) for p in patients]
