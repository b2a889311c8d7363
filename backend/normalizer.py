# Normalization - raw upstream patient records -> CanonicalPatient
"""
The upstream API is inconsistent: ages arrive as numbers or strings, blood
pressure may be garbage, temperatures may carry sentinel tokens such as
"TEMP_ERROR". Every field defaults on its own; a bad value never fails the
whole record.
"""
from __future__ import annotations

import math
import re
from typing import Any, Iterable, List, Mapping, Optional

from models import UNKNOWN, CanonicalPatient, InvalidRecordError

# Leading decimal literal, parsed the way the upstream's own clients do ("98.6F" -> 98.6)
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")

TEMPERATURE_ERROR_TOKENS = ("error", "invalid", "n/a")
TEXT_FIELDS = ("gender", "visit_date", "diagnosis", "medications")


def is_number(value: Any) -> bool:
    """Real numeric value (bool excluded, NaN excluded)"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if isinstance(value, int):
        return True  # ints are never NaN; they may still be too large for a float
    return not math.isnan(value)


def to_float(value: Any) -> float:
    """float(value), with ints too large for a float mapped to +/-inf like JSON.parse does"""
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


def as_text(value: Any) -> str:
    """str(value); ints past the interpreter's digit limit fall back to their float text"""
    try:
        return str(value)
    except ValueError:
        if isinstance(value, int):
            return str(to_float(value))
        raise


def parse_float_prefix(text: str) -> Optional[float]:
    """Parse the leading decimal literal of text, None when there is none"""
    match = _FLOAT_PREFIX.match(text)
    if not match:
        return None
    try:
        value = float(match.group(1))
    except ValueError:
        return None
    return None if math.isnan(value) else value


def parse_int_prefix(text: str) -> Optional[int]:
    """Parse the leading integer of text ("120 mmHg" -> 120), None when there is none"""
    match = _INT_PREFIX.match(text)
    if not match:
        return None
    return int(match.group(1))


def normalize_age(value: Any) -> Optional[float]:
    """Type-level only: out-of-range ages are kept as-is."""
    if value is None or value == "":
        return None
    if is_number(value):
        return to_float(value)
    if isinstance(value, str):
        return parse_float_prefix(value)
    return None


def normalize_blood_pressure(value: Any) -> Optional[str]:
    """Keep the text verbatim; structure is judged later by the scorer."""
    if value is None or value == "":
        return None
    return as_text(value)


def normalize_temperature(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    if is_number(value):
        return to_float(value)
    if isinstance(value, str):
        # Sentinel tokens win over any numeric prefix ("101 ERROR" -> None)
        lowered = value.lower()
        if any(token in lowered for token in TEMPERATURE_ERROR_TOKENS):
            return None
        return parse_float_prefix(value)
    return None


def normalize_text(value: Any) -> str:
    """Absent -> "Unknown", anything else as its text form"""
    return UNKNOWN if value is None else as_text(value)


def normalize_patient(raw: Mapping[str, Any]) -> CanonicalPatient:
    """
    Convert one raw record into a CanonicalPatient.

    Field-level problems never raise. A record that is not an object, or has
    no usable patient_id, is outside the schema and raises InvalidRecordError.
    """
    if not isinstance(raw, Mapping):
        raise InvalidRecordError(f"Patient record must be an object, got {type(raw).__name__}")

    patient_id = raw.get("patient_id")
    if patient_id is None or as_text(patient_id).strip() == "":
        raise InvalidRecordError("Patient record has no patient_id")

    name = raw.get("name")
    texts = {key: normalize_text(raw.get(key)) for key in TEXT_FIELDS}

    return CanonicalPatient(
        patient_id=as_text(patient_id),
        name=UNKNOWN if name is None else as_text(name),
        age=normalize_age(raw.get("age")),
        blood_pressure=normalize_blood_pressure(raw.get("blood_pressure")),
        temperature=normalize_temperature(raw.get("temperature")),
        **texts,
    )


def normalize_patients(raw_records: Iterable[Mapping[str, Any]]) -> List[CanonicalPatient]:
    """Normalize a materialized batch, preserving input order"""
    return [normalize_patient(raw) for raw in raw_records]
