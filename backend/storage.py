# In-memory store - cached patient snapshot, last assessment, submission history
from __future__ import annotations

from typing import Dict, List, Optional

# In-memory store (process lifetime only)
_cached_patients: Optional[Dict] = None
_assessment_results: Optional[Dict[str, List[str]]] = None
_submission_history: List[Dict] = []


def get_cached_patients() -> Optional[Dict]:
    """Last validated patients response, or None before the first fetch."""
    return _cached_patients


def set_cached_patients(data: Dict) -> None:
    global _cached_patients
    _cached_patients = data


def get_assessment_results() -> Optional[Dict[str, List[str]]]:
    return _assessment_results


def set_assessment_results(results: Dict[str, List[str]]) -> None:
    global _assessment_results
    _assessment_results = results


def get_submission_history() -> List[Dict]:
    """All stored submission responses, oldest first."""
    return list(_submission_history)


def add_submission_result(result: Dict) -> None:
    _submission_history.append(result)


def reset_storage():
    """Reset every store (demo reset and tests)."""
    global _cached_patients, _assessment_results, _submission_history
    _cached_patients = None
    _assessment_results = None
    _submission_history = []
