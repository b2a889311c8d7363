# Alert partitioning - scored batch -> alert lists -> assessment results
from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Sequence

from models import AlertLists, ScoredPatient


def generate_alert_lists(patients: Sequence[ScoredPatient]) -> AlertLists:
    """Three order-preserving filters over the same batch. No sorting, no dedup."""
    return AlertLists(
        highRisk=[p for p in patients if p.isHighRisk],
        fever=[p for p in patients if p.hasFever],
        dataQuality=[p for p in patients if p.hasDataQualityIssues],
    )


def to_assessment_results(alerts: AlertLists) -> Dict[str, List[str]]:
    """Patient id lists in the shape the assessment endpoint expects"""
    return {
        "high_risk_patients": [p.patient_id for p in alerts.highRisk],
        "fever_patients": [p.patient_id for p in alerts.fever],
        "data_quality_issues": [p.patient_id for p in alerts.dataQuality],
    }


def find_duplicate_ids(patient_ids: Iterable[str]) -> List[str]:
    """patient_ids seen more than once, in first-seen order. Reported, never enforced."""
    counts = Counter(patient_ids)
    return [pid for pid, n in counts.items() if n > 1]
