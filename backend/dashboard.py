# Dashboard views - stats, search and pagination over a scored batch
from __future__ import annotations

import math
from typing import Dict, List, Sequence

from models import AlertLists, ScoredPatient

MAX_PAGE_SIZE = 100


def compute_stats(patients: Sequence[ScoredPatient], alerts: AlertLists) -> Dict[str, int]:
    """Headline counts shown above the alert panels"""
    return {
        "totalPatients": len(patients),
        "highRiskCount": len(alerts.highRisk),
        "feverCount": len(alerts.fever),
        "dataIssueCount": len(alerts.dataQuality),
    }


def search_patients(patients: Sequence[ScoredPatient], term: str) -> List[ScoredPatient]:
    """Case-insensitive substring match on patient_id or name. Empty term matches all."""
    needle = (term or "").lower()
    if not needle:
        return list(patients)
    return [
        p for p in patients
        if needle in p.patient_id.lower() or needle in str(p.patient.name).lower()
    ]


def paginate(patients: Sequence[ScoredPatient], page: int = 1, page_size: int = 10) -> Dict:
    """
    Slice one 1-based page out of the list.
    page_size is clamped to 1-100; page past the end returns an empty slice.
    """
    page_size = max(1, min(MAX_PAGE_SIZE, page_size))
    page = max(1, page)
    total = len(patients)
    total_pages = math.ceil(total / page_size) if total else 0

    start = (page - 1) * page_size
    items = list(patients[start:start + page_size])

    return {
        "items": items,
        "page": page,
        "limit": page_size,
        "total": total,
        "totalPages": total_pages,
        "hasNext": page < total_pages,
        "hasPrevious": page > 1,
    }
