# Seed data - sample upstream batch used in demo mode and tests
import logging
from typing import Any, Dict, List

import storage

logger = logging.getLogger(__name__)


def sample_patients() -> List[Dict[str, Any]]:
    """Raw records in upstream shape: clean, garbled and missing fields mixed in."""
    return [
        # Stage 2 BP, high fever, over 65 -> total 8
        {
            "patient_id": "DEMO001",
            "name": "TestPatient, John",
            "age": 70,
            "gender": "M",
            "blood_pressure": "145/95",
            "temperature": "102.3",
            "visit_date": "2024-01-15",
            "diagnosis": "Sepsis",
            "medications": "Vancomycin 1g IV",
        },
        # Nothing usable -> data quality only
        {
            "patient_id": "DEMO002",
            "name": "AssessmentUser, Jane",
            "age": "N/A",
            "gender": "F",
            "blood_pressure": None,
            "temperature": "TEMP_ERROR",
            "visit_date": "2024-01-16",
            "diagnosis": "Hypertension",
            "medications": "Lisinopril 10mg daily",
        },
        # Normal BP, normal temp, under 40 -> total 2
        {
            "patient_id": "DEMO003",
            "name": "Sample, Alex",
            "age": "28",
            "gender": "M",
            "blood_pressure": "110/70",
            "temperature": 98.2,
            "visit_date": "2024-01-17",
            "diagnosis": "Routine checkup",
            "medications": "None",
        },
        # Stage 1 BP, low fever at the threshold, 40-65 -> total 5
        {
            "patient_id": "DEMO004",
            "name": "Example, Maria",
            "age": 52,
            "gender": "F",
            "blood_pressure": "132/78",
            "temperature": 99.6,
            "visit_date": "2024-01-18",
            "diagnosis": "Influenza",
            "medications": "Oseltamivir 75mg",
        },
        # Missing diastolic -> BP issue, still fevered
        {
            "patient_id": "DEMO005",
            "name": "Placeholder, Sam",
            "age": 45,
            "blood_pressure": "150/",
            "temperature": 100.4,
            "visit_date": "2024-01-19",
        },
        # Elevated BP, temp normal, age empty string
        {
            "patient_id": "DEMO006",
            "name": "Mock, Robin",
            "age": "",
            "gender": "F",
            "blood_pressure": "125/70",
            "temperature": "98.9",
            "visit_date": "2024-01-20",
            "diagnosis": "Migraine",
            "medications": "Sumatriptan 50mg",
        },
        # INVALID BP marker, low fever, over 65
        {
            "patient_id": "DEMO007",
            "name": "Fixture, Lee",
            "age": 81,
            "gender": "M",
            "blood_pressure": "INVALID_BP",
            "temperature": "100.1",
            "visit_date": "2024-01-21",
            "diagnosis": "Pneumonia",
            "medications": "Azithromycin 250mg",
        },
        # All clean, high diastolic only
        {
            "patient_id": "DEMO008",
            "name": "Dummy, Chris",
            "age": 38,
            "gender": "F",
            "blood_pressure": "118/92",
            "temperature": 97.9,
            "visit_date": "2024-01-22",
            "diagnosis": "Anxiety",
            "medications": "Sertraline 50mg",
        },
    ]


def sample_response(page: int = 1, limit: int = 20) -> Dict[str, Any]:
    """Wrap sample_patients() in the upstream pagination envelope."""
    records = sample_patients()
    total = len(records)
    total_pages = (total + limit - 1) // limit if limit > 0 else 0
    start = (page - 1) * limit
    return {
        "data": records[start:start + limit],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": total_pages,
            "hasNext": page < total_pages,
            "hasPrevious": page > 1,
        },
        "metadata": {
            "timestamp": "2024-01-22T00:00:00Z",
            "version": "demo",
            "requestId": f"demo-{page}-{limit}",
        },
    }


def seed_data():
    """Reset the in-memory store and cache the sample batch."""
    storage.reset_storage()
    response = sample_response()
    storage.set_cached_patients(response)
    logger.info(f"Seed data initialized: {len(response['data'])} sample patients cached")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    seed_data()
