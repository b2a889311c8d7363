# Backend main entry point - patient risk assessment API
import logging
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

import config
import storage
from alerts import find_duplicate_ids, generate_alert_lists
from dashboard import compute_stats, paginate, search_patients
from models import InvalidRecordError, ScoredPatient
from normalizer import normalize_patients
from risk import blood_pressure_category, score_patients
from seed import sample_patients, sample_response, seed_data
from submission import build_assessment_results, submit
from upstream import PatientsResponse, UpstreamClient, UpstreamError

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Patient Risk Assessment API")

# Configure CORS - allow local dev and deployed frontend
_allowed_origins = [
    "http://localhost:5173",
    "http://localhost:5174",
]
if config.FRONTEND_URL:
    _allowed_origins.append(config.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request models
class AssessmentResultsRequest(BaseModel):
    high_risk_patients: List[str]
    fever_patients: List[str]
    data_quality_issues: List[str]


def get_upstream_client() -> Optional[UpstreamClient]:
    """Upstream client from config, or None when no base URL is configured."""
    if not config.API_BASE_URL:
        return None
    return UpstreamClient(
        config.API_BASE_URL,
        api_key=config.API_KEY,
        retries=config.FETCH_RETRIES,
        timeout=config.REQUEST_TIMEOUT,
    )


def _upstream_failure(action: str, e: Exception) -> HTTPException:
    logger.error(f"Error {action}: {e}")
    return HTTPException(status_code=502, detail={"error": f"Failed to {action}", "message": str(e)})


def _fetch_and_cache(client: Optional[UpstreamClient], page: int, limit: int) -> Dict:
    """One page from upstream (or the sample batch in demo mode), validated and cached."""
    if config.is_demo_mode():
        data = PatientsResponse.model_validate(sample_response(page, limit)).model_dump()
    else:
        if client is None:
            raise UpstreamError("API_BASE_URL is not configured")
        data = client.fetch_patients(page=page, limit=limit).model_dump()

    storage.set_cached_patients(data)
    return data


def _fetch_all_and_cache(client: Optional[UpstreamClient]) -> Dict:
    """Every upstream page flattened into one cached batch (the whole sample batch in demo mode)."""
    if config.is_demo_mode():
        data = PatientsResponse.model_validate(sample_response(1, len(sample_patients()))).model_dump()
    else:
        if client is None:
            raise UpstreamError("API_BASE_URL is not configured")
        data = client.fetch_all_patients(limit=config.ALL_PATIENTS_LIMIT, max_pages=config.MAX_FETCH_PAGES).model_dump()

    storage.set_cached_patients(data)
    return data


def _patient_row(patient: ScoredPatient) -> Dict:
    row = patient.to_dict()
    row["bloodPressureCategory"] = blood_pressure_category(patient.patient.blood_pressure)
    return row


@app.get("/")
def read_root():
    return {"message": "Patient Risk Assessment API"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}


@app.get("/api/patients")
def get_patients(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    client: Optional[UpstreamClient] = Depends(get_upstream_client),
):
    """Fetch one page of raw patients and cache it"""
    try:
        return _fetch_and_cache(client, page, limit)
    except UpstreamError as e:
        raise _upstream_failure("fetch patients", e)


@app.get("/api/patients/all")
def get_all_patients(client: Optional[UpstreamClient] = Depends(get_upstream_client)):
    """Fetch every page of patients as one batch for assessment and cache it"""
    try:
        data = _fetch_all_and_cache(client)
    except UpstreamError as e:
        raise _upstream_failure("fetch patients", e)
    logger.info(f"Successfully validated {len(data['data'])} patients")
    return data


@app.get("/api/cached-patients")
def get_cached_patients():
    cached = storage.get_cached_patients()
    if cached is None:
        raise HTTPException(status_code=404, detail="No cached data found")
    return cached


@app.get("/api/risk-assessment")
def get_risk_assessment(
    search: str = "",
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    client: Optional[UpstreamClient] = Depends(get_upstream_client),
):
    """
    Normalize and score the cached batch (fetching it first if needed).
    Alerts, stats and assessment results cover the whole batch;
    search and pagination only narrow the patients listing.
    """
    cached = storage.get_cached_patients()
    if cached is None:
        try:
            cached = _fetch_all_and_cache(client)
        except UpstreamError as e:
            raise _upstream_failure("fetch patients", e)

    try:
        canonical = normalize_patients(cached["data"])
    except InvalidRecordError as e:
        logger.error(f"Upstream batch contains an out-of-schema record: {e}")
        raise HTTPException(status_code=500, detail={"error": "Failed to score patients", "message": str(e)})

    duplicates = find_duplicate_ids(p.patient_id for p in canonical)
    if duplicates:
        logger.warning(f"Duplicate patient_ids in batch: {duplicates}")

    scored = score_patients(canonical)
    alerts = generate_alert_lists(scored)
    listing = paginate(search_patients(scored, search), page, page_size)
    listing["items"] = [_patient_row(p) for p in listing["items"]]

    return {
        "patients": listing,
        "alerts": alerts.to_dict(),
        "stats": compute_stats(scored, alerts),
        "assessment": build_assessment_results(alerts),
        "duplicatePatientIds": duplicates,
    }


@app.post("/api/submit-assessment")
def submit_assessment(
    results: AssessmentResultsRequest,
    client: Optional[UpstreamClient] = Depends(get_upstream_client),
):
    """Submit alert id lists; falls back to a local assessment when upstream is unavailable"""
    if config.is_demo_mode():
        client = None
    return submit(results.model_dump(), client)


@app.get("/api/submission-history")
def get_submission_history():
    return storage.get_submission_history()


@app.get("/demo/status")
def demo_status():
    """Returns whether demo mode is enabled."""
    return {"demoMode": config.is_demo_mode()}


@app.post("/demo/reset")
def demo_reset():
    """
    Reset to the sample batch. Only available when DEMO_MODE=true.
    Clears cached patients, assessment results and submission history.
    """
    if not config.is_demo_mode():
        raise HTTPException(status_code=404, detail="Demo reset not available")
    seed_data()
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
