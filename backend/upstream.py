# Upstream clinical data API client - retries, rate-limit backoff, page flattening
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

import requests
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

SUBMISSION_MESSAGE = "Healthcare Risk Assessment Submission"


class UpstreamError(Exception):
    """Upstream API unreachable, failing, or returning an unexpected payload."""


# Response envelope - records themselves stay raw; the normalizer owns field parsing
class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int
    hasNext: bool
    hasPrevious: bool


class Metadata(BaseModel):
    timestamp: str
    version: str
    requestId: str


class PatientsResponse(BaseModel):
    data: List[Dict[str, Any]]
    pagination: Pagination
    metadata: Metadata


class UpstreamClient:
    """Thin requests wrapper around the upstream API"""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        retries: int = 3,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.headers = {"x-api-key": api_key, "Content-Type": "application/json"}
        self.retries = max(1, retries)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.sleep = sleep

    def request(self, method: str, endpoint: str, json: Optional[Dict] = None) -> requests.Response:
        """
        Send one request with retries.
        429: back off 1s, 2s, ... and retry.
        5xx and network errors: back off 0.5s, 1s, ... and raise on the last attempt.
        Anything else is returned to the caller as-is.
        """
        url = f"{self.base_url}{endpoint}"
        for attempt in range(self.retries):
            last = attempt == self.retries - 1
            try:
                resp = self.session.request(method, url, json=json, headers=self.headers, timeout=self.timeout)
            except requests.exceptions.RequestException as e:
                if last:
                    logger.error(f"Network error on {method} {endpoint}: {e}")
                    raise UpstreamError(f"Network error: {e}") from e
                logger.warning(f"Network error on {method} {endpoint} (attempt {attempt + 1}), retrying: {e}")
                self.sleep(0.5 * (attempt + 1))
                continue

            if resp.status_code == 429:
                logger.warning(f"Rate limited on {method} {endpoint} (attempt {attempt + 1})")
                self.sleep(1.0 * (attempt + 1))
                continue

            if resp.status_code >= 500:
                if last:
                    logger.error(f"Server error on {method} {endpoint}: {resp.status_code}")
                    raise UpstreamError(f"Server error: {resp.status_code}")
                logger.warning(f"Server error {resp.status_code} on {method} {endpoint} (attempt {attempt + 1}), retrying")
                self.sleep(0.5 * (attempt + 1))
                continue

            return resp

        raise UpstreamError("Max retries exceeded")

    def _json_ok(self, resp: requests.Response) -> Any:
        if not resp.ok:
            raise UpstreamError(f"API returned {resp.status_code}: {resp.reason}")
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamError(f"API returned invalid JSON: {e}") from e

    def fetch_patients(self, page: int = 1, limit: int = 10) -> PatientsResponse:
        resp = self.request("GET", f"/patients?page={page}&limit={limit}")
        data = self._json_ok(resp)
        try:
            validated = PatientsResponse.model_validate(data)
        except ValidationError as e:
            raise UpstreamError(f"Unexpected patients response: {e}") from e
        logger.info(f"Fetched {len(validated.data)} patients (page {page}, limit {limit})")
        return validated

    def fetch_all_patients(self, limit: int = 20, max_pages: Optional[int] = None) -> PatientsResponse:
        """
        Follow hasNext across pages and return one flat, materialized batch,
        wrapped as a single page holding every record.
        """
        records: List[Dict[str, Any]] = []
        page = 1
        while True:
            resp = self.fetch_patients(page=page, limit=limit)
            records.extend(resp.data)
            if not resp.pagination.hasNext:
                break
            if max_pages is not None and page >= max_pages:
                logger.warning(f"Stopped after {page} pages; upstream reports more")
                break
            page += 1

        logger.info(f"Fetched {len(records)} patients across {page} page(s)")
        return PatientsResponse(
            data=records,
            pagination=Pagination(
                page=1,
                limit=len(records),
                total=len(records),
                totalPages=1,
                hasNext=False,
                hasPrevious=False,
            ),
            metadata=resp.metadata,
        )

    def submit_assessment(self, results: Dict[str, List[str]]) -> Dict:
        payload = {"message": SUBMISSION_MESSAGE, "results": results}
        resp = self.request("POST", "/submit-assessment", json=payload)
        return self._json_ok(resp)
