# Runtime configuration - read from environment (.env supported)
import os
from dotenv import load_dotenv

load_dotenv()  # Load .env so API_BASE_URL / API_KEY work for local runs

# --- Upstream clinical data API ---
API_BASE_URL = os.environ.get("API_BASE_URL", "")
API_KEY = os.environ.get("API_KEY", "")
FETCH_RETRIES = int(os.environ.get("FETCH_RETRIES", "3"))
REQUEST_TIMEOUT = float(os.environ.get("REQUEST_TIMEOUT", "30"))

# "Fetch all" walks upstream pages of this size, up to MAX_FETCH_PAGES
ALL_PATIENTS_LIMIT = 20
MAX_FETCH_PAGES = int(os.environ.get("MAX_FETCH_PAGES", "50"))

# --- Server ---
FRONTEND_URL = os.environ.get("FRONTEND_URL", "")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()


def is_demo_mode() -> bool:
    """True only when DEMO_MODE env var is explicitly 'true' (case-insensitive)."""
    return os.environ.get("DEMO_MODE", "").lower() == "true"
