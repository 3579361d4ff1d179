# Shared configuration, helpers, and constants for the issue desk

import os
import uuid
from pathlib import Path
from datetime import datetime, timezone
from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------
# Try .env next to the package, then the repo root, then cwd
_package_dir = Path(__file__).resolve().parent
for _env_path in [_package_dir / ".env", _package_dir.parent / ".env", Path.cwd() / ".env"]:
    if _env_path.is_file():
        load_dotenv(_env_path, override=True)
        break
else:
    load_dotenv(override=True)

# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------
def default_data_file() -> Path:
    """data/cleancity.json under the working directory."""
    return Path.cwd() / "data" / "cleancity.json"

STORE_BACKEND  = os.getenv("CLEANCITY_STORE", "json")
DATA_FILE      = os.getenv("CLEANCITY_DATA_FILE", str(default_data_file()))
MONGODB_URL    = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
MONGODB_DB     = os.getenv("MONGODB_DB", "cleancity")
SEED_DEFAULT_WORKERS = os.getenv("SEED_DEFAULT_WORKERS", "true").lower() in ("1", "true", "yes")

# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------
HOST              = os.getenv("HOST", "0.0.0.0")
PORT              = int(os.getenv("PORT", "8000"))
SUBMIT_RATE_LIMIT = os.getenv("SUBMIT_RATE_LIMIT", "10/minute")
CORS_ORIGINS      = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# ---------------------------------------------------------------------------
# SLA: every issue is due 24h after creation
# ---------------------------------------------------------------------------
SLA_WINDOW_MS = 24 * 60 * 60 * 1000
HOUR_MS       = 60 * 60 * 1000

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def new_id() -> str:
    return str(uuid.uuid4())

def now_ms() -> int:
    """Current UTC time as epoch milliseconds."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)
