import os
from pathlib import Path

from app.core.env import SERVICE_ROOT, load_env

load_env()

DEFAULT_DB_PATH = SERVICE_ROOT / "app" / "db" / "cpap_data.db"

CPAP_STORE_BACKEND = os.getenv("CPAP_STORE_BACKEND", "sqlite").lower().strip()
CPAP_DB_PATH = Path(os.getenv("CPAP_DB_PATH", str(DEFAULT_DB_PATH)))
CPAP_ENTRIES_KEY = os.getenv("CPAP_ENTRIES_KEY", "cpap_entries")
CPAP_LOG_LEVEL = os.getenv("CPAP_LOG_LEVEL", "INFO").upper()
