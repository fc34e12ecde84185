"""
config.py
---------
Central configuration for the trip planner backend.
All secrets loaded from environment variables — never hard-coded.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the backend directory (if it exists) so env vars in that file
# are picked up by os.getenv() below.
_env_path = Path(__file__).parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path, override=True)


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


# ── LLM ──────────────────────────────────────────────────────────────────────
GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
LLM_MODEL_NAME: str = os.getenv("LLM_MODEL_NAME", "gemini-1.5-pro")
LLM_TIMEOUT_SECONDS: int = int(os.getenv("LLM_TIMEOUT_SECONDS", "60"))
LLM_TEMPERATURE: float = float(os.getenv("LLM_TEMPERATURE", "0.7"))

# Offline mode: the stub generator answers every prompt with a canned plan.
USE_STUB_LLM: bool = _flag("USE_STUB_LLM", "false")

# ── Money ────────────────────────────────────────────────────────────────────
# Costs are whole units of this currency unless the request names another.
DEFAULT_CURRENCY: str = os.getenv("DEFAULT_CURRENCY", "INR")

# ── Backends ─────────────────────────────────────────────────────────────────
STORE_BACKEND: str = os.getenv("STORE_BACKEND", "postgres")      # "postgres" | "in_memory"
SESSION_BACKEND: str = os.getenv("SESSION_BACKEND", "redis")     # "redis" | "in_memory"

# ── PostgreSQL ────────────────────────────────────────────────────────────────
# Schema defined in db/schema.sql
# Apply with: python scripts/run_migrations.py
POSTGRES_HOST: str     = os.getenv("POSTGRES_HOST",     "localhost")
POSTGRES_PORT: int     = int(os.getenv("POSTGRES_PORT", "5432"))
POSTGRES_DB: str       = os.getenv("POSTGRES_DB",       "tripplanner")
POSTGRES_USER: str     = os.getenv("POSTGRES_USER",     "tripplanner_user")
POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "tripplanner_pass")
POSTGRES_MIN_CONN: int = int(os.getenv("POSTGRES_MIN_CONN", "1"))
POSTGRES_MAX_CONN: int = int(os.getenv("POSTGRES_MAX_CONN", "10"))

# ── Redis ─────────────────────────────────────────────────────────────────────
REDIS_HOST: str        = os.getenv("REDIS_HOST",     "localhost")
REDIS_PORT: int        = int(os.getenv("REDIS_PORT", "6379"))
REDIS_DB: int          = int(os.getenv("REDIS_DB",   "0"))
REDIS_PASSWORD: str    = os.getenv("REDIS_PASSWORD", "")
# TTLs (seconds)
SESSION_TTL: int            = int(os.getenv("SESSION_TTL", "2592000"))           # 30 days
PREFERENCES_CACHE_TTL: int  = int(os.getenv("PREFERENCES_CACHE_TTL", "86400"))   # 24 hours

# ── Auth ──────────────────────────────────────────────────────────────────────
PASSWORD_HASH_ITERATIONS: int = int(os.getenv("PASSWORD_HASH_ITERATIONS", "260000"))

# ── Observability ─────────────────────────────────────────────────────────────
# When set, every generation request appends prompt / raw response / outcome
# records to <AUDIT_LOG_DIR>/<request_id>.jsonl
AUDIT_LOG_DIR: str = os.getenv("AUDIT_LOG_DIR", "")
LOG_LEVEL: str     = os.getenv("LOG_LEVEL", "INFO")
