import json
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./bms_maintenance.db")

# Redis (advisory locks + arq worker)
REDIS_URL = os.getenv("REDIS_URL")
REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD")
REDIS_DB = int(os.getenv("REDIS_DB", "0"))
REDIS_SSL = os.getenv("REDIS_SSL", "false").lower() == "true"

# Maintenance scheduling
# Tasks whose due date falls within this many days are labelled "due"
MAINTENANCE_DUE_SOON_DAYS = int(os.getenv("MAINTENANCE_DUE_SOON_DAYS", "7"))
# Per-organization run lock; must outlive the slowest expected run
MAINTENANCE_LOCK_TTL_SECONDS = int(os.getenv("MAINTENANCE_LOCK_TTL_SECONDS", "900"))
MAINTENANCE_CRON_HOUR = int(os.getenv("MAINTENANCE_CRON_HOUR", "1"))
MAINTENANCE_CRON_MINUTE = int(os.getenv("MAINTENANCE_CRON_MINUTE", "0"))

# Asset type -> work order category. Coarse placeholder taxonomy, override with
# MAINTENANCE_ASSET_CATEGORY_MAP='{"vehicle": "other", "furniture": "other"}'
DEFAULT_ASSET_CATEGORY_MAP = {
    "equipment": "hvac",
    "appliance": "hvac",
    "infrastructure": "plumbing",
    "vehicle": "other",
}
ASSET_CATEGORY_MAP = dict(DEFAULT_ASSET_CATEGORY_MAP)
_category_override = os.getenv("MAINTENANCE_ASSET_CATEGORY_MAP")
if _category_override:
    ASSET_CATEGORY_MAP.update(json.loads(_category_override))

# Worker
ARQ_MAX_JOBS = int(os.getenv("ARQ_MAX_JOBS", "10"))
ARQ_JOB_TIMEOUT = int(os.getenv("ARQ_JOB_TIMEOUT", "600"))
ARQ_KEEP_RESULT = int(os.getenv("ARQ_KEEP_RESULT", "3600"))

# Frontend/API origins allowed by CORS
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
