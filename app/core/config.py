import os
from dotenv import load_dotenv

load_dotenv()  # loads .env into the environment


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./household.db")
SQL_ECHO = _flag("SQL_ECHO", "false")
DB_ISOLATION_LEVEL = os.getenv("DB_ISOLATION_LEVEL", "SERIALIZABLE")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE") or None

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:8081").split(",")
    if origin.strip()
]

# recurring templates
RECURRENCE_JOB_ENABLED = _flag("RECURRENCE_JOB_ENABLED", "true")
RECURRENCE_SWEEP_INTERVAL_SECONDS = int(os.getenv("RECURRENCE_SWEEP_INTERVAL_SECONDS", "3600"))
SWEEP_ON_READ = _flag("SWEEP_ON_READ", "true")

STORE_RETRY_ATTEMPTS = int(os.getenv("STORE_RETRY_ATTEMPTS", "3"))
