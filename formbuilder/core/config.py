# formbuilder/core/config.py
import os
import logging

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# .env im Projekt-Root hat Vorrang, sonst die übliche Suche von python-dotenv
dotenv_path = os.path.join(os.path.dirname(__file__), "..", "..", ".env")
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path)
else:
    load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


DATABASE_URL = os.getenv("DATABASE_URL")
if DATABASE_URL is None:
    logger.warning(
        "DATABASE_URL nicht gesetzt! Fallback auf lokale SQLite-DB."
    )
    sqlite_db_path = os.path.join(
        os.path.dirname(__file__), "..", "formbuilder_fallback.db"
    )
    DATABASE_URL = f"sqlite+aiosqlite:///{os.path.abspath(sqlite_db_path)}"

SQL_ECHO = _env_bool("SQL_ECHO", "false")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

FALLBACK_ORIGINS = [
    "http://127.0.0.1:5173",
    "http://localhost:5173",
    "http://localhost:3000",
]
_env_origins = os.getenv("BACKEND_ALLOWED_ORIGINS")
ALLOWED_ORIGINS = (
    [origin.strip() for origin in _env_origins.split(",") if origin.strip()]
    if _env_origins
    else []
) or FALLBACK_ORIGINS

# Öffentliche IDs sind opake, URL-sichere Tokens (mindestens 8 Zeichen)
PUBLIC_ID_LENGTH = max(8, int(os.getenv("PUBLIC_ID_LENGTH", "10")))
PUBLIC_ID_MAX_ATTEMPTS = max(1, int(os.getenv("PUBLIC_ID_MAX_ATTEMPTS", "5")))

AUTOSAVE_DELAY_SECONDS = float(os.getenv("AUTOSAVE_DELAY_SECONDS", "10"))
HISTORY_LIMIT = max(1, int(os.getenv("HISTORY_LIMIT", "50")))

APP_HOST = os.getenv("APP_HOST", "127.0.0.1")
APP_PORT = int(os.getenv("APP_PORT", "8000"))
RELOAD_APP = _env_bool("RELOAD_APP", "true")
