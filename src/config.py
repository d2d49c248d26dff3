"""
Content Catalog API - Configuration
All settings loaded from environment variables with sensible defaults.

The service keeps its records in a single SQLite file.  Point ``DB_PATH``
at a persistent volume in production; the default lives in the system temp
directory so a fresh checkout runs without any setup.
"""

import os
import tempfile
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
_ = load_dotenv()

# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------
APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
APP_PORT = int(os.getenv("APP_PORT", "8000"))
APP_ENV = os.getenv("APP_ENV", "development")
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
DEBUG = os.getenv("DEBUG", "true").lower() == "true"

# All JSON endpoints are mounted under this prefix
API_PREFIX = os.getenv("API_PREFIX", "/api/v1").rstrip("/")

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = BASE_DIR.parent

DATA_DIR = Path(
    os.getenv("DATA_DIR", os.path.join(tempfile.gettempdir(), "content_api"))
)

# SQLite database file (the store's "connection string")
DB_PATH = Path(os.getenv("DB_PATH", os.path.join(DATA_DIR, "content.db")))

# ---------------------------------------------------------------------------
# Logging (stdout only)
# ---------------------------------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")


def ensure_directories() -> None:
    """Create the directory holding the SQLite database file."""
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
