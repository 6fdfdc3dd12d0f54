"""news-syncer configuration."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).parent / ".env")

# --- Paths ---
BASE_DIR = Path(__file__).parent
DATA_DIR = BASE_DIR / "data"
DB_PATH = DATA_DIR / "news_syncer.db"

# --- Database ---
# Any SQLAlchemy URL; defaults to a local SQLite file
DATABASE_URL: str = os.getenv("DATABASE_URL", f"sqlite:///{DB_PATH}")

# --- API ---
API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "8001"))

# --- Logging ---
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "info")

# --- Publisher: Redis Streams ---
# Empty URL disables publishing
REDIS_URL: str = os.getenv("REDIS_URL", "")
REDIS_STREAM: str = os.getenv("REDIS_STREAM", "cms_articles")
REDIS_CONSUMER_GROUP: str = os.getenv("REDIS_CONSUMER_GROUP", "cms")
REDIS_MAX_STREAM_LENGTH: int = int(os.getenv("REDIS_MAX_STREAM_LENGTH", "50000"))

# --- Collector: ECB ---
ECB_API_BASE: str = os.getenv(
    "ECB_API_BASE",
    "https://content-ecb.pulselive.com/content/ecb/text/EN/",
)
ECB_PAGE_SIZE: int = int(os.getenv("ECB_PAGE_SIZE", "20"))
ECB_REQUEST_TIMEOUT: float = float(os.getenv("ECB_REQUEST_TIMEOUT", "30"))
ECB_RETRY_ATTEMPTS: int = int(os.getenv("ECB_RETRY_ATTEMPTS", "3"))
ECB_RETRY_INITIAL_BACKOFF: float = float(os.getenv("ECB_RETRY_INITIAL_BACKOFF", "1"))
ECB_RETRY_MAX_BACKOFF: float = float(os.getenv("ECB_RETRY_MAX_BACKOFF", "30"))

# --- Sync ---
SYNC_INTERVAL: float = float(os.getenv("SYNC_INTERVAL", "300"))  # seconds
SYNC_TIMEOUT: float = float(os.getenv("SYNC_TIMEOUT", "300"))  # seconds
SYNC_MAX_PAGES: int = int(os.getenv("SYNC_MAX_PAGES", "5"))
SYNC_MAX_HISTORICAL_DAYS: int = int(os.getenv("SYNC_MAX_HISTORICAL_DAYS", "30"))
