import os

from dotenv import load_dotenv

from catalog.errors import ConfigError

# Values already in the environment win over .env
load_dotenv()


class Config:
    def __init__(self):
        # Upstream catalog
        self.CATALOG_API_URL = os.environ.get("CATALOG_API_URL", "https://dummyjson.com").rstrip("/")
        self.CATALOG_FETCH_LIMIT = int(os.environ.get("CATALOG_FETCH_LIMIT", "1000"))
        self.REQUEST_TIMEOUT = int(os.environ.get("REQUEST_TIMEOUT", "30"))

        # Durable store
        self.STORE_BACKEND = os.environ.get("STORE_BACKEND", "file").lower()
        self.STORE_DIR = os.environ.get("STORE_DIR", ".catalog")
        self.REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
        self.SNAPSHOT_KEY = os.environ.get("SNAPSHOT_KEY", "products")
        self.DISCARD_CORRUPT_SNAPSHOT = os.environ.get("DISCARD_CORRUPT_SNAPSHOT", "true").lower() == "true"

        # Views
        self.SEARCH_DEBOUNCE_MS = int(os.environ.get("SEARCH_DEBOUNCE_MS", "300"))
        self.DEFAULT_PAGE_SIZE = int(os.environ.get("DEFAULT_PAGE_SIZE", "10"))
        self.PAGE_SIZE_OPTIONS = [
            int(size) for size in os.environ.get("PAGE_SIZE_OPTIONS", "10,20,30,40,50").split(",") if size.strip()
        ]

        # Caller-side retry for cache warm-up
        self.MAX_RETRIES = int(os.environ.get("MAX_RETRIES", "3"))
        self.RETRY_BACKOFF = float(os.environ.get("RETRY_BACKOFF", "1.5"))

        # Error tracking
        self.SENTRY_DSN = os.environ.get("SENTRY_DSN", "")
        self.ENVIRONMENT = os.environ.get("ENVIRONMENT", "development")

        # Application settings
        self.DEBUG = os.environ.get("DEBUG", "false").lower() == "true"
        self.LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    @property
    def has_sentry(self) -> bool:
        return bool(self.SENTRY_DSN)

    @property
    def search_debounce_seconds(self) -> float:
        return self.SEARCH_DEBOUNCE_MS / 1000.0

    def validate(self):
        """Reject settings the catalog cannot run with."""
        if self.STORE_BACKEND not in ("file", "redis"):
            raise ConfigError(f"Unknown STORE_BACKEND: {self.STORE_BACKEND!r}")
        if self.CATALOG_FETCH_LIMIT <= 0:
            raise ConfigError("CATALOG_FETCH_LIMIT must be positive")
        if self.DEFAULT_PAGE_SIZE <= 0:
            raise ConfigError("DEFAULT_PAGE_SIZE must be positive")
        if any(size <= 0 for size in self.PAGE_SIZE_OPTIONS):
            raise ConfigError("PAGE_SIZE_OPTIONS must all be positive")
        if self.SEARCH_DEBOUNCE_MS < 0:
            raise ConfigError("SEARCH_DEBOUNCE_MS cannot be negative")
        if not self.SNAPSHOT_KEY:
            raise ConfigError("SNAPSHOT_KEY is required")
        return self


# Create an instance
config = Config()
