"""
Configuration helpers for the StreamVerse backend.

Settings are read from environment variables once and cached so that
routers/services/repositories do not fetch os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os

DEFAULT_SITES_KEY = "streamverse:sites"
DEFAULT_LOCAL_SLOT = "streamverse-sites"


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    public_base_url: str
    database_url: str
    kv_rest_api_url: str
    kv_rest_api_token: str
    sites_key: str
    sites_data_file: str
    storage_backend: str
    local_storage_path: str
    local_storage_slot: str
    sites_api_url: str
    http_timeout_seconds: float
    log_level: str

    @property
    def kv_rest_configured(self) -> bool:
        return bool(self.kv_rest_api_url and self.kv_rest_api_token)


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _float(value: str, default: float = 0.0) -> float:
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    home = os.path.expanduser("~")
    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        public_base_url=os.getenv("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/"),
        database_url=os.getenv("DATABASE_URL", ""),
        kv_rest_api_url=os.getenv("KV_REST_API_URL", "").rstrip("/"),
        kv_rest_api_token=os.getenv("KV_REST_API_TOKEN", ""),
        sites_key=os.getenv("SITES_KEY", DEFAULT_SITES_KEY),
        sites_data_file=os.getenv("SITES_DATA_FILE", os.path.join(os.getcwd(), "data", "sites.json")),
        storage_backend=(os.getenv("STORAGE_BACKEND") or "").strip().lower(),
        local_storage_path=os.getenv(
            "LOCAL_STORAGE_PATH", os.path.join(home, ".streamverse", "local_storage.json")
        ),
        local_storage_slot=os.getenv("LOCAL_STORAGE_SLOT", DEFAULT_LOCAL_SLOT),
        sites_api_url=os.getenv("SITES_API_URL", "http://localhost:8000").rstrip("/"),
        http_timeout_seconds=_float(os.getenv("HTTP_TIMEOUT_SECONDS", "5"), 5.0),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
