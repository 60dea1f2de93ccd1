"""Configuration management using pydantic-settings."""
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Backend configuration
    # SQL database (SQLAlchemy URL), e.g. sqlite:///./travel_site.db
    database_url: Optional[str] = None
    # Hosted REST backend (PostgREST-compatible) and its anon key
    backend_url: Optional[str] = None
    backend_key: Optional[str] = None

    # Cache settings
    cache_enabled: bool = True
    cache_file: Path = Path("./cache/query_cache.json")
    cache_storage_key: str = "query_cache"
    default_stale_time: int = 300
    default_cache_time: int = 600

    # Site metadata
    site_name: str = "Nymphette Tours"
    site_url: str = "https://nymphettetours.com"
    # Built index.html served by /seo/page with per-route head tags
    index_html: Optional[Path] = None

    # Logging
    log_level: str = "INFO"

    @property
    def backend_configured(self) -> bool:
        return bool(self.database_url or (self.backend_url and self.backend_key))

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
