"""Configuration management using pydantic-settings."""
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Cache settings loaded from QUERYCACHE_* environment variables."""

    # Entry lifetimes (seconds)
    default_stale_time: float = 300.0
    default_cache_time: float = 1800.0

    # Garbage collection period (seconds), <= 0 disables the background sweep
    gc_interval: float = 60.0

    # Debug logging of every store operation
    debug: bool = False
    # False routes debug lines into the logging module instead of stdout
    log_to_console: bool = True

    # Storage backend: "memory" (hierarchical) or "sqlite" (persistent, flat)
    backend: str = "memory"
    sqlite_path: Path = Path("./cache/querycache.db")

    class Config:
        env_prefix = "QUERYCACHE_"
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
