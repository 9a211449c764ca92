from pydantic_settings import BaseSettings
from functools import lru_cache
import os


class Settings(BaseSettings):
    app_name: str = "Candidate Profile Sync API"
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Local cache of edited profile documents (SQLite by default)
    database_url: str = "sqlite+aiosqlite:///./candidate_sync.db"

    # Remote candidate API
    api_base_url: str = "http://localhost:8000"
    api_prefix: str = "/api/candidates"
    api_token: str = ""  # Fallback bearer token when the caller forwards none
    request_timeout_seconds: float = 30.0

    # Resume parsing poll loop
    parsing_poll_delay_seconds: float = 1.5
    parsing_max_attempts: int = 20

    # CORS - comma-separated list of allowed origins
    cors_origins: str = "http://localhost:5173,http://localhost:5174"

    class Config:
        env_file = ".env"
        extra = "ignore"
        # Make field names case-insensitive for environment variables
        case_sensitive = False

    def get_cors_origins(self) -> list:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def get_api_root(self) -> str:
        return self.api_base_url.rstrip("/") + "/" + self.api_prefix.strip("/")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
