# backend/agenda/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repository root


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/agenda.db"
    redis_url: str | None = None

    log_level: str = "INFO"
    timezone: str = "America/Sao_Paulo"

    # Booking engine
    slot_step_minutes: int = 10
    default_duration_minutes: int = 30
    horizon_days: int = 60
    cache_ttl_seconds: int = 86400

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # Relative SQLite paths are resolved against the repository root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            return f"sqlite:///{absolute_path}"
        return url


settings = Settings()
