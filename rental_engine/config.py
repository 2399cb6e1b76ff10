from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str | None = None  # e.g. sqlite+aiosqlite:///./rentals.db
    use_in_memory: bool = True
    seed_demo_data: bool = True  # solo aplica al almacenamiento en memoria
    log_level: str = "INFO"

    scheduler_enabled: bool = True
    reconcile_interval_seconds: float = 60.0

    store_timeout_seconds: float = 5.0
    deadlock_retry_attempts: int = 3
    deadlock_retry_base_delay: float = 0.1

    turnaround_hours: float = 12.0


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
