from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENV_FILE = Path(__file__).resolve().parent.parent / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    DEFAULT_PAGE_SIZE: int = 100
    MAX_PAGE_SIZE: int = 1000
    SIMULATED_LATENCY_MS: int = 500

    # Paginated fetch service. Empty base URL means the in-process store.
    FETCH_BASE_URL: str = ""
    FETCH_TIMEOUT_SECONDS: float = 10.0

    # Visible-row refresh
    REFRESH_INTERVAL_SECONDS: float = 30.0
    GRID_STATE_MAX_AGE_SECONDS: float = 0

    # Generated dataset
    LOCATION_COUNT: int = 2
    BRIDGES_PER_LOCATION: int = 2
    CAMERAS_PER_BRIDGE: int = 50
    DATA_SEED: int | None = None

    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:8080",
    ]


settings = Settings()
