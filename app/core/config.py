from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    STORE_PROVIDER: str = "memory"  # "memory", "json", "http"
    DATA_DIR: str = "./data/records"
    RECORD_STORE_BASE_URL: str | None = None
    RECORD_STORE_API_KEY: str | None = None
    STORE_TIMEOUT_SECONDS: float = 10.0

    SEED_DEMO_DATA: bool = True
    DEFAULT_SORT_ORDER: str = "asc"
    MAX_VIEW_SESSIONS: int = 1000


settings = Settings()
