"""
Configuration management for Bhojnalay Plate Count
"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Bhojnalay Plate Count"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Remote datastore. Leave empty to run on local storage only.
    DATABASE_URL: str = "sqlite:///./bhojnalay.db"

    # Local fallback storage (JSON file)
    LOCAL_STORE_PATH: str = "./bhojnalay_local.json"

    # Reports
    CURRENCY_SYMBOL: str = "₹"
    EXPORT_FILENAME_PREFIX: str = "bhojnalay"

    # Frontends allowed to call the API
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()
