from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Storage
    STORAGE_KEY: str = "lunch-app-data"
    DATA_DIR: str = ".lunch-data"

    # Export / import files
    EXPORT_PREFIX: str = "lunch-data"

    # Display
    CURRENCY_SYMBOL: str = "₫"

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_prefix="LUNCH_",
        env_file=".env",
        extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
