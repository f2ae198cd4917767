"""Runtime settings for the notation service."""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DEBUG: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    # Web settings
    CORS_ORIGINS: list[str] = ["*"]

    # Organization dialect files ({org_id}.yaml|.yml|.json)
    DIALECT_DIR: str = "config/dialects"
    DIALECT_CACHE_TTL_SECONDS: float = 300.0
    SHORTCODE_CACHE_TTL_SECONDS: float = 300.0

    # Free-text recognizers ("back panel groove", "2 hinges at 110mm")
    NL_HEURISTICS_ENABLED: bool = True

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
    }


_settings_cache: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings_cache
    if _settings_cache is None:
        _settings_cache = Settings()
    return _settings_cache


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings_cache
    _settings_cache = None
