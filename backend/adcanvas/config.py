"""Application configuration via environment variables."""

from pathlib import Path
from functools import lru_cache

from pydantic_settings import BaseSettings

PACKAGE_DIR = Path(__file__).parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Keys
    OPENAI_API_KEY: str = ""

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DEBUG: bool = False
    LOG_LEVEL: str = "info"
    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    # Rule + workflow sources
    PLATFORM_RULES_DIR: Path = PACKAGE_DIR / "rules" / "platforms"
    WORKFLOW_CONFIG_PATH: Path = PACKAGE_DIR / "workflow_config.json"

    # Model Config
    ROUTER_MODEL: str = "gpt-4o-mini"
    VALIDATION_MODEL: str = "gpt-4o-mini"
    CREATIVE_MODEL: str = "gpt-4o"
    DETERMINISTIC_TEMPERATURE: float = 0.0
    CREATIVE_TEMPERATURE: float = 0.7
    MODEL_MAX_OUTPUT_TOKENS: int = 4096
    MODEL_MAX_ATTEMPTS: int = 3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
