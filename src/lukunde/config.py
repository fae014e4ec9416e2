"""Configuration management for Lukunde."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _parse_cors_origins() -> list[str]:
    """Parse CORS origins from environment variable."""
    cors_env = os.getenv("CORS_ALLOW_ORIGINS")
    if cors_env:
        return cors_env.split(",")
    return ["*"]


class Settings(BaseModel):
    """Application settings."""

    # Key-value database used to persist the sheet collection
    database_path: Path = Path(os.getenv("DATABASE_PATH", "data/lukunde.db"))

    # Server settings
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS settings (comma-separated list of allowed origins, or * for all)
    cors_allow_origins: list[str] = _parse_cors_origins()

    # Anthropic API key (column suggestions and sheet analysis are disabled without it)
    anthropic_api_key: Optional[str] = os.getenv("ANTHROPIC_API_KEY")

    # Column suggestion settings
    suggestion_model: str = os.getenv("SUGGESTION_MODEL", "claude-3-5-haiku-latest")
    suggestion_max_tokens: int = int(os.getenv("SUGGESTION_MAX_TOKENS", "50"))
    suggestion_timeout_seconds: float = float(os.getenv("SUGGESTION_TIMEOUT_SECONDS", "8.0"))

    # Sheet analysis assistant
    analysis_model: str = os.getenv("ANALYSIS_MODEL", "claude-3-5-haiku-latest")
    analysis_max_tokens: int = int(os.getenv("ANALYSIS_MAX_TOKENS", "600"))
    analysis_sample_rows: int = int(os.getenv("ANALYSIS_SAMPLE_ROWS", "50"))

    # Access codes
    access_code_length: int = int(os.getenv("ACCESS_CODE_LENGTH", "6"))
    default_expiration_value: int = int(os.getenv("DEFAULT_EXPIRATION_VALUE", "24"))
    default_expiration_unit: str = os.getenv("DEFAULT_EXPIRATION_UNIT", "hours")

    # Shareable links
    share_link_base_url: str = os.getenv("SHARE_LINK_BASE_URL", "http://127.0.0.1:8000/")
    share_link_param: str = os.getenv("SHARE_LINK_PARAM", "pauta")

    # Storage keys (kept compatible with the browser edition)
    sheets_storage_key: str = os.getenv("SHEETS_STORAGE_KEY", "educa-lukunde-sheets")
    theme_storage_key: str = os.getenv("THEME_STORAGE_KEY", "educa-lukunde-theme")

    # Sheet created when the store is empty
    bootstrap_sheet_name: str = os.getenv("BOOTSTRAP_SHEET_NAME", "Pauta 1")
    bootstrap_rows: int = int(os.getenv("BOOTSTRAP_ROWS", "20"))
    bootstrap_columns: int = int(os.getenv("BOOTSTRAP_COLUMNS", "10"))


settings = Settings()
