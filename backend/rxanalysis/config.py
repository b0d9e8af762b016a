"""
Prescription analysis backend – Configuration Loader
Loads all secrets and settings from .env via environment variables.
No secret may be hard-coded anywhere in the codebase.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root
_env_path = Path(__file__).resolve().parent.parent.parent / ".env"
load_dotenv(dotenv_path=_env_path)


def _env_bool(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() == "true"


class Config:
    """Base configuration – values sourced exclusively from environment."""

    # --- Secrets ---
    OPENAI_API_KEY: str = os.environ.get("OPENAI_API_KEY", "")
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "sqlite:///rxanalysis.db")

    # --- AI provider ---
    # Live mode needs both a key and the explicit flag; anything else is demo.
    USE_OPENAI_API: bool = _env_bool("USE_OPENAI_API")
    OPENAI_MODEL: str = os.environ.get("OPENAI_MODEL", "gpt-4o")
    OPENAI_MAX_TOKENS: int = int(os.environ.get("OPENAI_MAX_TOKENS", "1000"))
    OPENAI_TIMEOUT_S: float = float(os.environ.get("OPENAI_TIMEOUT_S", "30"))

    # --- App ---
    APP_ENV: str = os.environ.get("APP_ENV", "development")
    DEBUG: bool = APP_ENV == "development"

    # --- Limits ---
    RATE_LIMIT_DEFAULT: str = "60/minute"
    MAX_IMAGE_BYTES: int = int(os.environ.get("MAX_IMAGE_BYTES", str(10 * 1024 * 1024)))

    # --- Validation ---
    @classmethod
    def validate(cls) -> None:
        """Raise on missing critical environment variables."""
        required = ["DATABASE_URL"]
        missing = [k for k in required if not getattr(cls, k)]
        if missing:
            raise EnvironmentError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Ensure a .env file exists with all required values."
            )
