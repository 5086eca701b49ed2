"""
SafeTalk Configuration

Central settings loaded from environment variables.
"""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Immutable application settings."""

    # --- Remote classifier ---
    # "gemini" or "none". A missing GEMINI_API_KEY also disables the remote path.
    LLM_PROVIDER: str = os.getenv("SAFETALK_LLM_PROVIDER", "gemini")
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

    # --- Composer ---
    DEBOUNCE_SECONDS: float = float(os.getenv("SAFETALK_DEBOUNCE_SECONDS", "0.3"))
    MIN_ANALYSIS_LENGTH: int = int(os.getenv("SAFETALK_MIN_ANALYSIS_LENGTH", "3"))
    MAX_MESSAGE_LENGTH: int = int(os.getenv("SAFETALK_MAX_MESSAGE_LENGTH", "5000"))

    # --- Server ---
    HOST: str = os.getenv("SAFETALK_HOST", "0.0.0.0")
    PORT: int = int(os.getenv("SAFETALK_PORT", "8000"))

    # --- CORS ---
    CORS_ORIGINS: str = os.getenv("SAFETALK_CORS_ORIGINS", "*")


settings = Settings()
