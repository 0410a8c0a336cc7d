"""Application configuration.

Environment variables override all defaults.
SECRET_KEY must be set in .env for production - startup fails fast without it.
"""

import os
from pathlib import Path
from typing import List


from dotenv import load_dotenv

# backend/.env for local development; real environment variables win
_BACKEND_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    # Database Configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./pharmatrace.db")

    # JWT verification for the identity provider's tokens
    SECRET_KEY: str = os.getenv("SECRET_KEY", None)
    if not SECRET_KEY:
        if os.getenv("ENVIRONMENT", "development") == "production":
            raise ValueError(
                "SECRET_KEY must be set in production environment. "
                "Generate with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
            )
        import warnings
        warnings.warn(
            "SECRET_KEY not set in environment. Using development default. "
            "Set SECRET_KEY in .env to a strong random value.",
            RuntimeWarning
        )
        SECRET_KEY = "development-only-weak-default-change-in-production"

    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

    # CORS (specific origins only, no wildcards)
    CORS_ORIGINS: List[str] = [
        o.strip()
        for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
        if o.strip()
    ]

    # Batch identification
    QR_CODE_PREFIX: str = os.getenv("QR_CODE_PREFIX", "PHARM")

    # Expiry tiers (days until expiry, inclusive upper bounds)
    EXPIRY_CRITICAL_DAYS: int = int(os.getenv("EXPIRY_CRITICAL_DAYS", "30"))
    EXPIRY_WARNING_DAYS: int = int(os.getenv("EXPIRY_WARNING_DAYS", "90"))

    # Location stamped on a batch when a pharmacist confirms delivery
    PHARMACY_LOCATION: str = os.getenv("PHARMACY_LOCATION", "Pharmacy Inventory")

    # Manufacturers may only move batches forward unless this is enabled
    ALLOW_BACKWARD_TRANSITIONS: bool = _env_flag("ALLOW_BACKWARD_TRANSITIONS")

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = ENVIRONMENT == "development"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()


settings = Settings()
