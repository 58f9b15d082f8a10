import os
from typing import List


def _split_env_list(value: str) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item and item.strip()]


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default) in {"1", "true", "True"}


class Settings:
    """Centralized application settings loaded from environment variables.

    This keeps security-sensitive values (like JWT secrets), storage
    endpoints and cross-cutting config (like CORS) in one place.
    """

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")
    DB_AUTO_CREATE: bool = _env_flag("DB_AUTO_CREATE")

    # JWT / Auth
    SECRET_KEY: str = os.getenv("SECRET_KEY", "")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
    JWT_ISSUER: str | None = os.getenv("JWT_ISSUER") or None
    JWT_AUDIENCE: str | None = os.getenv("JWT_AUDIENCE") or None

    # CORS
    # Comma-separated list, e.g. "http://localhost:3000,http://localhost:5173"
    _cors_origins_env: str = os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://localhost:5173,http://localhost:8000",
    )
    CORS_ORIGINS: List[str] = _split_env_list(_cors_origins_env)

    # Service
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOGIN_URL: str = os.getenv("LOGIN_URL", "/docs")
    RATE_LIMIT_ENABLED: bool = _env_flag("RATE_LIMIT_ENABLED", "1")
    RATE_LIMIT_DEFAULT: str = os.getenv("RATE_LIMIT_DEFAULT", "100/minute")

    # Pagination
    DEFAULT_PAGE_SIZE: int = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
    MAX_PAGE_SIZE: int = int(os.getenv("MAX_PAGE_SIZE", "100"))

    # Likes / subscriptions
    TOGGLE_MAX_ATTEMPTS: int = int(os.getenv("TOGGLE_MAX_ATTEMPTS", "3"))

    # Media (S3-compatible object storage)
    MEDIA_BUCKET: str = os.getenv("MEDIA_BUCKET", "vidshare-media")
    MEDIA_ENDPOINT_URL: str | None = os.getenv("MEDIA_ENDPOINT_URL") or None
    MEDIA_ACCESS_KEY: str | None = os.getenv("MEDIA_ACCESS_KEY") or None
    MEDIA_SECRET_KEY: str | None = os.getenv("MEDIA_SECRET_KEY") or None
    MEDIA_REGION: str = os.getenv("MEDIA_REGION", "us-east-1")
    # Base URL that object keys are appended to when building public links
    MEDIA_PUBLIC_URL: str | None = os.getenv("MEDIA_PUBLIC_URL") or None


settings = Settings()
