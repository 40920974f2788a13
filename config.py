import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "y", "on"}


def _as_list(val: str | None, default: list[str]) -> list[str]:
    if not val:
        return default
    return [item.strip() for item in val.split(",") if item.strip()]


@dataclass
class Settings:
    testing: bool = _as_bool(os.getenv("TESTING"), False)
    database_url: str = os.getenv("DATABASE_URL") or "sqlite:///./restaurant.db"

    # JWT
    jwt_key: str = os.getenv("JWT_KEY", "dev-only-signing-key-change-me-0123456789abcdef0123456789abcdef0123")
    jwt_issuer: str = os.getenv("JWT_ISSUER", "restaurant-api")
    jwt_audience: str = os.getenv("JWT_AUDIENCE", "restaurant-clients")
    jwt_algorithm: str = "HS512"
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))
    refresh_token_expire_days: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))

    # Lockout after repeated failed logins
    max_failed_logins: int = int(os.getenv("MAX_FAILED_LOGINS", "5"))
    lockout_minutes: int = int(os.getenv("LOCKOUT_MINUTES", "5"))

    cors_origins: list[str] = None
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Optional admin account created on startup
    admin_username: str | None = os.getenv("ADMIN_USERNAME")
    admin_password: str | None = os.getenv("ADMIN_PASSWORD")
    admin_email: str | None = os.getenv("ADMIN_EMAIL")

    def __post_init__(self):
        if self.cors_origins is None:
            self.cors_origins = _as_list(os.getenv("CORS_ORIGINS"), ["*"])
        if not self.jwt_key or len(self.jwt_key) < 32:
            raise RuntimeError("JWT_KEY is invalid: missing or shorter than 32 characters.")


settings = Settings()
