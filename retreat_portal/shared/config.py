from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


DEV_TOKEN_SECRET = "retreat-portal-dev-secret"


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


@dataclass(frozen=True)
class Settings:
    environment: str
    database_url: str
    jwt_secret: str
    admin_jwt_secret: str
    attendee_jwt_secret: str
    token_ttl_seconds: int
    admin_user: str
    admin_pass: str
    admin_password_hash: str
    login_max_failed_attempts: int
    login_window_minutes: int
    login_attempt_retention_hours: int
    session_ttl_seconds: int
    log_level: str

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def token_secret_for(self, token_type: str) -> str:
        if token_type == "admin":
            secret = self.admin_jwt_secret or self.jwt_secret
        else:
            secret = self.attendee_jwt_secret or self.jwt_secret
        if not secret and not self.is_production:
            return DEV_TOKEN_SECRET
        return secret


def get_settings() -> Settings:
    token_ttl_seconds = int(_env("TOKEN_TTL_SECONDS", "7200"))
    return Settings(
        environment=_env("ENVIRONMENT", "development"),
        database_url=_env("DATABASE_URL", "sqlite:///./retreat.db"),
        jwt_secret=_env("JWT_SECRET", ""),
        admin_jwt_secret=_env("ADMIN_JWT_SECRET", ""),
        attendee_jwt_secret=_env("ATTENDEE_JWT_SECRET", ""),
        token_ttl_seconds=token_ttl_seconds,
        admin_user=_env("ADMIN_USER", "admin"),
        admin_pass=_env("ADMIN_PASS", "admin123"),
        admin_password_hash=_env("ADMIN_PASSWORD_HASH", ""),
        login_max_failed_attempts=int(_env("LOGIN_MAX_FAILED_ATTEMPTS", "5")),
        login_window_minutes=int(_env("LOGIN_WINDOW_MINUTES", "15")),
        login_attempt_retention_hours=int(_env("LOGIN_ATTEMPT_RETENTION_HOURS", "24")),
        session_ttl_seconds=int(_env("SESSION_TTL_SECONDS", str(token_ttl_seconds))),
        log_level=_env("LOG_LEVEL", "INFO"),
    )
