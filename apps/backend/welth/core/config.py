from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path


class Settings(BaseSettings):
    APP_NAME: str = "Welth Backend"
    ENV: str = "dev"

    # SQLite file beside apps/backend so the CWD does not matter
    _default_db_path = Path(__file__).resolve().parents[2] / "db.sqlite3"
    DATABASE_URL: str = f"sqlite:///{_default_db_path}"

    CORS_ORIGINS: list[str] = ["*"]
    TIMEZONE: str = "UTC"

    # Header carrying the external identity resolved by the auth provider
    AUTH_HEADER: str = "X-User-Id"

    # Token bucket per user, consulted before a transaction is created
    RATE_LIMIT_CAPACITY: int = 10
    RATE_LIMIT_REFILL: int = 10
    RATE_LIMIT_INTERVAL_SECONDS: int = 3600

    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-1.5-flash"

    RESEND_API_KEY: str = ""
    RESEND_API_URL: str = "https://api.resend.com/emails"
    EMAIL_FROM: str = "Welth <onboarding@resend.dev>"

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    model_config = SettingsConfigDict(env_file=(".env",), env_prefix="WELTH_", case_sensitive=False)


settings = Settings()
