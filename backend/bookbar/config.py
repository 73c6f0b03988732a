# backend/bookbar/config.py

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repo root


class Settings(BaseSettings):
    database_url: str = "sqlite:///./bookbar.db"
    redis_url: str = "redis://localhost:6379/0"

    # Public base URL used for payment return links and e-mail links
    app_url: str = "http://localhost:3001"

    jwt_secret: str = "fallback-dev-only"
    admin_token_days: int = 7

    # Shared secret for the external cron trigger; unset = cron endpoints disabled
    cron_secret: Optional[str] = None

    # Stripe fallbacks (business_settings row wins when set)
    stripe_secret_key: Optional[str] = None
    stripe_webhook_secret: Optional[str] = None
    payment_currency: str = "gbp"

    resend_api_key: Optional[str] = None
    email_from: str = "Be Beauty Bar <onboarding@resend.dev>"

    sms_works_jwt: Optional[str] = None
    sms_works_api_key: Optional[str] = None
    sms_works_api_secret: Optional[str] = None
    sms_works_sender: str = "BeBeautyBar"

    notifications_consumer_enabled: bool = True
    log_level: str = "INFO"

    # Bootstrap only (init_admin.py)
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # Relative SQLite path → absolute, anchored at the repo root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            return f"sqlite:///{absolute_path}"
        return url


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
