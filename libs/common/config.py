from decimal import Decimal
from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    # Application
    ENVIRONMENT: Literal["local", "development", "test", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    APP_NAME: str = "LWG MarketPlace"
    ORDER_PREFIX: str = "LWG"

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # Auth
    JWT_SECRET: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Currency (prices are stored in NLe)
    DEFAULT_CURRENCY: Literal["NLE", "USD"] = "NLE"
    USD_RATE: Decimal = Decimal("20")  # NLe per 1 USD

    # Checkout
    SPLIT_MULTI_VENDOR_ORDERS: bool = False

    # Email (SMTP). Notifications are skipped when host/username are missing.
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_SECURE: bool = False  # True for implicit TLS (465)
    SMTP_USERNAME: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    DEFAULT_FROM_EMAIL: str = "no-reply@lwgpartnersnetwork.com"
    DEFAULT_FROM_NAME: str = "LWG MarketPlace"
    ADMIN_EMAIL: Optional[str] = None

    # WhatsApp via Twilio. Skipped when credentials are missing.
    TWILIO_ACCOUNT_SID: Optional[str] = None
    TWILIO_AUTH_TOKEN: Optional[str] = None
    TWILIO_WHATSAPP_FROM: Optional[str] = None  # e.g. whatsapp:+14155238886
    TWILIO_ADMIN_WHATSAPP_TO: Optional[str] = None
    TWILIO_API_URL: str = "https://api.twilio.com/2010-04-01"

    NOTIFICATION_TIMEOUT_SECONDS: float = 10.0

    # Support contact shown in the storefront
    SUPPORT_EMAIL: str = "info@lwgpartnersnetwork.com"
    SUPPORT_PHONE: Optional[str] = "+23272146015"

    # HTTP
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:5000"]
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str):
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+psycopg://", 1)
            if v.startswith("postgres://"):
                return v.replace("postgres://", "postgresql+psycopg://", 1)
        return v

    @property
    def smtp_configured(self) -> bool:
        return bool(self.SMTP_HOST and self.SMTP_USERNAME and self.SMTP_PASSWORD)

    @property
    def whatsapp_configured(self) -> bool:
        return bool(
            self.TWILIO_ACCOUNT_SID
            and self.TWILIO_AUTH_TOKEN
            and self.TWILIO_WHATSAPP_FROM
        )


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return Settings()
