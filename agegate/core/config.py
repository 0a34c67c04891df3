"""Application configuration using pydantic settings with structured sections."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False


class DatabaseSettings(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///./agegate.db", alias="url")
    echo: bool = False
    pool_size: Optional[int] = None
    max_overflow: Optional[int] = None
    busy_timeout_seconds: float = 15.0


class SecuritySettings(BaseModel):
    admin_token: str = Field(default="change-me-admin", min_length=8)
    api_key_prefix: str = "sk_"
    api_key_bytes: int = 24


class PricingSettings(BaseModel):
    """Price per verification method in minor currency units."""

    currency: str = "CZK"
    bankid: int = 2000
    mojeid: int = 1500
    ocr: int = 1000
    facescan: int = 500
    revalidate: int = 100


class ProviderSettings(BaseModel):
    timeout_seconds: float = 30.0
    api_key: Optional[str] = None
    bankid_url: Optional[str] = None
    mojeid_url: Optional[str] = None
    ocr_url: Optional[str] = None
    facescan_url: Optional[str] = None


class BankFeedSettings(BaseModel):
    base_url: str = "https://fioapi.fio.cz/v1/rest"
    api_token: Optional[str] = None
    timeout_seconds: float = 15.0
    lookback_days: int = 0


class RetrySettings(BaseModel):
    max_attempts: int = Field(default=5, ge=1)
    initial_wait: float = 0.05
    max_wait: float = 2.0


class ReconciliationSettings(BaseModel):
    topup_deadline_hours: int = 72
    verification_stale_minutes: int = 30


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"
    project_name: str = "Age Verification Billing Server"
    api_prefix: str = "/api"

    server: ServerSettings = ServerSettings()
    database: DatabaseSettings = DatabaseSettings()
    security: SecuritySettings = SecuritySettings()
    pricing: PricingSettings = PricingSettings()
    providers: ProviderSettings = ProviderSettings()
    bank_feed: BankFeedSettings = BankFeedSettings()
    retry: RetrySettings = RetrySettings()
    reconciliation: ReconciliationSettings = ReconciliationSettings()

    @property
    def database_url(self) -> str:
        return self.database.url

    @property
    def host(self) -> str:
        return self.server.host

    @property
    def port(self) -> int:
        return self.server.port

    @property
    def currency(self) -> str:
        return self.pricing.currency


@lru_cache()
def get_settings() -> Settings:
    return Settings()
