from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    environment: str = "development"

    # Database
    database_url_override: Optional[str] = Field(None, validation_alias="DATABASE_URL")
    postgres_user: str = "alacena"
    postgres_password: str = "alacena"
    postgres_db: str = "alacena_inteligente"
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    database_echo: bool = False

    # Redis (barcode cache + auth rate limiting)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0

    # Secret
    secret_key: str = "alacena-super-secret-key-2025"

    #JWT
    access_token_expire_minutes: int = 60 * 24 * 30
    password_reset_expire_minutes: int = 60

    # Open Food Facts
    open_food_facts_base_url: str = "https://world.openfoodfacts.org/api/v0"
    open_food_facts_timeout: float = 10.0
    cache_ttl_seconds: int = 60 * 60 * 2

    # Expiration windows: server-side status/stats vs. list filter default
    expiring_soon_days: int = 3
    filter_soon_days: int = 7

    # Rate limiting on /v1/auth
    auth_rate_limit_requests: int = 100
    auth_rate_limit_window_seconds: int = 15 * 60

    # Email (password reset)
    sendgrid_api_key: Optional[str] = None
    from_email: str = "noreply@alacenainteligente.com"

    default_page_size: int = 20
    low_stock_threshold: float = 1.0

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def redis_url(self) -> str:
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
