"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library configuration loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="BILLING_",
        extra="ignore",
    )

    # Service
    service_name: str = "billing-engine"
    log_level: str = "INFO"

    # External store
    store_api_base: str = "http://localhost:3000"
    store_api_token: str | None = None

    # HTTP Client
    http_timeout_seconds: float = 5.0

    # Scheduling rules
    max_installments: int = 12

    # Listing
    page_size: int = 9  # 3 rows x 3 columns

    # Currency rendering (pt-BR, BRL)
    currency_symbol: str = "R$"
    thousands_separator: str = "."
    decimal_separator: str = ","


settings = Settings()
