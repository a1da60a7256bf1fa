"""Configuration management using Pydantic Settings"""

from typing import List, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore", frozen=True)

    # Plaid
    plaid_env: Literal["sandbox", "development", "production"] = "sandbox"
    plaid_client_id: str = ""
    plaid_secret: str = ""
    plaid_base_url: Optional[str] = None  # Overrides plaid_env, e.g. the local mock server
    plaid_client_name: str = "CashAI"
    plaid_products: List[str] = ["transactions"]
    plaid_country_codes: List[str] = ["US"]
    plaid_language: str = "en"

    # Link sessions
    link_history_days: int = 180

    # Transaction retrieval policy
    default_window_months: int = 6
    default_page_size: int = 500
    max_page_size: int = 500
    coverage_tolerance_days: int = 30
    not_ready_retry_after_seconds: int = 30

    # Service
    service_name: str = "cashai-gateway"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000
    cors_allow_origins: List[str] = ["*"]

    # HTTP Client
    http_timeout_seconds: float = 10.0


settings = Settings()
