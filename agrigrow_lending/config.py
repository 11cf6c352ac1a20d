"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./agrigrow.db"

    # External Services
    notification_webhook_url: str = "http://localhost:8002/notifications"

    # Service
    service_name: str = "agrigrow-lending"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    # Repayments
    reminder_window_days: int = 3

    # HTTP Client
    http_timeout_seconds: float = 5.0
    webhook_max_retries: int = 5
    webhook_backoff_base: float = 1.0  # Exponential backoff base in seconds


settings = Settings()
