"""Central environment-driven settings for the API process.

The process loads this once at startup. Behavior is controlled by environment
variables (see `.env.example`); `create_app` also accepts an explicit
instance so tests never touch the environment.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "donutsme-api"
    log_level: str = "INFO"
    database_url: str = "sqlite:///./donutsme.db"
    client_url: str = "http://localhost:5173"
    privy_app_id: str = ""
    privy_app_secret: str = ""
    privy_verification_key: str = ""
    privy_auth_url: str = "https://auth.privy.io"
    privy_api_url: str = "https://api.privy.io"
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    stripe_webhook_tolerance_seconds: int = 300
    stripe_account_country: str = "US"
    otel_exporter_otlp_endpoint: str = ""
    profile_cache_ttl_seconds: float = 5.0
    http_timeout_seconds: float = 10.0
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
