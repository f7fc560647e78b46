"""Central environment-driven settings for the payments relay.

The process loads this once at startup and treats it as read-only afterwards
(see `.env.example`).
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


PRODUCTION_ORIGINS = ["https://www.timexsolutioninc.com", "https://timexsolutioninc.com"]
DEVELOPMENT_ORIGINS = ["http://localhost:5173", "http://localhost:3000"]


class CommonSettings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "timex-payments"
    log_level: str = "INFO"
    app_env: str = Field(default="development", validation_alias=AliasChoices("APP_ENV", "NODE_ENV"))
    port: int = 3001
    square_access_token: str
    square_app_id: str | None = None
    square_location_id: str | None = None
    square_env: str = "sandbox"
    square_api_version: str = "2024-10-17"
    processor_timeout_seconds: float = Field(default=10.0, gt=0)
    frontend_url: str | None = None
    cors_origins: str | None = None
    otel_exporter_otlp_endpoint: str | None = None
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    def allowed_origins(self) -> list[str]:
        """Origins the storefront may call us from."""

        if self.cors_origins:
            return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
        if self.is_production:
            return [origin for origin in [*PRODUCTION_ORIGINS, self.frontend_url] if origin]
        return list(DEVELOPMENT_ORIGINS)


settings = CommonSettings()
