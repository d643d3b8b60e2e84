"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Vendor credentials (Firestore, Clerk, Stripe, Resend)
are optional at load time; the operation that needs a missing one fails
with ServiceNotConfiguredException (503).
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_TELEMETRY_EXPORTERS = ("console", "otlp", "none")


class Settings(BaseSettings):
    """Application settings loaded from environment and .env."""

    # App
    app_name: str = "coachhub"
    app_version: str = "1.0.0"
    debug: bool = False
    # Base URL of the web app, used for links in emails (booking management etc.)
    app_base_url: str = "http://localhost:3000"

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Request / middleware
    request_timeout_seconds: int = 60
    request_id_header: str = "X-Request-ID"

    # Firebase / Firestore: use key (env) or path (file). For Vercel, use key.
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None  # Path to JSON file

    # Clerk: PEM public key for networkless session token verification.
    clerk_jwt_key: SecretStr | None = None
    clerk_jwt_algorithm: str = "RS256"
    clerk_issuer: str | None = None
    clerk_webhook_secret: SecretStr | None = None

    # Stripe (Connect: charges run on the org's connected account)
    stripe_secret_key: SecretStr | None = None
    stripe_webhook_secret: SecretStr | None = None

    # Resend
    resend_api_key: SecretStr | None = None
    email_platform_domain: str = "coachhub.app"
    email_default_sender: str = "CoachHub <notifications@coachhub.app>"
    email_auth_sender: str = "CoachHub <auth@coachhub.app>"

    # Scheduled jobs: Authorization: Bearer <cron_secret>
    cron_secret: SecretStr | None = None

    # Redis Cache
    redis_enabled: bool = True
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    cache_ttl_branding: int = 300
    cache_ttl_org_settings: int = 120

    # OpenTelemetry
    telemetry_enabled: bool = True
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_settings(self) -> "Settings":
        """Reject settings that can never work (bad exporter, negative timeout)."""
        if self.telemetry_exporter not in _TELEMETRY_EXPORTERS:
            raise ValueError(
                f"telemetry_exporter must be one of {', '.join(_TELEMETRY_EXPORTERS)}, "
                f"got: {self.telemetry_exporter!r}"
            )
        if self.request_timeout_seconds <= 0:
            raise ValueError("REQUEST_TIMEOUT_SECONDS must be positive")
        if not 0.0 <= self.telemetry_sample_rate <= 1.0:
            raise ValueError("TELEMETRY_SAMPLE_RATE must be between 0.0 and 1.0")
        return self

    @property
    def origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
