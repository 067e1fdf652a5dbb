"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Channel credentials are optional: when Twilio or
SendGrid are not configured, the log-only senders are used instead.
"""

from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings have defaults; cross-field rules are checked in
    validate_policy_and_scheduling.
    """

    # App
    app_name: str = "clientchain-automation"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Database (Postgres via SQLAlchemy + Alembic). Empty URL = SQL routes return 503.
    database_url: str = ""
    database_echo: bool = False
    db_pool_size: int | None = None
    db_max_overflow: int | None = None
    db_command_timeout: int | None = None

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Request / middleware
    request_id_header: str = "X-Request-ID"
    correlation_id_header: str = "X-Correlation-ID"

    # Redis (daily rate-limit counters). Disabled = in-process counter.
    redis_enabled: bool = True
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None
    redis_max_connections: int = 10

    # Twilio (SMS)
    twilio_account_sid: str | None = None
    twilio_auth_token: SecretStr | None = None
    twilio_from_number: str | None = None
    twilio_api_base: str = "https://api.twilio.com/2010-04-01"

    # SendGrid (email)
    sendgrid_api_key: SecretStr | None = None
    sendgrid_from_email: str = "no-reply@clientchain.app"
    sendgrid_from_name: str = "ClientChain"
    sendgrid_api_base: str = "https://api.sendgrid.com/v3"

    # Outbound HTTP
    channel_timeout_seconds: float = 10.0
    webhook_timeout_seconds: float = 10.0

    # Policy guards
    quiet_hours_start: int = 8
    quiet_hours_end: int = 21
    quiet_hours_default_timezone: str = "UTC"
    sms_daily_limit: int = 3
    email_daily_limit: int = 5
    rate_limit_window_seconds: int = 86400

    # Execution engine
    execution_lease_seconds: int = 300
    max_wait_seconds: int = 90 * 86400
    dispatch_run_inline: bool = True

    # Reconciliation sweep (in-process loop; the cron script ignores sweep_enabled)
    sweep_enabled: bool = False
    sweep_interval_seconds: int = 30
    sweep_batch_size: int = 200

    # OpenTelemetry
    telemetry_enabled: bool = False
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
    def validate_policy_and_scheduling(self) -> "Settings":
        """Validate quiet-hour bounds, default timezone, limits, and intervals."""
        if not (0 <= self.quiet_hours_start < self.quiet_hours_end <= 24):
            raise ValueError(
                "quiet_hours_start and quiet_hours_end must satisfy "
                f"0 <= start < end <= 24, got {self.quiet_hours_start}-{self.quiet_hours_end}"
            )
        try:
            ZoneInfo(self.quiet_hours_default_timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(
                f"quiet_hours_default_timezone is not a known IANA zone: "
                f"{self.quiet_hours_default_timezone!r}"
            ) from e
        if self.sms_daily_limit < 0 or self.email_daily_limit < 0:
            raise ValueError("sms_daily_limit and email_daily_limit must be >= 0")
        if self.rate_limit_window_seconds <= 0:
            raise ValueError("rate_limit_window_seconds must be positive")
        if self.execution_lease_seconds <= 0:
            raise ValueError("execution_lease_seconds must be positive")
        if self.sweep_interval_seconds <= 0 or self.sweep_batch_size <= 0:
            raise ValueError("sweep_interval_seconds and sweep_batch_size must be positive")
        if self.max_wait_seconds <= 0:
            raise ValueError("max_wait_seconds must be positive")
        return self

    @property
    def twilio_configured(self) -> bool:
        return bool(
            self.twilio_account_sid
            and self.twilio_auth_token
            and self.twilio_auth_token.get_secret_value()
            and self.twilio_from_number
        )

    @property
    def sendgrid_configured(self) -> bool:
        return bool(self.sendgrid_api_key and self.sendgrid_api_key.get_secret_value())


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.
    """
    return Settings()
