"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic. Used by main.py; no business
logic here, only wiring of infrastructure (shared HTTP client, rate-limit
counter, notification channel, telemetry, sweep loop, DB engine dispose).
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from clientchain.core.config import get_settings
from clientchain.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: logging, shared HTTP client, channel and webhook
    adapters, rate-limit counter (Redis if enabled, else in-process),
    telemetry (if enabled), sweep loop (if enabled). Shutdown runs in
    reverse: sweep cancel, HTTP client close, counter disconnect,
    telemetry shutdown, SQL engine dispose.
    """
    settings = get_settings()
    setup_logging()

    # ---- Startup ----
    from clientchain.infrastructure.cache import (
        InMemoryRateLimitCounter,
        RedisRateLimitCounter,
    )
    from clientchain.infrastructure.external.channels import build_notification_channel
    from clientchain.infrastructure.external.webhook import HttpxWebhookClient

    # Shared HTTP client for Twilio, SendGrid and webhooks (connection reuse).
    app.state.http_client = httpx.AsyncClient(timeout=settings.channel_timeout_seconds)
    app.state.notification_channel = build_notification_channel(
        settings, http_client=app.state.http_client
    )
    app.state.webhook_client = HttpxWebhookClient(
        timeout=settings.webhook_timeout_seconds, http_client=app.state.http_client
    )

    if settings.redis_enabled:
        counter = RedisRateLimitCounter(settings=settings)
        await counter.connect()
        app.state.rate_limit_counter = counter
    else:
        logger.info("Redis disabled; rate limits are counted in-process")
        app.state.rate_limit_counter = InMemoryRateLimitCounter()

    if settings.telemetry_enabled:
        from clientchain.shared.telemetry.telemetry import TelemetryConfig, set_telemetry

        telemetry = TelemetryConfig(
            service_name=settings.app_name,
            service_version=settings.app_version,
            enabled=True,
            environment=settings.telemetry_environment,
        )
        telemetry.setup_telemetry(
            exporter_type=settings.telemetry_exporter,
            otlp_endpoint=settings.telemetry_otlp_endpoint,
            sample_rate=settings.telemetry_sample_rate,
        )
        set_telemetry(telemetry)
        telemetry.instrument_fastapi(app)
        telemetry.instrument_logging()
        if settings.redis_enabled:
            telemetry.instrument_redis()
        if settings.database_url:
            from clientchain.infrastructure.persistence import database

            database._ensure_engine()
            telemetry.instrument_sqlalchemy(database.engine)
        logger.info("Telemetry initialized")

    if settings.sweep_enabled and settings.database_url:
        from clientchain.infrastructure.services.sweep_loop import run_sweep_loop

        app.state.sweep_task = asyncio.create_task(run_sweep_loop(app))
    else:
        app.state.sweep_task = None

    yield

    # ---- Shutdown ----
    sweep_task = getattr(app.state, "sweep_task", None)
    if sweep_task is not None:
        sweep_task.cancel()
        try:
            await sweep_task
        except asyncio.CancelledError:
            pass
        app.state.sweep_task = None
        logger.info("Reconciliation sweep loop stopped")

    if getattr(app.state, "http_client", None) is not None:
        await app.state.http_client.aclose()
        app.state.http_client = None
        logger.info("Shared HTTP client closed")

    counter = getattr(app.state, "rate_limit_counter", None)
    if isinstance(counter, RedisRateLimitCounter):
        await counter.disconnect()

    from clientchain.shared.telemetry.telemetry import get_telemetry

    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()
        logger.info("Telemetry shutdown complete")

    from clientchain.infrastructure.persistence import database

    if getattr(database, "engine", None) is not None:
        await database.engine.dispose()
        logger.info("Database engine disposed")
