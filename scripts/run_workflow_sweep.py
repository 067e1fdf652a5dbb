"""Run one reconciliation sweep: advance every workflow execution whose wait has elapsed.

Usage:
    uv run python -m scripts.run_workflow_sweep [limit]
Meant for cron (e.g. every minute). Safe to overlap with other sweeps and
with the in-process loop; the execution lease keeps each run single-writer.
Requires Postgres (DATABASE_URL). Uses Redis for rate limits when enabled.

Without Redis each run counts sends in its own process, so the daily SMS and
email ceilings only hold within one run, not across runs or with the API
process. The run still goes ahead and logs a warning saying so; enable Redis
wherever more than one process sends.
"""

import asyncio
import logging
import sys

import httpx
from dotenv import load_dotenv

from clientchain.core.config import Settings, get_settings
from clientchain.domain.exceptions import SqlNotConfiguredException
from clientchain.infrastructure.cache import InMemoryRateLimitCounter, RedisRateLimitCounter
from clientchain.infrastructure.external.channels import build_notification_channel
from clientchain.infrastructure.external.webhook import HttpxWebhookClient
from clientchain.infrastructure.persistence import database
from clientchain.infrastructure.services import build_automation
from clientchain.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


def build_counter(settings: Settings) -> RedisRateLimitCounter | InMemoryRateLimitCounter:
    """Redis counter when enabled; otherwise a run-local counter, with a warning."""
    if settings.redis_enabled:
        return RedisRateLimitCounter(settings=settings)
    logger.warning(
        "Redis disabled: daily SMS/email limits are counted for this sweep run only "
        "and are not enforced across runs or with the API process"
    )
    return InMemoryRateLimitCounter()


async def main() -> None:
    """Sweep due executions once and print how many were handed to the runner."""
    load_dotenv()
    settings = get_settings()
    setup_logging()
    limit = int(sys.argv[1]) if len(sys.argv) > 1 else None

    counter = build_counter(settings)
    if isinstance(counter, RedisRateLimitCounter):
        await counter.connect()

    try:
        async with httpx.AsyncClient(timeout=settings.channel_timeout_seconds) as http:
            async with database.session_scope() as session:
                services = build_automation(
                    session,
                    settings,
                    channel=build_notification_channel(settings, http_client=http),
                    counter=counter,
                    webhook_client=HttpxWebhookClient(
                        timeout=settings.webhook_timeout_seconds, http_client=http
                    ),
                )
                processed = await services.sweep.sweep_due(limit)
    except SqlNotConfiguredException:
        print("DATABASE_URL not configured", file=sys.stderr)
        sys.exit(1)
    finally:
        if isinstance(counter, RedisRateLimitCounter):
            await counter.disconnect()
        if database.engine is not None:
            await database.engine.dispose()

    print(f"Done. Due executions processed: {processed}")


if __name__ == "__main__":
    asyncio.run(main())
