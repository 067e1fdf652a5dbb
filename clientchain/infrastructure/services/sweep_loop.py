"""In-process reconciliation loop started from the app lifespan when enabled."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from clientchain.core.config import get_settings
from clientchain.infrastructure.persistence.database import session_scope
from clientchain.infrastructure.services.automation_factory import build_automation

logger = logging.getLogger(__name__)


async def run_sweep_once(app_state: Any) -> int:
    """One sweep pass in a fresh session, using the adapters held on app state."""
    settings = get_settings()
    async with session_scope() as session:
        services = build_automation(
            session,
            settings,
            channel=app_state.notification_channel,
            counter=app_state.rate_limit_counter,
            webhook_client=app_state.webhook_client,
        )
        return await services.sweep.sweep_due()


async def run_sweep_loop(app: Any) -> None:
    """Sweep every ``sweep_interval_seconds`` until cancelled.

    A failed pass is logged and the loop carries on; cancelling the task stops it.
    """
    interval = get_settings().sweep_interval_seconds
    logger.info("Reconciliation sweep loop started (every %ss)", interval)
    try:
        while True:
            try:
                await run_sweep_once(app.state)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Reconciliation sweep pass failed")
            await asyncio.sleep(interval)
    except asyncio.CancelledError:
        logger.info("Reconciliation sweep loop cancelled")
        raise
