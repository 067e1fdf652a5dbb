"""Outbound webhook client for the invoke_webhook action."""

from contextlib import asynccontextmanager
from typing import Any

import httpx

from clientchain.domain.exceptions import ChannelException
from clientchain.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class HttpxWebhookClient:
    """IWebhookClient posting JSON with httpx; any non-2xx is a failure."""

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._timeout = timeout
        self._shared_http = http_client

    @asynccontextmanager
    async def _http_cm(self):
        if self._shared_http is not None:
            yield self._shared_http
            return
        async with httpx.AsyncClient() as client:
            yield client

    async def post_json(self, url: str, payload: dict[str, Any]) -> None:
        try:
            async with self._http_cm() as client:
                response = await client.post(url, json=payload, timeout=self._timeout)
        except httpx.HTTPError as e:
            raise ChannelException("webhook", str(e) or type(e).__name__) from e
        if not response.is_success:
            raise ChannelException(
                "webhook",
                f"HTTP {response.status_code}",
                status_code=response.status_code,
            )
        logger.info("Webhook delivered to %s (status=%s)", httpx.URL(url).host, response.status_code)
