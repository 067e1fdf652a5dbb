"""Twilio SMS sender using the Messages REST resource."""

from contextlib import asynccontextmanager

import httpx

from clientchain.domain.exceptions import ChannelException
from clientchain.shared.enums import Channel
from clientchain.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class TwilioSmsSender:
    """Posts form-encoded messages to /Accounts/{sid}/Messages.json."""

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        *,
        api_base: str = "https://api.twilio.com/2010-04-01",
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._account_sid = account_sid
        self._auth = httpx.BasicAuth(account_sid, auth_token)
        self._from_number = from_number
        self._url = f"{api_base.rstrip('/')}/Accounts/{account_sid}/Messages.json"
        self._timeout = timeout
        self._shared_http = http_client

    @asynccontextmanager
    async def _http_cm(self):
        """Yield shared HTTP client or a short-lived one (connection reuse when shared)."""
        if self._shared_http is not None:
            yield self._shared_http
            return
        async with httpx.AsyncClient() as client:
            yield client

    async def send(self, to: str, body: str) -> None:
        """Send one SMS; raise ChannelException on transport error or non-2xx."""
        data = {"To": to, "From": self._from_number, "Body": body}
        try:
            async with self._http_cm() as client:
                response = await client.post(
                    self._url, data=data, auth=self._auth, timeout=self._timeout
                )
        except httpx.HTTPError as e:
            raise ChannelException(Channel.SMS.value, str(e) or type(e).__name__) from e
        if not response.is_success:
            raise ChannelException(
                Channel.SMS.value,
                _error_message(response),
                status_code=response.status_code,
            )
        logger.info("SMS accepted by Twilio (status=%s)", response.status_code)


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(payload, dict) and payload.get("message"):
        return f"HTTP {response.status_code}: {payload['message']}"
    return f"HTTP {response.status_code}"
