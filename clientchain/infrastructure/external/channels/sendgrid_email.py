"""SendGrid email sender using the v3 mail/send endpoint."""

from contextlib import asynccontextmanager
from typing import Any

import httpx

from clientchain.domain.exceptions import ChannelException
from clientchain.shared.enums import Channel
from clientchain.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class SendGridEmailSender:
    """Sends plain-text mail. SendGrid answers 202 Accepted on success."""

    def __init__(
        self,
        api_key: str,
        from_email: str,
        from_name: str | None = None,
        *,
        api_base: str = "https://api.sendgrid.com/v3",
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._from: dict[str, str] = {"email": from_email}
        if from_name:
            self._from["name"] = from_name
        self._url = f"{api_base.rstrip('/')}/mail/send"
        self._timeout = timeout
        self._shared_http = http_client

    @asynccontextmanager
    async def _http_cm(self):
        if self._shared_http is not None:
            yield self._shared_http
            return
        async with httpx.AsyncClient() as client:
            yield client

    def _build_payload(self, to: str, subject: str, body: str) -> dict[str, Any]:
        return {
            "personalizations": [{"to": [{"email": to}]}],
            "from": self._from,
            "subject": subject,
            "content": [{"type": "text/plain", "value": body}],
        }

    async def send(self, to: str, subject: str, body: str) -> None:
        """Send one email; raise ChannelException unless SendGrid accepts it."""
        try:
            async with self._http_cm() as client:
                response = await client.post(
                    self._url,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                    json=self._build_payload(to, subject, body),
                    timeout=self._timeout,
                )
        except httpx.HTTPError as e:
            raise ChannelException(Channel.EMAIL.value, str(e) or type(e).__name__) from e
        if response.status_code != 202:
            raise ChannelException(
                Channel.EMAIL.value,
                _error_message(response),
                status_code=response.status_code,
            )
        logger.info("Email accepted by SendGrid (subject=%r)", subject[:80])


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    errors = payload.get("errors") if isinstance(payload, dict) else None
    if errors and isinstance(errors, list) and isinstance(errors[0], dict):
        return f"HTTP {response.status_code}: {errors[0].get('message', '')}".rstrip(": ")
    return f"HTTP {response.status_code}"
