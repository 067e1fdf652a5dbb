"""Outbound channel adapters (Twilio, SendGrid, webhook) against httpx.MockTransport."""

import json
from urllib.parse import parse_qs

import httpx
import pytest

from clientchain.core.config import Settings
from clientchain.domain.exceptions import ChannelException
from clientchain.infrastructure.external.channels import (
    LogOnlyEmailSender,
    LogOnlySmsSender,
    NotificationChannelAdapter,
    SendGridEmailSender,
    TwilioSmsSender,
    build_notification_channel,
)
from clientchain.infrastructure.external.webhook import HttpxWebhookClient


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def test_twilio_posts_form_to_account_messages() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={"sid": "SM1"})

    async with _client(handler) as http:
        sender = TwilioSmsSender("AC123", "secret", "+15550000000", http_client=http)
        await sender.send("+15551234567", "Hello")

    request = seen[0]
    assert request.url == "https://api.twilio.com/2010-04-01/Accounts/AC123/Messages.json"
    assert request.headers["authorization"].startswith("Basic ")
    form = parse_qs(request.content.decode())
    assert form == {"To": ["+15551234567"], "From": ["+15550000000"], "Body": ["Hello"]}


async def test_twilio_error_raises_channel_exception_with_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"code": 21211, "message": "Invalid 'To' Phone Number"})

    async with _client(handler) as http:
        sender = TwilioSmsSender("AC123", "secret", "+15550000000", http_client=http)
        with pytest.raises(ChannelException) as exc_info:
            await sender.send("bogus", "Hello")

    assert exc_info.value.message == "sms delivery failed: HTTP 400: Invalid 'To' Phone Number"
    assert exc_info.value.details == {"channel": "sms", "status_code": 400}


async def test_twilio_transport_error_raises_channel_exception() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as http:
        sender = TwilioSmsSender("AC123", "secret", "+15550000000", http_client=http)
        with pytest.raises(ChannelException) as exc_info:
            await sender.send("+15551234567", "Hello")

    assert exc_info.value.details == {"channel": "sms"}
    assert "connection refused" in exc_info.value.message


async def test_sendgrid_posts_plain_text_mail() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(202)

    async with _client(handler) as http:
        sender = SendGridEmailSender("SG.key", "hi@clinic.test", "Clinic", http_client=http)
        await sender.send("ana@example.com", "Share your results", "Post a story")

    request = seen[0]
    assert request.url == "https://api.sendgrid.com/v3/mail/send"
    assert request.headers["authorization"] == "Bearer SG.key"
    assert json.loads(request.content) == {
        "personalizations": [{"to": [{"email": "ana@example.com"}]}],
        "from": {"email": "hi@clinic.test", "name": "Clinic"},
        "subject": "Share your results",
        "content": [{"type": "text/plain", "value": "Post a story"}],
    }


async def test_sendgrid_anything_but_202_is_a_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"errors": [{"message": "bad key"}]})

    async with _client(handler) as http:
        sender = SendGridEmailSender("SG.bad", "hi@clinic.test", http_client=http)
        with pytest.raises(ChannelException) as exc_info:
            await sender.send("ana@example.com", "s", "b")

    assert exc_info.value.message == "email delivery failed: HTTP 401: bad key"
    assert exc_info.value.details["status_code"] == 401


async def test_webhook_posts_json_and_rejects_non_2xx() -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200 if request.url.path == "/ok" else 503)

    async with _client(handler) as http:
        client = HttpxWebhookClient(http_client=http)
        await client.post_json("https://hooks.test/ok", {"subject_id": "s1"})
        with pytest.raises(ChannelException) as exc_info:
            await client.post_json("https://hooks.test/down", {"subject_id": "s1"})

    assert bodies == [{"subject_id": "s1"}, {"subject_id": "s1"}]
    assert exc_info.value.details == {"channel": "webhook", "status_code": 503}


async def test_adapter_routes_to_the_right_sender() -> None:
    sms_calls: list[tuple] = []
    email_calls: list[tuple] = []

    class Sms:
        async def send(self, to: str, body: str) -> None:
            sms_calls.append((to, body))

    class Email:
        async def send(self, to: str, subject: str, body: str) -> None:
            email_calls.append((to, subject, body))

    adapter = NotificationChannelAdapter(sms=Sms(), email=Email())
    await adapter.send_sms("+1555", "hi")
    await adapter.send_email("a@b.test", "s", "b")

    assert sms_calls == [("+1555", "hi")]
    assert email_calls == [("a@b.test", "s", "b")]


async def test_factory_falls_back_to_log_only_senders() -> None:
    adapter = build_notification_channel(Settings(_env_file=None))

    assert isinstance(adapter._sms, LogOnlySmsSender)
    assert isinstance(adapter._email, LogOnlyEmailSender)
    await adapter.send_sms("+15551234567", "hi")
    await adapter.send_email("ana@example.com", "s", "b")


def test_factory_uses_gateways_when_configured() -> None:
    settings = Settings(
        _env_file=None,
        twilio_account_sid="AC123",
        twilio_auth_token="secret",
        twilio_from_number="+15550000000",
        sendgrid_api_key="SG.key",
    )

    adapter = build_notification_channel(settings)

    assert isinstance(adapter._sms, TwilioSmsSender)
    assert isinstance(adapter._email, SendGridEmailSender)
