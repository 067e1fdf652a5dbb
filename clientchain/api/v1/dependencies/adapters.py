"""Outbound adapters held on app state by the lifespan."""

from __future__ import annotations

from fastapi import Request

from clientchain.application.interfaces.services import (
    INotificationChannel,
    IRateLimitCounter,
    IWebhookClient,
)


def get_notification_channel(request: Request) -> INotificationChannel:
    return request.app.state.notification_channel


def get_rate_limit_counter(request: Request) -> IRateLimitCounter:
    return request.app.state.rate_limit_counter


def get_webhook_client(request: Request) -> IWebhookClient:
    return request.app.state.webhook_client
