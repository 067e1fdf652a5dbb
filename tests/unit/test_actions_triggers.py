"""Action and trigger value objects: parsing, validation, matching."""

from datetime import UTC, datetime, timedelta

import pytest

from clientchain.domain.value_objects.actions import (
    AddCredits,
    InvokeWebhook,
    NotifyReferrer,
    UpdateSubject,
    Wait,
    action_to_dict,
    parse_action,
)
from clientchain.domain.value_objects.triggers import (
    ElapsedTrigger,
    EqualsTrigger,
    EventTrigger,
    ThresholdTrigger,
    WithinTrigger,
    parse_trigger,
    trigger_to_dict,
)
from clientchain.shared.enums import Channel

NOW = datetime(2026, 3, 10, 15, 0, tzinfo=UTC)


def test_parse_action_builds_typed_action() -> None:
    action = parse_action({"kind": "notify_referrer", "message": "Hi", "credit_amount": 75})
    assert action == NotifyReferrer("Hi", 75)
    assert action.channel == Channel.SMS


def test_action_dict_form_keeps_kind() -> None:
    assert action_to_dict(AddCredits(75)) == {"kind": "add_credits", "amount": 75}
    assert action_to_dict(Wait(60)) == {"kind": "wait", "seconds": 60}


@pytest.mark.parametrize(
    "raw",
    [
        {"kind": "send_sms"},
        {"kind": "send_sms", "message": "  "},
        {"kind": "send_sms", "message": "Hi", "extra": 1},
        {"kind": "wait", "seconds": True},
        {"kind": "wait", "seconds": "60"},
        {"kind": "add_credits", "amount": -1},
        {"kind": "invoke_webhook", "url": "ftp://example.com"},
        {"kind": "update_subject", "fields": {}},
        {"message": "no kind"},
        "send_sms",
    ],
)
def test_parse_action_rejects_invalid_input(raw) -> None:
    with pytest.raises(ValueError):
        parse_action(raw)


def test_update_subject_may_not_touch_credits() -> None:
    with pytest.raises(ValueError, match="credits"):
        UpdateSubject({"credits": 1000})


def test_webhook_requires_http_url() -> None:
    assert InvokeWebhook("https://example.com/hook").url == "https://example.com/hook"


def test_parse_trigger_defaults_to_event_kind() -> None:
    assert parse_trigger({"event_type": "friend_tagged"}) == EventTrigger("friend_tagged")


def test_trigger_dict_form_keeps_kind() -> None:
    assert trigger_to_dict(ThresholdTrigger("lead_score_above", 80)) == {
        "kind": "threshold",
        "event_type": "lead_score_above",
        "threshold": 80,
        "field": "lead_score",
    }


@pytest.mark.parametrize(
    "raw",
    [
        {"kind": "event"},
        {"kind": "event", "event_type": ""},
        {"kind": "threshold", "event_type": "x", "threshold": "high"},
        {"kind": "elapsed", "event_type": "x", "days": -1},
        {"kind": "within", "event_type": "x", "hours": 0},
        {"kind": "sometimes", "event_type": "x"},
    ],
)
def test_parse_trigger_rejects_invalid_input(raw) -> None:
    with pytest.raises(ValueError):
        parse_trigger(raw)


def test_event_trigger_matches_on_type_only() -> None:
    trigger = EventTrigger("friend_tagged")
    assert trigger.matches("friend_tagged", {}, NOW)
    assert not trigger.matches("booking_created", {}, NOW)


def test_equals_trigger_compares_payload_field() -> None:
    trigger = EqualsTrigger("booking_completed", "booking_status", "completed")
    assert trigger.matches("booking_completed", {"booking_status": "completed"}, NOW)
    assert not trigger.matches("booking_completed", {"booking_status": "cancelled"}, NOW)
    assert not trigger.matches("booking_completed", {}, NOW)


def test_threshold_trigger_is_strictly_greater() -> None:
    trigger = ThresholdTrigger("lead_score_above", 80)
    assert trigger.matches("lead_score_above", {"lead_score": 81}, NOW)
    assert trigger.matches("lead_score_above", {"lead_score": "90.5"}, NOW)
    assert not trigger.matches("lead_score_above", {"lead_score": 80}, NOW)
    assert not trigger.matches("lead_score_above", {"lead_score": "n/a"}, NOW)
    assert not trigger.matches("lead_score_above", {}, NOW)


def test_elapsed_trigger_uses_timestamp_or_days_since() -> None:
    trigger = ElapsedTrigger("no_referral_since", 30)
    old = (NOW - timedelta(days=31)).isoformat()
    recent = (NOW - timedelta(days=3)).isoformat().replace("+00:00", "Z")
    assert trigger.matches("no_referral_since", {"last_referral_at": old}, NOW)
    assert not trigger.matches("no_referral_since", {"last_referral_at": recent}, NOW)
    assert trigger.matches("no_referral_since", {"days_since": 30}, NOW)
    assert not trigger.matches("no_referral_since", {"last_referral_at": "yesterday"}, NOW)


def test_within_trigger_accepts_only_recent_past() -> None:
    trigger = WithinTrigger("booking_abandoned", 2, field="abandoned_at")
    inside = (NOW - timedelta(minutes=90)).isoformat()
    outside = (NOW - timedelta(hours=3)).isoformat()
    future = (NOW + timedelta(minutes=5)).isoformat()
    assert trigger.matches("booking_abandoned", {"abandoned_at": inside}, NOW)
    assert not trigger.matches("booking_abandoned", {"abandoned_at": outside}, NOW)
    assert not trigger.matches("booking_abandoned", {"abandoned_at": future}, NOW)
