"""Workflow trigger value objects.

Every trigger names the event type it listens to; the richer kinds also
inspect the event payload. Payload fields that are missing or malformed
never match (fail closed).
"""

import logging
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Any, ClassVar, TypeAlias

from clientchain.shared.utils.datetime import parse_iso_datetime

logger = logging.getLogger(__name__)


def _require_event_type(value: object) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("event_type must be a non-empty string")


def _as_number(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


@dataclass(frozen=True)
class EventTrigger:
    """Matches on event type alone."""

    event_type: str
    kind: ClassVar[str] = "event"

    def __post_init__(self) -> None:
        _require_event_type(self.event_type)

    def matches(self, event_type: str, payload: Mapping[str, Any], now: datetime) -> bool:
        return event_type == self.event_type


@dataclass(frozen=True)
class EqualsTrigger:
    """Matches when ``payload[field] == value`` (e.g. booking_status == completed)."""

    event_type: str
    field: str
    value: Any
    kind: ClassVar[str] = "equals"

    def __post_init__(self) -> None:
        _require_event_type(self.event_type)
        if not isinstance(self.field, str) or not self.field:
            raise ValueError("field must be a non-empty string")

    def matches(self, event_type: str, payload: Mapping[str, Any], now: datetime) -> bool:
        if event_type != self.event_type:
            return False
        if self.field not in payload:
            logger.warning("Trigger field %s missing from %s payload", self.field, event_type)
            return False
        return payload[self.field] == self.value


@dataclass(frozen=True)
class ThresholdTrigger:
    """Matches when the numeric ``payload[field]`` is strictly above ``threshold``."""

    event_type: str
    threshold: float
    field: str = "lead_score"
    kind: ClassVar[str] = "threshold"

    def __post_init__(self) -> None:
        _require_event_type(self.event_type)
        if _as_number(self.threshold) is None:
            raise ValueError("threshold must be a number")

    def matches(self, event_type: str, payload: Mapping[str, Any], now: datetime) -> bool:
        if event_type != self.event_type:
            return False
        value = _as_number(payload.get(self.field))
        if value is None:
            logger.warning("Trigger field %s is not numeric in %s payload", self.field, event_type)
            return False
        return value > float(self.threshold)


@dataclass(frozen=True)
class ElapsedTrigger:
    """Matches when at least ``days`` have passed since ``payload[field]``.

    A numeric ``days_since`` in the payload is accepted in place of a timestamp.
    """

    event_type: str
    days: int
    field: str = "last_referral_at"
    kind: ClassVar[str] = "elapsed"

    def __post_init__(self) -> None:
        _require_event_type(self.event_type)
        if isinstance(self.days, bool) or not isinstance(self.days, int) or self.days < 0:
            raise ValueError("days must be a non-negative integer")

    def matches(self, event_type: str, payload: Mapping[str, Any], now: datetime) -> bool:
        if event_type != self.event_type:
            return False
        days_since = _as_number(payload.get("days_since"))
        if days_since is not None:
            return days_since >= self.days
        since = parse_iso_datetime(payload.get(self.field))
        if since is None:
            logger.warning("Trigger field %s is not a timestamp in %s payload", self.field, event_type)
            return False
        return now - since >= timedelta(days=self.days)


@dataclass(frozen=True)
class WithinTrigger:
    """Matches when ``payload[field]`` lies within the last ``hours`` hours."""

    event_type: str
    hours: float
    field: str = "occurred_at"
    kind: ClassVar[str] = "within"

    def __post_init__(self) -> None:
        _require_event_type(self.event_type)
        hours = _as_number(self.hours)
        if hours is None or hours <= 0:
            raise ValueError("hours must be a positive number")

    def matches(self, event_type: str, payload: Mapping[str, Any], now: datetime) -> bool:
        if event_type != self.event_type:
            return False
        at = parse_iso_datetime(payload.get(self.field))
        if at is None:
            logger.warning("Trigger field %s is not a timestamp in %s payload", self.field, event_type)
            return False
        age = now - at
        return timedelta(0) <= age <= timedelta(hours=float(self.hours))


Trigger: TypeAlias = EventTrigger | EqualsTrigger | ThresholdTrigger | ElapsedTrigger | WithinTrigger

TRIGGER_TYPES: dict[str, type[Trigger]] = {
    cls.kind: cls
    for cls in (EventTrigger, EqualsTrigger, ThresholdTrigger, ElapsedTrigger, WithinTrigger)
}


def parse_trigger(raw: Mapping[str, Any]) -> Trigger:
    """Build a trigger from its stored dict form. ``kind`` defaults to ``event``.

    Raises:
        ValueError: Unknown kind, unexpected or missing keys, or invalid values.
    """
    if not isinstance(raw, Mapping):
        raise ValueError("trigger must be an object")
    kind = raw.get("kind", EventTrigger.kind)
    trigger_cls = TRIGGER_TYPES.get(kind) if isinstance(kind, str) else None
    if trigger_cls is None:
        raise ValueError(f"unknown trigger kind: {kind!r}")
    params = {k: v for k, v in raw.items() if k != "kind"}
    try:
        return trigger_cls(**params)
    except TypeError as e:
        raise ValueError(f"invalid {kind} trigger: {e}") from e


def trigger_to_dict(trigger: Trigger) -> dict[str, Any]:
    """Return the stored dict form of a trigger (``kind`` plus its fields)."""
    return {"kind": trigger.kind, **asdict(trigger)}
