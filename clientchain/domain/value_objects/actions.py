"""Workflow action value objects.

An action list is a closed set of kinds; each kind is a frozen dataclass that
validates itself on construction (ValueError on bad input). Definitions store
actions as plain dicts tagged with ``kind``; parse_action / action_to_dict are
the only conversions between the two forms.
"""

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar, TypeAlias

from clientchain.core.constants import SUBJECT_PROTECTED_FIELDS
from clientchain.shared.enums import Channel


def _require_text(value: object, name: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{name} must be a non-empty string")


def _require_int(value: object, name: str, minimum: int) -> None:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer")
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")


@dataclass(frozen=True)
class Wait:
    """Suspend the execution for ``seconds``; the only suspension point."""

    seconds: int
    kind: ClassVar[str] = "wait"
    channel: ClassVar[Channel | None] = None

    def __post_init__(self) -> None:
        _require_int(self.seconds, "seconds", 0)


@dataclass(frozen=True)
class SendSms:
    message: str
    kind: ClassVar[str] = "send_sms"
    channel: ClassVar[Channel | None] = Channel.SMS

    def __post_init__(self) -> None:
        _require_text(self.message, "message")


@dataclass(frozen=True)
class SendEmail:
    subject: str
    body: str
    kind: ClassVar[str] = "send_email"
    channel: ClassVar[Channel | None] = Channel.EMAIL

    def __post_init__(self) -> None:
        _require_text(self.subject, "subject")
        _require_text(self.body, "body")


@dataclass(frozen=True)
class AddCredits:
    amount: int
    kind: ClassVar[str] = "add_credits"
    channel: ClassVar[Channel | None] = None

    def __post_init__(self) -> None:
        _require_int(self.amount, "amount", 1)


@dataclass(frozen=True)
class UpdateSubject:
    """Merge ``fields`` into the subject profile. Credits and id are off limits."""

    fields: dict[str, Any] = field(default_factory=dict)
    kind: ClassVar[str] = "update_subject"
    channel: ClassVar[Channel | None] = None

    def __post_init__(self) -> None:
        if not isinstance(self.fields, Mapping) or not self.fields:
            raise ValueError("fields must be a non-empty object")
        protected = SUBJECT_PROTECTED_FIELDS.intersection(self.fields)
        if protected:
            raise ValueError(f"fields may not set {', '.join(sorted(protected))}")


@dataclass(frozen=True)
class InvokeWebhook:
    url: str
    kind: ClassVar[str] = "invoke_webhook"
    channel: ClassVar[Channel | None] = None

    def __post_init__(self) -> None:
        _require_text(self.url, "url")
        if not self.url.startswith(("http://", "https://")):
            raise ValueError("url must be an http(s) URL")


@dataclass(frozen=True)
class CreateTask:
    title: str
    kind: ClassVar[str] = "create_task"
    channel: ClassVar[Channel | None] = None

    def __post_init__(self) -> None:
        _require_text(self.title, "title")


@dataclass(frozen=True)
class RecordPrompt:
    """Leave a prompt marker (e.g. friend_tagging) for the front-desk client."""

    prompt_kind: str
    kind: ClassVar[str] = "record_prompt"
    channel: ClassVar[Channel | None] = None

    def __post_init__(self) -> None:
        _require_text(self.prompt_kind, "prompt_kind")


@dataclass(frozen=True)
class NotifyReferrer:
    """Text the referrer named in the execution context and award them credits.

    The SMS goes through the policy guards for the referrer; the credit award
    does not.
    """

    message: str
    credit_amount: int = 0
    kind: ClassVar[str] = "notify_referrer"
    channel: ClassVar[Channel | None] = Channel.SMS

    def __post_init__(self) -> None:
        _require_text(self.message, "message")
        _require_int(self.credit_amount, "credit_amount", 0)


Action: TypeAlias = (
    Wait
    | SendSms
    | SendEmail
    | AddCredits
    | UpdateSubject
    | InvokeWebhook
    | CreateTask
    | RecordPrompt
    | NotifyReferrer
)

ACTION_TYPES: dict[str, type[Action]] = {
    cls.kind: cls
    for cls in (
        Wait,
        SendSms,
        SendEmail,
        AddCredits,
        UpdateSubject,
        InvokeWebhook,
        CreateTask,
        RecordPrompt,
        NotifyReferrer,
    )
}


def parse_action(raw: Mapping[str, Any]) -> Action:
    """Build an action from its stored dict form.

    Raises:
        ValueError: Unknown kind, unexpected or missing keys, or invalid values.
    """
    if not isinstance(raw, Mapping):
        raise ValueError("action must be an object")
    kind = raw.get("kind")
    action_cls = ACTION_TYPES.get(kind) if isinstance(kind, str) else None
    if action_cls is None:
        raise ValueError(f"unknown action kind: {kind!r}")
    params = {k: v for k, v in raw.items() if k != "kind"}
    try:
        return action_cls(**params)
    except TypeError as e:
        raise ValueError(f"invalid {kind} action: {e}") from e


def action_to_dict(action: Action) -> dict[str, Any]:
    """Return the stored dict form of an action (``kind`` plus its fields)."""
    return {"kind": action.kind, **asdict(action)}
