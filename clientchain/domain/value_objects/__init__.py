"""Domain value objects: workflow actions and triggers, policy vetoes.

Value objects are immutable and validate themselves on construction.
"""

from clientchain.domain.value_objects.actions import (
    Action,
    AddCredits,
    CreateTask,
    InvokeWebhook,
    NotifyReferrer,
    RecordPrompt,
    SendEmail,
    SendSms,
    UpdateSubject,
    Wait,
    action_to_dict,
    parse_action,
)
from clientchain.domain.value_objects.policy import PolicyVeto
from clientchain.domain.value_objects.triggers import (
    ElapsedTrigger,
    EqualsTrigger,
    EventTrigger,
    ThresholdTrigger,
    Trigger,
    WithinTrigger,
    parse_trigger,
    trigger_to_dict,
)

__all__ = [
    "Action",
    "AddCredits",
    "CreateTask",
    "InvokeWebhook",
    "NotifyReferrer",
    "RecordPrompt",
    "SendEmail",
    "SendSms",
    "UpdateSubject",
    "Wait",
    "action_to_dict",
    "parse_action",
    "PolicyVeto",
    "ElapsedTrigger",
    "EqualsTrigger",
    "EventTrigger",
    "ThresholdTrigger",
    "Trigger",
    "WithinTrigger",
    "parse_trigger",
    "trigger_to_dict",
]
