"""Policy veto value object returned (never raised) by the policy guards."""

from dataclasses import dataclass

from clientchain.shared.enums import Channel


@dataclass(frozen=True)
class PolicyVeto:
    """A guard's refusal to let a message go out.

    Attributes:
        guard: Name of the guard that vetoed (consent, quiet_hours, rate_limit).
        channel: Channel the veto applies to.
        reason: Short machine-friendly reason (e.g. opted_out_sms).
    """

    guard: str
    channel: Channel
    reason: str

    def describe(self) -> str:
        return f"{self.guard}: {self.reason}"
