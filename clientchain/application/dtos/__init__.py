"""Application DTOs: plain results passed between use cases and adapters."""

from clientchain.application.dtos.credit import CreditBalance
from clientchain.application.dtos.task import PromptMarkerResult, TaskResult

__all__ = ["CreditBalance", "PromptMarkerResult", "TaskResult"]
