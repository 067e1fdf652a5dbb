"""Infrastructure composition: engine wiring and the background sweep loop."""

from clientchain.infrastructure.services.automation_factory import (
    AutomationServices,
    build_automation,
    build_credit_ledger,
)
from clientchain.infrastructure.services.sweep_loop import run_sweep_loop, run_sweep_once

__all__ = [
    "AutomationServices",
    "build_automation",
    "build_credit_ledger",
    "run_sweep_loop",
    "run_sweep_once",
]
