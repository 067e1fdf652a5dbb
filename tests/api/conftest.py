"""API test wiring: route dependencies resolve to the in-memory engine."""

import pytest
from fastapi import FastAPI

from clientchain.api.v1.dependencies import (
    get_automation,
    get_credit_ledger,
    get_definition_store,
    get_definition_store_for_read,
    get_workflow_execution_repo,
)
from clientchain.infrastructure.services.automation_factory import AutomationServices


@pytest.fixture(autouse=True)
def engine_overrides(app: FastAPI, engine) -> None:
    services = AutomationServices(
        store=engine.store,
        runner=engine.runner,
        dispatcher=engine.dispatcher,
        sweep=engine.sweep,
        credit_ledger=engine.ledger,
        executions=engine.executions,
    )
    app.dependency_overrides[get_definition_store] = lambda: engine.store
    app.dependency_overrides[get_definition_store_for_read] = lambda: engine.store
    app.dependency_overrides[get_workflow_execution_repo] = lambda: engine.executions
    app.dependency_overrides[get_automation] = lambda: services
    app.dependency_overrides[get_credit_ledger] = lambda: engine.ledger
