"""Workflow definition store: create, read, list, pause/resume, replace, templates."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from clientchain.application.interfaces.repositories import IWorkflowDefinitionRepository
from clientchain.application.use_cases.workflows.templates import WORKFLOW_TEMPLATES
from clientchain.domain.entities.workflow import WorkflowDefinition
from clientchain.domain.exceptions import ResourceNotFoundException, ValidationException
from clientchain.domain.value_objects.actions import Action, Wait, parse_action
from clientchain.domain.value_objects.triggers import Trigger, parse_trigger
from clientchain.shared.enums import WorkflowStatus
from clientchain.shared.utils.datetime import Clock, utc_now
from clientchain.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)


class WorkflowDefinitionStore:
    """Owns definition validation; persistence goes through the repository."""

    def __init__(
        self,
        definition_repo: IWorkflowDefinitionRepository,
        max_wait_seconds: int,
        clock: Clock = utc_now,
    ) -> None:
        self.definition_repo = definition_repo
        self.max_wait_seconds = max_wait_seconds
        self.clock = clock

    def _parse_triggers(self, raw: Sequence[dict[str, Any]]) -> list[Trigger]:
        if not raw:
            raise ValidationException("Workflow needs at least one trigger", field="triggers")
        triggers: list[Trigger] = []
        for i, item in enumerate(raw):
            try:
                triggers.append(parse_trigger(item))
            except ValueError as e:
                raise ValidationException(f"triggers[{i}]: {e}", field="triggers") from e
        return triggers

    def _parse_actions(self, raw: Sequence[dict[str, Any]]) -> list[Action]:
        if not raw:
            raise ValidationException("Workflow needs at least one action", field="actions")
        actions: list[Action] = []
        for i, item in enumerate(raw):
            try:
                action = parse_action(item)
            except ValueError as e:
                raise ValidationException(f"actions[{i}]: {e}", field="actions") from e
            if isinstance(action, Wait) and action.seconds > self.max_wait_seconds:
                raise ValidationException(
                    f"actions[{i}]: wait may not exceed {self.max_wait_seconds} seconds",
                    field="actions",
                )
            actions.append(action)
        return actions

    async def create(
        self,
        name: str,
        triggers: Sequence[dict[str, Any]],
        actions: Sequence[dict[str, Any]],
        description: str | None = None,
    ) -> WorkflowDefinition:
        """Validate and store a new active definition.

        Raises:
            ValidationException: empty or invalid triggers/actions, blank name.
        """
        now = self.clock()
        definition = WorkflowDefinition(
            id=generate_cuid(),
            name=name,
            description=description,
            triggers=self._parse_triggers(triggers),
            actions=self._parse_actions(actions),
            status=WorkflowStatus.ACTIVE,
            revision=1,
            created_at=now,
            updated_at=now,
        )
        created = await self.definition_repo.create(definition)
        logger.info("Workflow %s created (%s)", created.id, created.name)
        return created

    async def get(self, workflow_id: str) -> WorkflowDefinition:
        definition = await self.definition_repo.get_by_id(workflow_id)
        if definition is None:
            raise ResourceNotFoundException("workflow", workflow_id)
        return definition

    async def list_definitions(
        self,
        status: str | None = None,
        event_type: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[WorkflowDefinition]:
        return await self.definition_repo.list_definitions(
            status=self._coerce_status(status) if status else None,
            event_type=event_type,
            skip=skip,
            limit=limit,
        )

    async def set_status(self, workflow_id: str, status: str) -> WorkflowDefinition:
        """Pause or resume a definition. Paused definitions neither dispatch nor advance."""
        new_status = self._coerce_status(status)
        definition = await self.get(workflow_id)
        if definition.status == new_status:
            return definition
        definition.status = new_status
        definition.updated_at = self.clock()
        updated = await self.definition_repo.update(definition)
        logger.info("Workflow %s is now %s", workflow_id, new_status.value)
        return updated

    async def replace(
        self,
        workflow_id: str,
        name: str,
        triggers: Sequence[dict[str, Any]],
        actions: Sequence[dict[str, Any]],
        description: str | None = None,
    ) -> WorkflowDefinition:
        """Swap in new content and bump the revision.

        Running executions pinned to the old revision fail on their next advance.
        """
        definition = await self.get(workflow_id)
        definition.triggers = self._parse_triggers(triggers)
        definition.actions = self._parse_actions(actions)
        definition.name = name
        definition.description = description
        definition.validate()
        definition.revision += 1
        definition.updated_at = self.clock()
        updated = await self.definition_repo.update(definition)
        logger.info("Workflow %s replaced (revision %d)", workflow_id, updated.revision)
        return updated

    async def apply_template(self, template_name: str) -> WorkflowDefinition:
        """Create an active definition from a built-in template."""
        template = WORKFLOW_TEMPLATES.get(template_name)
        if template is None:
            raise ValidationException(f"Unknown template: {template_name}", field="name")
        return await self.create(
            name=template_name,
            triggers=template["triggers"],
            actions=template["actions"],
            description=template.get("description"),
        )

    @staticmethod
    def _coerce_status(status: str) -> WorkflowStatus:
        try:
            return WorkflowStatus(status)
        except ValueError:
            raise ValidationException(
                f"Invalid status '{status}'; expected one of {', '.join(WorkflowStatus.values())}",
                field="status",
            ) from None
