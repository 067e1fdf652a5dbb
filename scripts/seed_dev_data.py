"""Seed dev data: a few subject profiles and the built-in workflow templates.

Usage:
    uv run python -m scripts.seed_dev_data [template_name ...]

With no arguments every template is applied. Templates that already exist
(same name) are skipped; subjects are created only when their id is free.
Requires: DATABASE_URL (Postgres) and `alembic upgrade head`.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

from clientchain.application.use_cases.workflows import (
    WORKFLOW_TEMPLATES,
    WorkflowDefinitionStore,
)
from clientchain.core.config import get_settings
from clientchain.domain.entities.subject import SubjectProfile
from clientchain.infrastructure.persistence import database
from clientchain.infrastructure.persistence.repositories import (
    SubjectRepository,
    WorkflowDefinitionRepository,
)

DEV_SUBJECTS: list[SubjectProfile] = [
    SubjectProfile(
        id="dev_subject_ana",
        display_name="Ana Referrer",
        email="ana@example.com",
        phone="+15555550101",
        timezone="America/New_York",
        credits=100,
        consent_marketing=True,
    ),
    SubjectProfile(
        id="dev_subject_ben",
        display_name="Ben Friend",
        email="ben@example.com",
        phone="+15555550102",
        timezone="Europe/London",
    ),
    SubjectProfile(
        id="dev_subject_cy",
        display_name="Cy Opted Out",
        email="cy@example.com",
        phone="+15555550103",
        opt_out_sms=True,
        opt_out_email=True,
    ),
]


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent


def _load_env() -> None:
    """Load .env from project root so get_settings() sees DATABASE_URL when run as script."""
    load_dotenv(_project_root() / ".env", override=True)


async def main() -> None:
    _load_env()
    settings = get_settings()
    if not settings.database_url:
        print("DATABASE_URL not configured", file=sys.stderr)
        sys.exit(1)
    names = sys.argv[1:] or sorted(WORKFLOW_TEMPLATES)
    unknown = [n for n in names if n not in WORKFLOW_TEMPLATES]
    if unknown:
        print(f"Unknown template(s): {', '.join(unknown)}", file=sys.stderr)
        sys.exit(1)

    session_factory = database.get_session_factory()
    async with session_factory() as session:
        async with session.begin():
            subject_repo = SubjectRepository(session)
            for profile in DEV_SUBJECTS:
                if await subject_repo.get_by_id(profile.id) is None:
                    await subject_repo.create(profile)
                    print(f"Subject {profile.id} created")

            definition_repo = WorkflowDefinitionRepository(session)
            store = WorkflowDefinitionStore(definition_repo, settings.max_wait_seconds)
            existing = {d.name for d in await store.list_definitions(limit=1000)}
            for name in names:
                if name in existing:
                    print(f"Template {name} already applied, skipping")
                    continue
                definition = await store.apply_template(name)
                print(f"Template {name} applied as workflow {definition.id}")

    await database.engine.dispose()
    print("Done.")


if __name__ == "__main__":
    asyncio.run(main())
