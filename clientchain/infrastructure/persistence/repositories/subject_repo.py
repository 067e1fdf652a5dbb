"""Subject profile repository: profile reads, field updates, atomic credit deltas."""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession

from clientchain.domain.entities.subject import SubjectProfile
from clientchain.infrastructure.persistence.models.subject import SubjectProfileModel
from clientchain.infrastructure.persistence.repositories.base import BaseRepository


def _to_profile(m: SubjectProfileModel) -> SubjectProfile:
    """Map SubjectProfileModel ORM to the domain entity."""
    return SubjectProfile(
        id=m.id,
        display_name=m.display_name,
        email=m.email,
        phone=m.phone,
        timezone=m.timezone,
        credits=m.credits,
        opt_out_sms=m.opt_out_sms,
        opt_out_email=m.opt_out_email,
        consent_marketing=m.consent_marketing,
        attributes=dict(m.attributes or {}),
    )


class SubjectRepository(BaseRepository[SubjectProfileModel]):
    """Subject profile repository. Implements ISubjectRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, SubjectProfileModel)

    async def get_by_id(self, subject_id: str) -> SubjectProfile | None:
        m = await self._get_model(subject_id, fresh=True)
        return _to_profile(m) if m else None

    async def create(self, profile: SubjectProfile) -> SubjectProfile:
        m = SubjectProfileModel(
            id=profile.id,
            display_name=profile.display_name,
            email=profile.email,
            phone=profile.phone,
            timezone=profile.timezone,
            credits=profile.credits,
            opt_out_sms=profile.opt_out_sms,
            opt_out_email=profile.opt_out_email,
            consent_marketing=profile.consent_marketing,
            attributes=dict(profile.attributes),
        )
        return _to_profile(await self._add(m))

    async def update_fields(
        self, subject_id: str, fields: dict[str, Any], attributes: dict[str, Any]
    ) -> SubjectProfile | None:
        m = await self._get_model(subject_id, for_update=True, fresh=True)
        if m is None:
            return None
        for key, value in fields.items():
            setattr(m, key, value)
        if attributes:
            # New dict so the JSONB column is marked dirty.
            m.attributes = {**(m.attributes or {}), **attributes}
        await self.db.flush()
        await self.db.refresh(m)
        return _to_profile(m)

    async def apply_credit_delta(self, subject_id: str, delta: int) -> int | None:
        stmt = (
            update(SubjectProfileModel)
            .where(SubjectProfileModel.id == subject_id)
            .values(
                credits=SubjectProfileModel.credits + delta,
                updated_at=func.now(),
            )
            .returning(SubjectProfileModel.credits)
            .execution_options(synchronize_session=False)
        )
        if delta < 0:
            stmt = stmt.where(SubjectProfileModel.credits >= -delta)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()
