"""Subject profile ORM model. Owned by the user subsystem; read and credited here."""

from typing import Any

import sqlalchemy as sa
from sqlalchemy import Boolean, CheckConstraint, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from clientchain.infrastructure.persistence.database import Base
from clientchain.infrastructure.persistence.models.mixins import CuidTimestampModel


class SubjectProfileModel(CuidTimestampModel, Base):
    """Contact, consent, timezone and credit balance. Table: subject_profile."""

    __tablename__ = "subject_profile"

    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    timezone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    credits: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=sa.text("0")
    )
    opt_out_sms: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=sa.text("false")
    )
    opt_out_email: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=sa.text("false")
    )
    consent_marketing: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    attributes: Mapped[dict[str, Any]] = mapped_column(
        JSONB, nullable=False, default=dict, server_default=sa.text("'{}'::jsonb")
    )

    __table_args__ = (
        CheckConstraint("credits >= 0", name="subject_profile_credits_non_negative"),
    )
