"""Credit ledger ORM model (append-only)."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from clientchain.domain.enums import LedgerDirection, LedgerSource
from clientchain.infrastructure.persistence.database import Base
from clientchain.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    CuidMixin,
    in_values_check,
)


class CreditLedgerEntryModel(CuidMixin, CreatedAtMixin, Base):
    """One credit movement with balance snapshots. Table: credit_ledger."""

    __tablename__ = "credit_ledger"

    subject_id: Mapped[str] = mapped_column(String, nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    direction: Mapped[str] = mapped_column(String(16), nullable=False)
    source: Mapped[str] = mapped_column(String(32), nullable=False)
    reference_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    balance_before: Mapped[int] = mapped_column(Integer, nullable=False)
    balance_after: Mapped[int] = mapped_column(Integer, nullable=False)
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        CheckConstraint(
            in_values_check("direction", LedgerDirection.values()),
            name="credit_ledger_direction_check",
        ),
        CheckConstraint(
            in_values_check("source", LedgerSource.values()),
            name="credit_ledger_source_check",
        ),
        CheckConstraint(
            "balance_after = balance_before + amount",
            name="credit_ledger_balance_arithmetic",
        ),
        Index("ix_credit_ledger_subject_created", "subject_id", "created_at"),
    )
