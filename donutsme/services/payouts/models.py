"""Payout Record table."""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from donutsme.common.db import Base, JSONType


class Payout(Base):
    """One payout attempt, keyed by the processor's payout id.

    `amount` holds integer minor units as a decimal string.
    """

    __tablename__ = "payouts"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    stripe_account_id: Mapped[str] = mapped_column(
        ForeignKey("stripe_accounts.id", ondelete="CASCADE"), index=True
    )
    amount: Mapped[str] = mapped_column(String(100))
    currency: Mapped[str] = mapped_column(String(10))
    status: Mapped[str] = mapped_column(String(50), index=True)
    arrival_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    destination_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    destination_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    failure_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    failure_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    snapshot: Mapped[dict | None] = mapped_column("metadata", JSONType, nullable=True)
    # Processor `created` epoch of the last webhook event applied to this row.
    last_event_created: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
