"""On-chain wallet records, balance snapshots, and wallet activity tables."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from donutsme.common.db import Base, JSONType


class Wallet(Base):
    """One wallet linked to a creator through the identity provider."""

    __tablename__ = "wallets"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    address: Mapped[str] = mapped_column(String(255), index=True)
    chain_type: Mapped[str] = mapped_column(String(50))
    wallet_type: Mapped[str] = mapped_column(String(50))
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class WalletBalance(Base):
    """Append-only snapshot of one asset balance taken at fetch time."""

    __tablename__ = "wallet_balances"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    wallet_id: Mapped[str] = mapped_column(ForeignKey("wallets.id", ondelete="CASCADE"), index=True)
    chain: Mapped[str] = mapped_column(String(50))
    asset: Mapped[str] = mapped_column(String(50))
    raw_value: Mapped[str] = mapped_column(String(100))
    raw_value_decimals: Mapped[int] = mapped_column(Integer)
    display_value_native: Mapped[str | None] = mapped_column(String(50), nullable=True)
    display_value_usd: Mapped[str | None] = mapped_column(String(50), nullable=True)
    snapshot_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)


class Transaction(Base):
    """Incoming support or outgoing transfer observed on a wallet."""

    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    wallet_id: Mapped[str] = mapped_column(ForeignKey("wallets.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    type: Mapped[str] = mapped_column(String(50), index=True)
    status: Mapped[str] = mapped_column(String(50), index=True)
    chain: Mapped[str] = mapped_column(String(50))
    asset: Mapped[str] = mapped_column(String(50))
    amount: Mapped[str] = mapped_column(String(100))
    amount_decimals: Mapped[int] = mapped_column(Integer)
    display_amount_native: Mapped[str | None] = mapped_column(String(50), nullable=True)
    display_amount_usd: Mapped[str | None] = mapped_column(String(50), nullable=True)
    from_address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    to_address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    tx_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    details: Mapped[dict | None] = mapped_column("metadata", JSONType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class BtcConversion(Base):
    __tablename__ = "btc_conversions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    wallet_id: Mapped[str] = mapped_column(ForeignKey("wallets.id", ondelete="CASCADE"))
    transaction_id: Mapped[str | None] = mapped_column(
        ForeignKey("transactions.id", ondelete="SET NULL"), nullable=True
    )
    from_asset: Mapped[str] = mapped_column(String(50))
    to_asset: Mapped[str] = mapped_column(String(50))
    from_amount: Mapped[str] = mapped_column(String(100))
    to_amount: Mapped[str] = mapped_column(String(100))
    exchange_rate: Mapped[str | None] = mapped_column(String(50), nullable=True)
    exchange_provider: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[str] = mapped_column(String(50), index=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
