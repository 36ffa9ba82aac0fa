"""Wallet API response shapes."""

from datetime import datetime

from pydantic import Field

from donutsme.common.schemas import CamelModel


class WalletOut(CamelModel):
    id: str
    user_id: str
    address: str
    chain_type: str
    wallet_type: str
    is_primary: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BalanceSnapshotOut(CamelModel):
    id: int
    wallet_id: str
    chain: str
    asset: str
    raw_value: str
    raw_value_decimals: int
    display_value_native: str | None = None
    display_value_usd: str | None = None
    snapshot_at: datetime | None = None


class WalletBalancesOut(CamelModel):
    wallet_id: str
    address: str
    balances: list[dict] = Field(default_factory=list)


class TotalBalanceOut(CamelModel):
    total_usd: str
    wallets: list[WalletBalancesOut] = Field(default_factory=list)
