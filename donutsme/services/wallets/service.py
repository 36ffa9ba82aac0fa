"""Wallet lookups, live balances, and USD balance aggregation."""

from decimal import Decimal

from sqlalchemy import select

from donutsme.clients.privy_client import PrivyClient, WalletBalanceResponse
from donutsme.common.errors import Forbidden, NotFound
from donutsme.common.logging import logger
from donutsme.common.metrics import wallet_balance_fetch_failures_total
from donutsme.common.money import format_total, parse_display_value
from donutsme.services.wallets.models import Wallet, WalletBalance
from donutsme.services.wallets.schemas import (
    BalanceSnapshotOut,
    TotalBalanceOut,
    WalletBalancesOut,
    WalletOut,
)


class WalletService:
    def __init__(self, session_factory, identity: PrivyClient) -> None:
        self.session_factory = session_factory
        self.identity = identity

    def list_wallets(self, user_id: str) -> list[WalletOut]:
        with self.session_factory() as db:
            rows = db.execute(select(Wallet).where(Wallet.user_id == user_id)).scalars().all()
            return [WalletOut.model_validate(w) for w in rows]

    def primary_wallet(self, user_id: str) -> WalletOut:
        """Flagged primary wallet, else the first one on record."""

        with self.session_factory() as db:
            wallet = db.execute(
                select(Wallet).where(Wallet.user_id == user_id, Wallet.is_primary.is_(True)).limit(1)
            ).scalar_one_or_none()
            if wallet is None:
                wallet = db.execute(select(Wallet).where(Wallet.user_id == user_id).limit(1)).scalar_one_or_none()
            if wallet is None:
                raise NotFound("User does not have any wallets", error="No wallet found")
            return WalletOut.model_validate(wallet)

    def get_owned_wallet(self, user_id: str, wallet_id: str) -> WalletOut:
        with self.session_factory() as db:
            wallet = db.get(Wallet, wallet_id)
            if wallet is None:
                raise NotFound("The specified wallet does not exist", error="Wallet not found")
            if wallet.user_id != user_id:
                raise Forbidden("You do not have access to this wallet")
            return WalletOut.model_validate(wallet)

    def fetch_balance(self, wallet_id: str) -> WalletBalanceResponse:
        """Live balance from the wallet provider; each asset is stored as a snapshot."""

        balance = self.identity.get_wallet_balance(wallet_id)
        with self.session_factory() as db:
            for entry in balance.balances:
                db.add(
                    WalletBalance(
                        wallet_id=wallet_id,
                        chain=entry.chain,
                        asset=entry.asset,
                        raw_value=entry.raw_value,
                        raw_value_decimals=entry.raw_value_decimals,
                        display_value_native=entry.display_native,
                        display_value_usd=entry.display_usd,
                    )
                )
            db.commit()
        return balance

    def wallet_balance(self, user_id: str, wallet_id: str) -> WalletBalanceResponse:
        self.get_owned_wallet(user_id, wallet_id)
        return self.fetch_balance(wallet_id)

    def balance_history(self, user_id: str, wallet_id: str, limit: int = 30) -> list[BalanceSnapshotOut]:
        self.get_owned_wallet(user_id, wallet_id)
        with self.session_factory() as db:
            rows = db.execute(
                select(WalletBalance)
                .where(WalletBalance.wallet_id == wallet_id)
                .order_by(WalletBalance.snapshot_at.desc(), WalletBalance.id.desc())
                .limit(limit)
            ).scalars().all()
            return [BalanceSnapshotOut.model_validate(r) for r in rows]

    def total_balance(self, user_id: str) -> TotalBalanceOut:
        """Sum USD display values across every wallet of the creator.

        Wallets are fetched one at a time. A wallet whose fetch fails is logged
        and left out, so the total may be under-counted rather than the whole
        request failing.
        """

        total = Decimal(0)
        per_wallet: list[WalletBalancesOut] = []
        for wallet in self.list_wallets(user_id):
            try:
                balance = self.fetch_balance(wallet.id)
            except Exception as exc:
                wallet_balance_fetch_failures_total.inc()
                logger.warning("wallet_balance_skipped wallet_id=%s error=%s", wallet.id, exc)
                continue
            for entry in balance.balances:
                total += parse_display_value(entry.display_usd)
            per_wallet.append(
                WalletBalancesOut(
                    wallet_id=wallet.id,
                    address=wallet.address,
                    balances=[entry.model_dump() for entry in balance.balances],
                )
            )
        return TotalBalanceOut(total_usd=format_total(total), wallets=per_wallet)
