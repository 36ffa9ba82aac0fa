"""Wallet sync, ownership checks, and USD balance aggregation."""

import pytest

from conftest import embedded_wallet, external_wallet, usd_balance
from donutsme.clients.privy_client import ProviderWallets
from donutsme.common.cache import TTLCache
from donutsme.common.errors import Forbidden, NotFound
from donutsme.services.users.service import UserService
from donutsme.services.wallets.service import WalletService

ALICE = "did:privy:alice"


@pytest.fixture
def users(session_factory, identity):
    return UserService(session_factory, identity, TTLCache(5.0))


@pytest.fixture
def wallets(session_factory, identity):
    return WalletService(session_factory, identity)


@pytest.fixture
def synced(users, identity, add_user):
    add_user()
    identity.wallets[ALICE] = ProviderWallets(
        embedded=[embedded_wallet("0xaaa", "w_emb_1"), embedded_wallet("0xbbb", "w_emb_2")],
        external=[external_wallet("0xccc")],
    )
    return users.sync_wallets(ALICE)


def test_sync_marks_only_first_embedded_wallet_primary(synced):
    by_address = {w.address: w for w in synced}
    assert by_address["0xaaa"].is_primary is True
    assert by_address["0xbbb"].is_primary is False
    assert by_address["0xccc"].is_primary is False
    assert by_address["0xccc"].wallet_type == "external"
    # External wallets without a provider id are keyed by address.
    assert by_address["0xccc"].id == "0xccc"


def test_sync_is_repeatable(users, synced):
    assert len(users.sync_wallets(ALICE)) == len(synced) == 3


def test_primary_wallet_and_ownership(wallets, synced, add_user):
    add_user("did:privy:bob", "bob")
    assert wallets.primary_wallet(ALICE).id == "w_emb_1"
    with pytest.raises(NotFound):
        wallets.primary_wallet("did:privy:bob")
    with pytest.raises(Forbidden):
        wallets.get_owned_wallet("did:privy:bob", "w_emb_1")
    with pytest.raises(NotFound):
        wallets.get_owned_wallet(ALICE, "w_missing")


def test_balance_fetch_stores_history_snapshots(wallets, identity, synced):
    identity.balances["w_emb_1"] = usd_balance("10.50", "2.25")

    balance = wallets.wallet_balance(ALICE, "w_emb_1")
    history = wallets.balance_history(ALICE, "w_emb_1", limit=30)

    assert len(balance.balances) == 2
    assert sorted(h.display_value_usd for h in history) == ["10.50", "2.25"]


def test_total_balance_skips_failing_wallet(wallets, identity, synced):
    """One provider failure under-counts the total instead of failing the request."""

    identity.balances["w_emb_1"] = usd_balance("10.50", "2.25")
    identity.balances["0xccc"] = usd_balance("1.10")
    identity.failing_wallets.add("w_emb_2")

    total = wallets.total_balance(ALICE)

    assert total.total_usd == "13.85"
    assert sorted(w.wallet_id for w in total.wallets) == ["0xccc", "w_emb_1"]


def test_total_balance_without_wallets_is_zero(wallets, add_user):
    add_user()
    assert wallets.total_balance(ALICE).total_usd == "0.00"
