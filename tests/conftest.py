"""Shared fixtures: in-memory database plus fake processor and identity providers."""

import hashlib
import hmac
import json
import time

import pytest
from fastapi.testclient import TestClient

from donutsme.api.app import create_app
from donutsme.clients.privy_client import AuthClaims, LinkedWallet, ProviderWallets, WalletBalanceResponse
from donutsme.clients.stripe_client import AccountObject, BalanceObject, PayoutObject
from donutsme.common.config import Settings
from donutsme.common.db import create_schema, make_engine, make_session_factory
from donutsme.common.errors import Unauthorized, UpstreamError
from donutsme.services.connect.models import StripeAccount
from donutsme.services.connect.signatures import WebhookVerifier
from donutsme.services.users.models import User, UserSettings

WEBHOOK_SECRET = "whsec_test_secret"


class FakeProcessor:
    """Records every call; responses are configurable per test."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.account = AccountObject(id="acct_test_1")
        self.payout_status = "pending"
        self.payouts: list[PayoutObject] = []
        self.balance = BalanceObject.model_validate(
            {"available": [{"amount": 12345, "currency": "usd"}], "pending": [{"amount": 50, "currency": "usd"}]}
        )
        self._payout_seq = 0

    def create_account(self, user_id, email, country):
        self.calls.append(("create_account", user_id, email, country))
        return self.account.model_copy(update={"country": country})

    def create_onboarding_link(self, account_id, refresh_url, return_url):
        self.calls.append(("create_onboarding_link", account_id, refresh_url, return_url))
        return f"https://connect.example/onboard/{account_id}"

    def retrieve_account(self, account_id):
        self.calls.append(("retrieve_account", account_id))
        return self.account

    def create_login_link(self, account_id):
        self.calls.append(("create_login_link", account_id))
        return f"https://connect.example/login/{account_id}"

    def create_payout(self, account_id, amount, currency, metadata):
        self.calls.append(("create_payout", account_id, amount, currency, metadata))
        self._payout_seq += 1
        return PayoutObject(
            id=f"po_test_{self._payout_seq}",
            amount=amount,
            currency=currency,
            status=self.payout_status,
            created=int(time.time()),
            arrival_date=int(time.time()) + 86400,
            method="standard",
            destination="ba_test_1",
            metadata=metadata,
        )

    def list_payouts(self, account_id, limit=10):
        self.calls.append(("list_payouts", account_id, limit))
        return self.payouts[:limit]

    def retrieve_balance(self, account_id):
        self.calls.append(("retrieve_balance", account_id))
        return self.balance


class FakeIdentity:
    """Accepts bearer tokens of the form `token-<user id>`."""

    def __init__(self) -> None:
        self.wallets: dict[str, ProviderWallets] = {}
        self.balances: dict[str, WalletBalanceResponse] = {}
        self.failing_wallets: set[str] = set()
        self.fail_wallet_lookup = False

    def verify_access_token(self, token):
        if not token.startswith("token-"):
            raise Unauthorized("Invalid or expired token")
        return AuthClaims(user_id=token[len("token-"):], app_id="app_test")

    def get_user_wallets(self, user_id):
        if self.fail_wallet_lookup:
            raise UpstreamError("Privy API error: 503 - unavailable")
        return self.wallets.get(user_id, ProviderWallets())

    def get_wallet_balance(self, wallet_id):
        if wallet_id in self.failing_wallets:
            raise UpstreamError("Privy API error: 500 - boom")
        return self.balances.get(wallet_id, WalletBalanceResponse())

    def close(self):
        pass


def embedded_wallet(address: str, wallet_id: str) -> LinkedWallet:
    return LinkedWallet(address=address, id=wallet_id, chain_type="ethereum", wallet_client_type="privy")


def external_wallet(address: str) -> LinkedWallet:
    return LinkedWallet(address=address, chain_type="ethereum", wallet_client_type="metamask")


def usd_balance(*usd_values: str) -> WalletBalanceResponse:
    return WalletBalanceResponse.model_validate(
        {
            "balances": [
                {
                    "chain": "base",
                    "asset": "usdc",
                    "raw_value": "1000000",
                    "raw_value_decimals": 6,
                    "display_values": {"usdc": value, "usd": value},
                }
                for value in usd_values
            ]
        }
    )


def sign_payload(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Build a `stripe-signature` header the way the processor does."""

    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.".encode("utf-8") + payload
    digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def make_event(event_id: str, event_type: str, obj: dict, created: int, account: str | None = None) -> bytes:
    event = {
        "id": event_id,
        "object": "event",
        "type": event_type,
        "created": created,
        "livemode": False,
        "data": {"object": obj},
    }
    if account is not None:
        event["account"] = account
    return json.dumps(event).encode("utf-8")


def payout_payload(payout_id: str, status: str, amount: int = 2500, **extra) -> dict:
    payload = {
        "id": payout_id,
        "object": "payout",
        "amount": amount,
        "currency": "usd",
        "status": status,
        "arrival_date": 1767225600,
        "method": "standard",
        "destination": "ba_test_1",
        "failure_code": None,
        "failure_message": None,
        "metadata": {},
    }
    payload.update(extra)
    return payload


@pytest.fixture
def session_factory():
    engine = make_engine("sqlite://")
    create_schema(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def processor():
    return FakeProcessor()


@pytest.fixture
def identity():
    return FakeIdentity()


@pytest.fixture
def verifier():
    return WebhookVerifier(WEBHOOK_SECRET)


@pytest.fixture
def test_settings():
    return Settings(
        database_url="sqlite://",
        client_url="http://localhost:5173",
        stripe_webhook_secret=WEBHOOK_SECRET,
        profile_cache_ttl_seconds=5.0,
    )


@pytest.fixture
def app(test_settings, session_factory, processor, identity, verifier):
    return create_app(
        test_settings,
        session_factory=session_factory,
        processor=processor,
        identity=identity,
        verifier=verifier,
    )


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def add_user(session_factory):
    """Insert a registered creator (with default settings) directly."""

    def _add(user_id: str = "did:privy:alice", username: str = "alice") -> str:
        with session_factory() as db:
            db.add(User(id=user_id, username=username, display_name=username))
            db.add(UserSettings(user_id=user_id))
            db.commit()
        return user_id

    return _add


@pytest.fixture
def add_mirror(session_factory):
    """Insert an Account Mirror row for an existing creator."""

    def _add(
        user_id: str = "did:privy:alice",
        account_id: str = "acct_test_1",
        onboarding_completed: bool = True,
        payouts_enabled: bool = True,
    ) -> str:
        with session_factory() as db:
            db.add(
                StripeAccount(
                    id=account_id,
                    user_id=user_id,
                    onboarding_completed=onboarding_completed,
                    charges_enabled=payouts_enabled,
                    payouts_enabled=payouts_enabled,
                    country="US",
                    currency="usd",
                )
            )
            db.commit()
        return account_id

    return _add


def auth(user_id: str = "did:privy:alice") -> dict:
    return {"Authorization": f"Bearer token-{user_id}"}
