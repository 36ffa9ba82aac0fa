"""Provider clients: token verification, wallet parsing, and SDK error mapping."""

import time

import httpx
import jwt
import pytest
import stripe
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from donutsme.clients.privy_client import PrivyClient
from donutsme.clients.stripe_client import StripeProcessor
from donutsme.common.errors import Unauthorized, UpstreamError


@pytest.fixture(scope="module")
def signing_key():
    return ec.generate_private_key(ec.SECP256R1())


def _public_pem(private_key) -> str:
    return private_key.public_key().public_bytes(
        serialization.Encoding.PEM, serialization.PublicFormat.SubjectPublicKeyInfo
    ).decode("ascii")


def _client(signing_key, handler=None) -> PrivyClient:
    transport = httpx.MockTransport(handler or (lambda request: httpx.Response(404)))
    return PrivyClient(
        "app_test",
        "secret",
        _public_pem(signing_key),
        http=httpx.Client(transport=transport),
    )


def _token(signing_key, **overrides) -> str:
    claims = {
        "sub": "did:privy:alice",
        "aud": "app_test",
        "iss": "privy.io",
        "sid": "sess_1",
        "iat": int(time.time()),
        "exp": int(time.time()) + 600,
    }
    claims.update(overrides)
    return jwt.encode(claims, signing_key, algorithm="ES256")


def test_valid_access_token_yields_claims(signing_key):
    claims = _client(signing_key).verify_access_token(_token(signing_key))
    assert claims.user_id == "did:privy:alice"
    assert claims.session_id == "sess_1"


@pytest.mark.parametrize(
    "overrides",
    [
        {"aud": "another_app"},
        {"iss": "someone.else"},
        {"exp": int(time.time()) - 10},
    ],
)
def test_rejected_access_tokens(signing_key, overrides):
    with pytest.raises(Unauthorized):
        _client(signing_key).verify_access_token(_token(signing_key, **overrides))


def test_token_signed_by_other_key_is_rejected(signing_key):
    other = ec.generate_private_key(ec.SECP256R1())
    with pytest.raises(Unauthorized):
        _client(signing_key).verify_access_token(_token(other))


def test_linked_wallets_split_by_client_type(signing_key):
    def handler(request):
        assert request.url.path.startswith("/api/v1/users/")
        return httpx.Response(
            200,
            json={
                "id": "did:privy:alice",
                "linked_accounts": [
                    {"type": "email", "address": "alice@example.com"},
                    {"type": "wallet", "address": "0xaaa", "id": "w1", "wallet_client_type": "privy"},
                    {"type": "wallet", "address": "0xccc", "wallet_client_type": "metamask"},
                ],
            },
        )

    wallets = _client(signing_key, handler).get_user_wallets("did:privy:alice")
    assert [w.address for w in wallets.embedded] == ["0xaaa"]
    assert [w.local_id for w in wallets.external] == ["0xccc"]


def test_provider_http_error_is_upstream_error(signing_key):
    client = _client(signing_key, lambda request: httpx.Response(503, text="unavailable"))
    with pytest.raises(UpstreamError) as exc_info:
        client.get_wallet_balance("w1")
    assert "503" in exc_info.value.message


def test_processor_sdk_errors_become_upstream_errors(monkeypatch):
    def fail(**kwargs):
        raise stripe.InvalidRequestError("No such external account", None)

    monkeypatch.setattr(stripe.Payout, "create", fail)
    with pytest.raises(UpstreamError) as exc_info:
        StripeProcessor("sk_test_123").create_payout("acct_1", 100, "usd", {"userId": "u"})
    assert exc_info.value.message == "No such external account"


def test_processor_calls_carry_key_and_account(monkeypatch):
    seen = {}

    def create(**kwargs):
        seen.update(kwargs)
        return {"id": "po_1", "amount": kwargs["amount"], "currency": "usd", "status": "pending"}

    monkeypatch.setattr(stripe.Payout, "create", create)
    payout = StripeProcessor("sk_test_123").create_payout("acct_1", 1250, "usd", {"userId": "u"})

    assert payout.id == "po_1"
    assert seen["api_key"] == "sk_test_123"
    assert seen["stripe_account"] == "acct_1"
    assert seen["amount"] == 1250


def test_token_without_subject_is_rejected(signing_key):
    claims = {"aud": "app_test", "iss": "privy.io", "exp": int(time.time()) + 600}
    token = jwt.encode(claims, signing_key, algorithm="ES256")
    with pytest.raises(Unauthorized):
        _client(signing_key).verify_access_token(token)
