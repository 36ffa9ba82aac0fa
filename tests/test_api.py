"""HTTP surface: auth, envelopes, route wiring, and the webhook endpoint."""

from conftest import auth, make_event, payout_payload, sign_payload
from donutsme.common.errors import UpstreamError


def test_health_root_and_metrics(client):
    assert client.get("/health").json() == {"ok": True}
    assert client.get("/").json()["status"] == "running"
    assert "http_requests_total" in client.get("/metrics").text


def test_protected_routes_require_bearer_token(client):
    resp = client.get("/api/users/me")
    assert resp.status_code == 401
    assert resp.json()["error"] == "Unauthorized"

    resp = client.get("/api/payouts", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401


def test_register_and_fetch_profile(client):
    resp = client.post(
        "/api/users/register",
        json={"username": "alice", "displayName": "Alice"},
        headers=auth(),
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["user"]["displayName"] == "Alice"

    me = client.get("/api/users/me", headers=auth()).json()
    assert me["user"]["username"] == "alice"
    assert me["user"]["settings"]["payoutSchedule"] == "manual"


def test_invalid_register_body_is_400(client):
    resp = client.post("/api/users/register", json={"username": "a!"}, headers=auth())
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid request"


def test_unregistered_profile_is_404(client):
    resp = client.get("/api/users/me", headers=auth())
    assert resp.status_code == 404
    assert resp.json() == {"error": "User not found", "message": "User profile does not exist"}


def test_check_username_is_public(client, add_user):
    add_user()
    assert client.get("/api/users/check-username/alice").json() == {"success": True, "available": False}
    assert client.get("/api/users/check-username/carol").json()["available"] is True


def test_total_balance_route_is_not_shadowed_by_wallet_id(client, add_user):
    add_user()
    resp = client.get("/api/wallets/total-balance", headers=auth())
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "totalUsd": "0.00", "wallets": []}


def test_onboarding_creates_mirror_then_link(client, processor, add_user):
    add_user()
    resp = client.post("/api/stripe/onboard", json={"email": "alice@example.com"}, headers=auth())

    assert resp.status_code == 200
    body = resp.json()
    assert body["accountId"] == "acct_test_1"
    assert body["url"].endswith("/acct_test_1")
    assert [call[0] for call in processor.calls] == ["create_account", "create_onboarding_link"]
    assert processor.calls[1][2] == "http://localhost:5173/dashboard/payouts?refresh=true"

    # Resuming reuses the existing account.
    client.post("/api/stripe/onboard", headers=auth())
    assert [call[0] for call in processor.calls].count("create_account") == 1

    status = client.get("/api/stripe/account", headers=auth()).json()["account"]
    assert status["id"] == "acct_test_1"
    assert status["payoutsEnabled"] is False


def test_account_routes_without_mirror_are_404(client, add_user):
    add_user()
    for method, path in [
        ("get", "/api/stripe/account"),
        ("post", "/api/stripe/refresh-url"),
        ("get", "/api/stripe/dashboard-url"),
        ("get", "/api/stripe/balance"),
    ]:
        resp = getattr(client, method)(path, headers=auth())
        assert resp.status_code == 404
        assert resp.json()["error"] == "Account not found"


def test_balance_is_in_major_units(client, add_user, add_mirror):
    add_user()
    add_mirror()
    balance = client.get("/api/stripe/balance", headers=auth()).json()["balance"]
    assert balance["available"] == [{"amount": "123.45", "currency": "usd"}]
    assert balance["pending"] == [{"amount": "0.50", "currency": "usd"}]


def test_payout_flow_over_http(client, add_user, add_mirror):
    add_user()
    add_mirror()

    resp = client.post("/api/payouts/create", json={"amount": "25"}, headers=auth())
    assert resp.status_code == 200
    payout = resp.json()["payout"]
    assert payout["amount"] == "25.00"

    listed = client.get("/api/payouts", headers=auth()).json()["payouts"]
    assert [p["id"] for p in listed] == [payout["id"]]
    detail = client.get(f"/api/payouts/{payout['id']}", headers=auth()).json()["payout"]
    assert detail["destinationType"] == "bank_account"


def test_payout_for_other_creator_is_403(client, add_user, add_mirror):
    add_user()
    add_user("did:privy:bob", "bob")
    add_mirror()
    payout_id = client.post("/api/payouts/create", json={"amount": 3}, headers=auth()).json()["payout"]["id"]

    resp = client.get(f"/api/payouts/{payout_id}", headers=auth("did:privy:bob"))
    assert resp.status_code == 403


def test_processor_failure_is_500_with_message(client, processor, add_user, add_mirror):
    add_user()
    add_mirror()

    def fail(*args, **kwargs):
        raise UpstreamError("Insufficient funds in Stripe account")

    processor.create_payout = fail
    resp = client.post("/api/payouts/create", json={"amount": "10"}, headers=auth())
    assert resp.status_code == 500
    assert resp.json()["message"] == "Insufficient funds in Stripe account"


def test_webhook_endpoint_acknowledges_signed_event(client, add_user, add_mirror):
    add_user()
    add_mirror()
    body = make_event("evt_http_1", "payout.paid", payout_payload("po_http", "paid"), 100, "acct_test_1")

    resp = client.post("/api/stripe/webhook", content=body, headers={"stripe-signature": sign_payload(body)})
    assert resp.status_code == 200
    assert resp.json() == {"received": True}

    # Redelivery is acknowledged too.
    resp = client.post("/api/stripe/webhook", content=body, headers={"stripe-signature": sign_payload(body)})
    assert resp.status_code == 200


def test_webhook_bad_signature_is_400(client):
    body = make_event("evt_http_2", "payout.paid", payout_payload("po_http", "paid"), 100, "acct_test_1")
    resp = client.post("/api/stripe/webhook", content=body, headers={"stripe-signature": "t=1,v1=deadbeef"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Webhook error"


def test_oversized_payout_amount_is_400(client, processor, add_user, add_mirror):
    add_user()
    add_mirror()
    resp = client.post("/api/payouts/create", json={"amount": "1e30"}, headers=auth())
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid amount"
    assert processor.calls == []
