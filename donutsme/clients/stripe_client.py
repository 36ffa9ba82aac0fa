"""Payment processor client (Stripe Connect, Express accounts).

Constructed once by the composition root with its API key and injected into
services. Responses are parsed into the typed objects below before any field
is read; SDK failures surface as `UpstreamError` carrying the processor's
message.
"""

import json
from typing import Any

import stripe
from pydantic import BaseModel, ConfigDict, Field

from donutsme.common.errors import UpstreamError
from donutsme.common.logging import logger
from donutsme.common.metrics import upstream_failures_total


class AccountObject(BaseModel):
    """Connected account as the processor reports it."""

    model_config = ConfigDict(extra="allow")

    id: str
    details_submitted: bool = False
    charges_enabled: bool = False
    payouts_enabled: bool = False
    country: str | None = None
    default_currency: str | None = None


class PayoutObject(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    amount: int
    currency: str
    status: str
    created: int | None = None
    arrival_date: int | None = None
    method: str | None = None
    destination: str | None = None
    failure_code: str | None = None
    failure_message: str | None = None
    metadata: dict[str, str] = Field(default_factory=dict)


class BalanceAmount(BaseModel):
    model_config = ConfigDict(extra="allow")

    amount: int
    currency: str


class BalanceObject(BaseModel):
    model_config = ConfigDict(extra="allow")

    available: list[BalanceAmount] = Field(default_factory=list)
    pending: list[BalanceAmount] = Field(default_factory=list)


def _plain(obj: Any) -> dict:
    """Flatten SDK objects into builtin containers for validation and storage."""

    return json.loads(json.dumps(obj, default=dict))


class StripeProcessor:
    """Thin typed wrapper over the `stripe` SDK for one platform API key."""

    def __init__(self, api_key: str) -> None:
        self.api_key = api_key

    def _call(self, operation: str, fn, *args, **kwargs):
        try:
            return fn(*args, api_key=self.api_key, **kwargs)
        except stripe.StripeError as exc:
            upstream_failures_total.labels(dependency="stripe", operation=operation).inc()
            message = exc.user_message or str(exc)
            logger.error("stripe_call_failed operation=%s error=%s", operation, message)
            raise UpstreamError(message) from exc

    def create_account(self, user_id: str, email: str | None, country: str) -> AccountObject:
        params: dict[str, Any] = {
            "type": "express",
            "country": country,
            "capabilities": {
                "card_payments": {"requested": True},
                "transfers": {"requested": True},
            },
            "business_type": "individual",
            "metadata": {"userId": user_id},
        }
        if email:
            params["email"] = email
        account = self._call("accounts.create", stripe.Account.create, **params)
        return AccountObject.model_validate(_plain(account))

    def create_onboarding_link(self, account_id: str, refresh_url: str, return_url: str) -> str:
        link = self._call(
            "account_links.create",
            stripe.AccountLink.create,
            account=account_id,
            refresh_url=refresh_url,
            return_url=return_url,
            type="account_onboarding",
        )
        return _plain(link)["url"]

    def retrieve_account(self, account_id: str) -> AccountObject:
        account = self._call("accounts.retrieve", stripe.Account.retrieve, account_id)
        return AccountObject.model_validate(_plain(account))

    def create_login_link(self, account_id: str) -> str:
        link = self._call("accounts.create_login_link", stripe.Account.create_login_link, account_id)
        return _plain(link)["url"]

    def create_payout(
        self, account_id: str, amount: int, currency: str, metadata: dict[str, str]
    ) -> PayoutObject:
        """Create a payout on the connected account; `amount` is in minor units."""

        payout = self._call(
            "payouts.create",
            stripe.Payout.create,
            amount=amount,
            currency=currency,
            metadata=metadata,
            stripe_account=account_id,
        )
        return PayoutObject.model_validate(_plain(payout))

    def list_payouts(self, account_id: str, limit: int = 10) -> list[PayoutObject]:
        page = self._call("payouts.list", stripe.Payout.list, limit=limit, stripe_account=account_id)
        return [PayoutObject.model_validate(item) for item in _plain(page).get("data", [])]

    def retrieve_balance(self, account_id: str) -> BalanceObject:
        balance = self._call("balance.retrieve", stripe.Balance.retrieve, stripe_account=account_id)
        return BalanceObject.model_validate(_plain(balance))
