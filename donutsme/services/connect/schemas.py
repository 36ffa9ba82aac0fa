"""Request/response schemas for payout-account endpoints."""

from pydantic import Field

from donutsme.common.schemas import CamelModel
from donutsme.services.users.schemas import EMAIL_PATTERN


class OnboardRequest(CamelModel):
    email: str | None = Field(default=None, max_length=255, pattern=EMAIL_PATTERN)
    country: str | None = Field(default=None, pattern=r"^[A-Za-z]{2}$")


class OnboardingLinkOut(CamelModel):
    url: str
    account_id: str


class AccountStatusOut(CamelModel):
    id: str
    onboarding_completed: bool
    charges_enabled: bool
    payouts_enabled: bool
    country: str | None = None
    currency: str | None = None


class BalanceAmountOut(CamelModel):
    amount: str
    currency: str


class AccountBalanceOut(CamelModel):
    available: list[BalanceAmountOut] = Field(default_factory=list)
    pending: list[BalanceAmountOut] = Field(default_factory=list)
