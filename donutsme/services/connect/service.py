"""Payout-account onboarding and pull-based status refresh.

The processor is the source of truth for account capability state; the
`stripe_accounts` row only mirrors it. Rows are written here (onboarding,
explicit refresh) and by the webhook receiver.
"""

from sqlalchemy import select

from donutsme.clients.stripe_client import StripeProcessor
from donutsme.common.errors import NotFound
from donutsme.common.logging import logger
from donutsme.common.money import format_minor_units
from donutsme.services.connect.models import StripeAccount
from donutsme.services.connect.schemas import (
    AccountBalanceOut,
    AccountStatusOut,
    BalanceAmountOut,
    OnboardingLinkOut,
)
from donutsme.services.users.models import User


def mirror_for_user(db, user_id: str) -> StripeAccount | None:
    return db.execute(select(StripeAccount).where(StripeAccount.user_id == user_id)).scalar_one_or_none()


def account_not_found() -> NotFound:
    return NotFound("No Stripe account found for this user", error="Account not found")


class AccountService:
    def __init__(
        self,
        session_factory,
        processor: StripeProcessor,
        client_url: str,
        default_country: str = "US",
    ) -> None:
        self.session_factory = session_factory
        self.processor = processor
        self.client_url = client_url.rstrip("/")
        self.default_country = default_country

    @property
    def refresh_url(self) -> str:
        return f"{self.client_url}/dashboard/payouts?refresh=true"

    @property
    def return_url(self) -> str:
        return f"{self.client_url}/dashboard/payouts?success=true"

    def _require_mirror(self, user_id: str) -> StripeAccount:
        with self.session_factory() as db:
            mirror = mirror_for_user(db, user_id)
        if mirror is None:
            raise account_not_found()
        return mirror

    def start_onboarding(self, user_id: str, email: str | None = None, country: str | None = None) -> OnboardingLinkOut:
        """Return an onboarding URL, creating the processor account on first use.

        The mirror row is inserted only after the processor created the account,
        and the link is requested only after that insert committed.
        """

        with self.session_factory() as db:
            if db.get(User, user_id) is None:
                raise NotFound("Register a profile before starting payout onboarding", error="User not found")
            mirror = mirror_for_user(db, user_id)
            account_id = mirror.id if mirror is not None else None

        if account_id is None:
            country = (country or self.default_country).upper()
            account = self.processor.create_account(user_id, email, country)
            with self.session_factory() as db:
                db.add(
                    StripeAccount(
                        id=account.id,
                        user_id=user_id,
                        account_type="express",
                        onboarding_completed=False,
                        charges_enabled=False,
                        payouts_enabled=False,
                        country=country,
                        currency="usd",
                        snapshot=account.model_dump(),
                    )
                )
                db.commit()
            account_id = account.id
            logger.info("connect_account_created user_id=%s account_id=%s", user_id, account_id)

        url = self.processor.create_onboarding_link(account_id, self.refresh_url, self.return_url)
        return OnboardingLinkOut(url=url, account_id=account_id)

    def refresh_status(self, user_id: str) -> AccountStatusOut:
        """Overwrite every mutable mirror field with the processor's live view."""

        mirror = self._require_mirror(user_id)
        account = self.processor.retrieve_account(mirror.id)
        with self.session_factory() as db:
            row = db.get(StripeAccount, mirror.id)
            row.onboarding_completed = account.details_submitted
            row.charges_enabled = account.charges_enabled
            row.payouts_enabled = account.payouts_enabled
            row.country = account.country
            row.currency = account.default_currency
            row.snapshot = account.model_dump()
            db.commit()
        logger.info(
            "connect_account_refreshed account_id=%s payouts_enabled=%s",
            account.id,
            account.payouts_enabled,
        )
        return AccountStatusOut(
            id=account.id,
            onboarding_completed=account.details_submitted,
            charges_enabled=account.charges_enabled,
            payouts_enabled=account.payouts_enabled,
            country=account.country,
            currency=account.default_currency,
        )

    def refresh_onboarding_url(self, user_id: str) -> str:
        mirror = self._require_mirror(user_id)
        return self.processor.create_onboarding_link(mirror.id, self.refresh_url, self.return_url)

    def dashboard_url(self, user_id: str) -> str:
        mirror = self._require_mirror(user_id)
        return self.processor.create_login_link(mirror.id)

    def balance(self, user_id: str) -> AccountBalanceOut:
        mirror = self._require_mirror(user_id)
        balance = self.processor.retrieve_balance(mirror.id)
        return AccountBalanceOut(
            available=[
                BalanceAmountOut(amount=format_minor_units(b.amount), currency=b.currency) for b in balance.available
            ],
            pending=[
                BalanceAmountOut(amount=format_minor_units(b.amount), currency=b.currency) for b in balance.pending
            ],
        )
