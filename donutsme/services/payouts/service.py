"""Payout creation, history, and the Payout Record upsert shared with webhooks."""

import time
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from donutsme.clients.stripe_client import PayoutObject, StripeProcessor
from donutsme.common.errors import Forbidden, NotFound, ValidationFailed
from donutsme.common.logging import logger
from donutsme.common.metrics import payouts_created_total, stale_events_ignored_total
from donutsme.common.money import format_minor_units, parse_payout_amount
from donutsme.common.state_machine import PAYOUT_STATUSES, should_apply
from donutsme.services.connect.models import StripeAccount
from donutsme.services.connect.service import mirror_for_user
from donutsme.services.payouts.models import Payout
from donutsme.services.payouts.schemas import PayoutCreatedOut, PayoutDetailOut, PayoutOut


def _from_epoch(value: int | None) -> datetime | None:
    return datetime.fromtimestamp(value, tz=timezone.utc) if value else None


def _new_record(mirror: StripeAccount, payout: PayoutObject, event_created: int | None) -> Payout:
    return Payout(
        id=payout.id,
        user_id=mirror.user_id,
        stripe_account_id=mirror.id,
        amount=str(payout.amount),
        currency=payout.currency,
        status=payout.status,
        arrival_date=_from_epoch(payout.arrival_date),
        method=payout.method,
        destination_type="bank_account" if payout.destination else None,
        destination_id=payout.destination,
        failure_code=payout.failure_code,
        failure_message=payout.failure_message,
        snapshot=payout.model_dump(),
        last_event_created=event_created,
    )


def upsert_payout(
    db,
    mirror: StripeAccount,
    payout: PayoutObject,
    event_created: int | None,
    event_type: str = "payout.sync",
) -> str:
    """Insert or update the record for `payout.id`; returns inserted/updated/stale.

    Keyed by the processor payout id, so applying the same payload twice lands
    on the same row and state. A terminal record is left alone when
    `event_created` is older than the event that last touched it.
    """

    if payout.status not in PAYOUT_STATUSES:
        # Stored as reported.
        logger.warning("payout_status_unrecognised payout_id=%s status=%s", payout.id, payout.status)

    existing = db.get(Payout, payout.id)
    if existing is None:
        db.add(_new_record(mirror, payout, event_created))
        return "inserted"

    if not should_apply(existing.status, existing.last_event_created, event_created):
        stale_events_ignored_total.labels(event_type=event_type).inc()
        logger.warning(
            "stale_payout_event_ignored payout_id=%s status=%s incoming_status=%s event_created=%s last_event_created=%s",
            payout.id,
            existing.status,
            payout.status,
            event_created,
            existing.last_event_created,
        )
        return "stale"

    existing.status = payout.status
    existing.arrival_date = _from_epoch(payout.arrival_date)
    existing.failure_code = payout.failure_code
    existing.failure_message = payout.failure_message
    existing.snapshot = payout.model_dump()
    if event_created is not None:
        last = existing.last_event_created
        existing.last_event_created = event_created if last is None else max(last, event_created)
    return "updated"


def _to_out(row: Payout) -> PayoutOut:
    return PayoutOut(
        id=row.id,
        amount=format_minor_units(row.amount),
        currency=row.currency,
        status=row.status,
        arrival_date=row.arrival_date,
        method=row.method,
        failure_code=row.failure_code,
        failure_message=row.failure_message,
        created_at=row.created_at,
    )


class PayoutService:
    def __init__(self, session_factory, processor: StripeProcessor) -> None:
        self.session_factory = session_factory
        self.processor = processor

    def create_payout(self, user_id: str, amount, currency: str = "usd") -> PayoutCreatedOut:
        """Validate, call the processor, then record the payout locally.

        Checks run in order and the first failure wins; none of them reaches the
        processor. The local insert is not transactional with the processor
        call; a payout orphaned by a crash in between is recovered by a later
        webhook or `backfill_payouts`.
        """

        amount_minor = parse_payout_amount(amount)
        if amount_minor is None:
            raise ValidationFailed("Amount must be greater than 0", error="Invalid amount")

        with self.session_factory() as db:
            mirror = mirror_for_user(db, user_id)
        if mirror is None:
            raise NotFound("Please complete Stripe onboarding first", error="Account not found")
        if not mirror.onboarding_completed:
            raise ValidationFailed(
                "Please complete Stripe onboarding before requesting a payout",
                error="Onboarding incomplete",
            )
        if not mirror.payouts_enabled:
            raise ValidationFailed("Payouts are not enabled for your account", error="Payouts not enabled")

        currency = currency.lower()
        payout = self.processor.create_payout(mirror.id, amount_minor, currency, {"userId": user_id})

        with self.session_factory() as db:
            db.add(_new_record(mirror, payout, None))
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                if db.get(Payout, payout.id) is None:
                    raise
                # A payout.created webhook got here first; it already holds the full field set.
                logger.info("payout_already_recorded payout_id=%s", payout.id)

        payouts_created_total.labels(currency=currency).inc()
        logger.info(
            "payout_created user_id=%s payout_id=%s amount_minor=%s currency=%s",
            user_id,
            payout.id,
            amount_minor,
            currency,
        )
        return PayoutCreatedOut(
            id=payout.id,
            amount=format_minor_units(payout.amount),
            currency=payout.currency,
            status=payout.status,
            arrival_date=_from_epoch(payout.arrival_date),
        )

    def list_payouts(self, user_id: str, limit: int = 20) -> list[PayoutOut]:
        with self.session_factory() as db:
            rows = db.execute(
                select(Payout).where(Payout.user_id == user_id).order_by(Payout.created_at.desc()).limit(limit)
            ).scalars().all()
            return [_to_out(row) for row in rows]

    def get_payout(self, user_id: str, payout_id: str) -> PayoutDetailOut:
        with self.session_factory() as db:
            row = db.get(Payout, payout_id)
            if row is None:
                raise NotFound("The specified payout does not exist", error="Payout not found")
            if row.user_id != user_id:
                raise Forbidden("You do not have access to this payout")
            return PayoutDetailOut(
                **_to_out(row).model_dump(),
                destination_type=row.destination_type,
                updated_at=row.updated_at,
            )

    def backfill_payouts(self, account_id: str, limit: int = 100) -> dict[str, int]:
        """Pull recent payouts from the processor and upsert them as current truth."""

        counts = {"inserted": 0, "updated": 0, "stale": 0}
        payouts = self.processor.list_payouts(account_id, limit=limit)
        pulled_at = int(time.time())
        with self.session_factory() as db:
            mirror = db.get(StripeAccount, account_id)
            if mirror is None:
                raise NotFound(f"Stripe account {account_id} is not mirrored locally", error="Account not found")
            for payout in payouts:
                counts[upsert_payout(db, mirror, payout, pulled_at)] += 1
            db.commit()
        logger.info("payout_backfill_done account_id=%s counts=%s", account_id, counts)
        return counts
