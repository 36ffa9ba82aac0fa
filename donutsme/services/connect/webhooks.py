"""Webhook receiver: verify, parse, and reconcile processor events.

Each delivery is applied in one transaction together with its row in
`stripe_webhook_events`, and the caller answers 2xx only after that commit.
Redeliveries of an applied event id are skipped.
"""

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from donutsme.clients.stripe_client import AccountObject
from donutsme.common.errors import ValidationFailed
from donutsme.common.logging import event_id_ctx, logger
from donutsme.common.metrics import duplicate_events_skipped_total, webhook_events_total
from donutsme.services.connect.events import AccountUpdatedEvent, EventHeader, PayoutEvent, parse_event
from donutsme.services.connect.models import StripeAccount, WebhookEvent
from donutsme.services.connect.signatures import WebhookVerifier
from donutsme.services.payouts.service import upsert_payout


def apply_account_update(db, account: AccountObject) -> str:
    """Copy capability fields from an `account.updated` payload onto the mirror.

    Only fields the payload carries are written; anything absent keeps its
    last-received value.
    """

    mirror = db.get(StripeAccount, account.id)
    if mirror is None:
        logger.warning("account_event_unknown_account account_id=%s", account.id)
        return "unknown_account"
    present = account.model_fields_set
    if "details_submitted" in present:
        mirror.onboarding_completed = account.details_submitted
    if "charges_enabled" in present:
        mirror.charges_enabled = account.charges_enabled
    if "payouts_enabled" in present:
        mirror.payouts_enabled = account.payouts_enabled
    if account.country:
        mirror.country = account.country
    if account.default_currency:
        mirror.currency = account.default_currency
    mirror.snapshot = account.model_dump(exclude_unset=True)
    logger.info(
        "account_updated account_id=%s onboarding_completed=%s payouts_enabled=%s",
        account.id,
        mirror.onboarding_completed,
        mirror.payouts_enabled,
    )
    return "updated"


def apply_payout_event(db, event: PayoutEvent) -> str:
    """Upsert the Payout Record of a payout lifecycle event.

    The owning mirror is the event's connected account, or the payout
    destination when the event carries no account. Payouts of accounts not
    mirrored here (another integration or environment) are dropped.
    """

    payout = event.data.object
    account_id = event.account or payout.destination
    mirror = db.get(StripeAccount, account_id) if account_id else None
    if mirror is None:
        logger.warning("payout_event_unknown_account payout_id=%s account_id=%s", payout.id, account_id)
        return "unknown_account"
    outcome = upsert_payout(db, mirror, payout, event.created, event_type=event.type)
    logger.info(
        "payout_event_applied payout_id=%s type=%s status=%s outcome=%s",
        payout.id,
        event.type,
        payout.status,
        outcome,
    )
    return outcome


class WebhookService:
    def __init__(self, session_factory, verifier: WebhookVerifier) -> None:
        self.session_factory = session_factory
        self.verifier = verifier

    def handle(self, payload: bytes, signature: str | None) -> str:
        """Verify and apply one delivery; returns the outcome tag."""

        raw = self.verifier.verify(payload, signature)
        try:
            event = parse_event(raw)
        except ValidationError as exc:
            logger.warning("webhook_event_malformed type=%s errors=%s", raw.get("type"), exc.errors())
            raise ValidationFailed(f"Malformed {raw.get('type', 'unknown')} event", error="Webhook error") from exc

        token = event_id_ctx.set(event.id)
        try:
            outcome = self._apply(event)
        finally:
            event_id_ctx.reset(token)
        webhook_events_total.labels(event_type=event.type, outcome=outcome).inc()
        return outcome

    def _apply(self, event: EventHeader) -> str:
        with self.session_factory() as db:
            if db.get(WebhookEvent, event.id) is not None:
                return self._skip_duplicate(event)

            if isinstance(event, AccountUpdatedEvent):
                outcome = apply_account_update(db, event.data.object)
            elif isinstance(event, PayoutEvent):
                outcome = apply_payout_event(db, event)
            else:
                logger.info("webhook_event_unhandled type=%s", event.type)
                outcome = "ignored"

            db.add(WebhookEvent(event_id=event.id, event_type=event.type, outcome=outcome))
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                if db.get(WebhookEvent, event.id) is None:
                    raise
                # A concurrent delivery of the same event id committed first.
                return self._skip_duplicate(event)
            return outcome

    def _skip_duplicate(self, event: EventHeader) -> str:
        logger.info("duplicate event skipped type=%s event_id=%s", event.type, event.id)
        duplicate_events_skipped_total.labels(event_type=event.type).inc()
        return "duplicate"
