"""Typed processor webhook events, parsed before any handler reads a field.

Only the event families the receiver reconciles get a model; any other type
parses to a bare `EventHeader` and is acknowledged without action. A known
type whose body does not match its model fails validation.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict

from donutsme.clients.stripe_client import AccountObject, PayoutObject

PAYOUT_EVENT_TYPES = (
    "payout.created",
    "payout.updated",
    "payout.paid",
    "payout.failed",
    "payout.canceled",
)


class EventHeader(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    type: str
    created: int | None = None
    # Connected account the event belongs to (Connect webhooks only).
    account: str | None = None


class AccountEventData(BaseModel):
    object: AccountObject


class AccountUpdatedEvent(EventHeader):
    type: Literal["account.updated"]
    data: AccountEventData


class PayoutEventData(BaseModel):
    object: PayoutObject


class PayoutEvent(EventHeader):
    type: Literal[
        "payout.created",
        "payout.updated",
        "payout.paid",
        "payout.failed",
        "payout.canceled",
    ]
    data: PayoutEventData


EVENT_MODELS: dict[str, type[EventHeader]] = {
    "account.updated": AccountUpdatedEvent,
    **{event_type: PayoutEvent for event_type in PAYOUT_EVENT_TYPES},
}


def parse_event(raw: dict) -> EventHeader:
    """Validate `raw` into the model registered for its type (raises `pydantic.ValidationError`)."""

    header = EventHeader.model_validate(raw)
    model = EVENT_MODELS.get(header.type)
    if model is None:
        return header
    return model.model_validate(raw)
