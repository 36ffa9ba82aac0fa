"""Payout status vocabulary and the stale-event guard used by reconciliation.

Statuses mirror the processor. Transitions are not validated; a record takes
the last-applied payload, except that a terminal status is never regressed by
an event older than the one that set it.
"""

PAYOUT_STATUSES: set[str] = {"pending", "in_transit", "paid", "failed", "canceled"}
TERMINAL_STATUSES: set[str] = {"paid", "failed", "canceled"}


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


def should_apply(current_status: str, last_event_created: int | None, incoming_created: int | None) -> bool:
    """Return False when an incoming event would regress a terminal status with older data.

    Event times are the processor's `created` epoch seconds.
    """

    if not is_terminal(current_status):
        return True
    if last_event_created is None or incoming_created is None:
        return True
    return incoming_created >= last_event_created
