"""Unit tests for the payout stale-event guard."""

from donutsme.common.state_machine import is_terminal, should_apply


def test_non_terminal_status_always_takes_incoming_event():
    """Pending/in_transit records follow whatever arrives, even older events."""

    assert should_apply("pending", 200, 100)
    assert should_apply("in_transit", 200, 100)


def test_terminal_status_rejects_older_event():
    """A late payout.created must not regress a paid payout."""

    assert is_terminal("paid")
    assert not should_apply("paid", 200, 100)
    assert not should_apply("failed", 200, 199)


def test_terminal_status_accepts_newer_or_equal_event():
    assert should_apply("paid", 200, 200)
    assert should_apply("paid", 200, 300)


def test_missing_timestamps_do_not_block():
    """Rows created from the API response carry no event time yet."""

    assert should_apply("paid", None, 100)
    assert should_apply("paid", 100, None)
