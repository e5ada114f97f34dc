import pytest

from app.services.change_feed import ChangeFeed


def test_subscriber_receives_events_for_its_table():
    feed = ChangeFeed()
    hospitals, bookings = [], []
    feed.subscribe("hospitals", hospitals.append)
    feed.subscribe("bookings", bookings.append)

    delivered = feed.publish("hospitals", "INSERT", {"id": "h1"})

    assert delivered == 1
    assert hospitals == [{"table": "hospitals", "event": "INSERT", "row": {"id": "h1"}}]
    assert bookings == []


def test_row_filter_limits_delivery():
    feed = ChangeFeed()
    open_only = []
    feed.subscribe("emergency_requests", open_only.append, {"status": "OPEN"})

    feed.publish("emergency_requests", "INSERT", {"id": "e1", "status": "OPEN"})
    feed.publish("emergency_requests", "UPDATE", {"id": "e1", "status": "RESOLVED"})

    assert [e["row"]["id"] for e in open_only] == ["e1"]
    assert open_only[0]["event"] == "INSERT"


def test_unsubscribe_stops_delivery_and_is_idempotent():
    feed = ChangeFeed()
    seen = []
    unsubscribe = feed.subscribe("hospitals", seen.append)
    unsubscribe()
    unsubscribe()

    assert feed.publish("hospitals", "UPDATE", {"id": "h1"}) == 0
    assert seen == []


def test_failing_subscriber_does_not_block_others():
    feed = ChangeFeed()
    seen = []

    def broken(event):
        raise RuntimeError("socket closed")

    feed.subscribe("bookings", broken)
    feed.subscribe("bookings", seen.append)

    assert feed.publish("bookings", "INSERT", {"id": "b1"}) == 1
    assert len(seen) == 1


def test_unknown_table_is_rejected():
    with pytest.raises(ValueError):
        ChangeFeed().subscribe("users", print)


def test_status_filter_only_applies_to_tables_with_status():
    assert ChangeFeed.status_filter("bookings", "PENDING") == {"status": "PENDING"}
    assert ChangeFeed.status_filter("emergency_requests", "OPEN") == {"status": "OPEN"}
    assert ChangeFeed.status_filter("hospitals", None) is None
    with pytest.raises(ValueError):
        ChangeFeed.status_filter("hospitals", "OPEN")
