from sn_admin.utils.logging_utils import flush_debug_log, log_debug_event, pending_debug_log


def test_flush_writes_one_activity_row(db):
    log_debug_event(555, "BACKEND", "Booking Edited", "Fields: ['postcode']")
    log_debug_event(555, "BACKEND", "Linen Updated", "2 items")
    assert len(pending_debug_log(555)) == 2

    combined = flush_debug_log(db, 555, action_type="booking_updated")

    row = db.rows("activity_logs")[-1]
    assert row["entity_type"] == "booking"
    assert row["entity_id"] == "555"
    assert row["details"] == {"log": combined, "lines": 2}
    assert pending_debug_log(555) == []


def test_flush_with_nothing_cached(db):
    assert flush_debug_log(db, 556) == ""
    assert flush_debug_log(db, None) == ""
    assert db.rows("activity_logs") == []


def test_flush_failure_does_not_raise(db):
    db.fail_when = lambda table, op, row: table == "activity_logs"
    log_debug_event(557, "BACKEND", "Booking Cancelled", "Status set to cancelled")

    assert "Booking Cancelled" in flush_debug_log(db, 557)
    assert db.rows("activity_logs") == []
