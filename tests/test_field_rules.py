from datetime import datetime

import pytest

from sn_admin.api.field_rules import normalize_field_value


@pytest.mark.parametrize("field, raw, expected", [
    ("same_day", "Yes", True),
    ("same_day", "no", False),
    ("same_day", "", False),
    ("cleaner", "12", 12),
    ("cleaner", "", None),
    ("total_cost", "59.999", 60.0),
    ("payment_status", "paid", "Paid"),
    ("payment_method", " bank transfer ", "Bank Transfer"),
    ("booking_status", "Cancelled", "cancelled"),
    ("postcode", "  SW1A 1AA ", "SW1A 1AA"),
    ("date_time", "2026-11-02T10:00:00", "2026-11-02T10:00:00"),
    ("date_time", datetime(2026, 11, 2, 10, 0), "2026-11-02T10:00:00"),
])
def test_normalizes_values(field, raw, expected):
    assert normalize_field_value(field, raw) == expected


@pytest.mark.parametrize("field, raw", [
    ("id", 5),
    ("customer", 7),
    ("total_hours", 30),
    ("total_cost", -1),
    ("cleaner_percentage", 120),
    ("payment_status", "Pending"),
    ("address", ""),
    ("date_time", "next tuesday"),
    ("cleaning_cost_per_hour", "abc"),
])
def test_rejects_bad_values(field, raw):
    with pytest.raises(ValueError):
        normalize_field_value(field, raw)
