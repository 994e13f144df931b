# === Booking Field Rules (bulk edit) ===

from datetime import datetime

# Master list of booking columns the bulk editor may write
BULK_EDITABLE_FIELDS = {
    # Scheduling
    "date_time", "frequently", "same_day",

    # Service
    "service_type", "cleaning_type", "total_hours",

    # Pricing
    "cleaning_cost_per_hour", "total_cost",

    # Cleaner
    "cleaner", "cleaner_rate", "cleaner_percentage", "cleaner_pay",

    # Payment
    "payment_method", "payment_status",

    # Status
    "booking_status",

    # Details
    "address", "postcode", "access", "parking_details", "key_collection",
    "additional_details",
}

# === Integer-only Fields ===
INTEGER_FIELDS = {"cleaner"}

# === Float Fields ===
FLOAT_FIELDS = {
    "total_hours", "cleaning_cost_per_hour", "total_cost",
    "cleaner_rate", "cleaner_percentage", "cleaner_pay",
}

# === Boolean Fields (must normalize to True/False) ===
BOOLEAN_FIELDS = {"same_day"}

# === Single Select Fields ===
SINGLE_SELECT_FIELDS = {
    "payment_status": {"Unpaid", "Paid", "Authorized", "Collecting", "Refunded", "Failed"},
    "payment_method": {"Cash", "Card", "Bank Transfer", "Invoiless"},
    "frequently": {"One Off", "Weekly", "Fortnightly", "Monthly", "Same Day"},
    "booking_status": {"active", "completed", "cancelled"},
}

# Fields that may be cleared to null
NULLABLE_FIELDS = {"cleaner", "cleaner_rate", "cleaner_percentage", "booking_status"}

TRUE_VALUES = {"yes", "true", "1", "on", "checked", "t"}
MAX_REASONABLE_HOURS = 24.0
MAX_REASONABLE_COST = 100000.0


def normalize_field_value(field: str, value):
    """
    Coerce a raw bulk-edit value into what the bookings table expects.
    Raises ValueError for unknown fields or values that cannot be coerced.
    """
    if field not in BULK_EDITABLE_FIELDS:
        raise ValueError(f"Field not editable in bulk: {field}")

    if value in (None, ""):
        if field in NULLABLE_FIELDS:
            return None
        if field in BOOLEAN_FIELDS:
            return False
        raise ValueError(f"{field} cannot be empty")

    if field in BOOLEAN_FIELDS:
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in TRUE_VALUES

    if field in INTEGER_FIELDS:
        return int(float(value))

    if field in FLOAT_FIELDS:
        number = float(value)
        if number < 0:
            raise ValueError(f"{field} cannot be negative")
        if field == "total_hours" and number > MAX_REASONABLE_HOURS:
            raise ValueError(f"{field} exceeds {MAX_REASONABLE_HOURS} hours")
        if field == "cleaner_percentage" and number > 100:
            raise ValueError(f"{field} cannot exceed 100")
        if number > MAX_REASONABLE_COST:
            raise ValueError(f"{field} is unreasonably large")
        return round(number, 2)

    if field in SINGLE_SELECT_FIELDS:
        text = str(value).strip()
        allowed = SINGLE_SELECT_FIELDS[field]
        match = next((option for option in allowed if option.lower() == text.lower()), None)
        if match is None:
            raise ValueError(f"{field} must be one of {sorted(allowed)}")
        return match

    if field == "date_time":
        if isinstance(value, datetime):
            return value.isoformat()
        return datetime.fromisoformat(str(value).strip()).isoformat()

    return str(value).strip()
