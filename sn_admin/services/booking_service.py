from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import List, Optional, Sequence

from pydantic import ValidationError

from sn_admin.api.field_rules import normalize_field_value
from sn_admin.config import BOOKINGS_TABLE, logger, settings
from sn_admin.models.booking_models import (
    CANCELLED_STATUS,
    PAYMENT_STATUSES,
    Booking,
    BookingCreate,
    BookingFilters,
    BookingPage,
    BookingUpdate,
    BulkAirbnbRequest,
    BulkEditRequest,
    BulkResult,
    Cleaner,
    Customer,
    LinenUsageItem,
    ServiceLabel,
)
from sn_admin.models.cost_models import HOURLY, PERCENTAGE, CostFormState
from sn_admin.services.cost_logic import recompute
from sn_admin.services.errors import BackendError, BookingValidationError, NOT_FOUND, user_message_for
from sn_admin.utils.logging_utils import flush_debug_log, log_debug_event

CUSTOMERS_TABLE = "customers"
CLEANERS_TABLE = "cleaners"
AIRBNB_SERVICE = "Air BnB"

REQUIRED_BOOKING_FIELDS = ["customer", "date_time", "address", "service_type"]

# Columns that never carry over to a duplicated booking
DUPLICATE_EXCLUDED_FIELDS = {
    "id", "date_time", "invoice_id", "invoice_link", "booking_status", "payment_status",
    "cleaner", "cleaner_pay", "cleaner_rate", "cleaner_percentage",
}


# === Lookups ===

def get_booking(db, booking_id: int) -> Booking:
    return Booking(**db.get_one(BOOKINGS_TABLE, booking_id))


def get_customer(db, customer_id: int) -> Customer:
    try:
        return Customer(**db.get_one(CUSTOMERS_TABLE, customer_id))
    except BackendError as e:
        if e.is_not_found:
            raise BookingValidationError(["customer"], f"Customer {customer_id} does not exist")
        raise


def get_cleaner(db, cleaner_id: int) -> Cleaner:
    try:
        return Cleaner(**db.get_one(CLEANERS_TABLE, cleaner_id))
    except BackendError as e:
        if e.is_not_found:
            raise BookingValidationError(["cleaner"], f"Cleaner {cleaner_id} does not exist")
        raise


def get_service_labels(db) -> List[ServiceLabel]:
    labels = []
    for table, kind in (("service_types", "service_type"), ("cleaning_types", "cleaning_type")):
        rows = db.select(table, [("is_active", "eq", True)], order="label")
        for row in rows:
            labels.append(ServiceLabel(name=row.get("label") or row.get("key"), color=row.get("color"), kind=kind))
    return labels


# === Validation ===

def validate_booking(data: dict, partial: bool = False) -> None:
    required = [f for f in REQUIRED_BOOKING_FIELDS if f in data] if partial else REQUIRED_BOOKING_FIELDS
    missing = [f for f in required if data.get(f) is None or str(data.get(f)).strip() == ""]

    for numeric in ("total_hours", "total_cost", "cleaning_cost_per_hour", "cleaner_pay"):
        value = data.get(numeric)
        if value is not None and value < 0:
            missing.append(numeric)

    percentage = data.get("cleaner_percentage")
    if percentage is not None and not 0 <= percentage <= 100:
        missing.append("cleaner_percentage")

    email = data.get("email")
    if email and "@" not in email:
        missing.append("email")

    status = data.get("payment_status")
    if status is not None and status not in PAYMENT_STATUSES:
        missing.append("payment_status")

    if missing:
        logger.warning(f"🟡 Booking not valid, problem fields: {missing}")
        raise BookingValidationError(missing)


def _to_row(model) -> dict:
    return model.model_dump(mode="json", exclude_none=True)


def _first(rows: Sequence[dict], booking_id) -> Booking:
    if not rows:
        raise BackendError(NOT_FOUND, f"Booking {booking_id} not found", status=404)
    return Booking(**rows[0])


# === Create / Edit ===

def create_booking(db, data: BookingCreate, action_type: str = "booking_created") -> Booking:
    row = _to_row(data)
    validate_booking(row)

    if not row.get("first_name") and not row.get("email"):
        customer = get_customer(db, data.customer)
        row.update({
            "first_name": customer.first_name,
            "last_name": customer.last_name,
            "email": customer.email,
            "phone_number": customer.phone,
        })

    booking = _first(db.insert(BOOKINGS_TABLE, row), "new")
    log_debug_event(booking.id, "BACKEND", "Booking Created", f"{booking.service_type} on {booking.date_time} for customer {booking.customer}")
    flush_debug_log(db, booking.id, action_type=action_type)
    logger.info(f"✅ Booking {booking.id} created")
    return booking


def update_booking(db, booking_id: int, changes: BookingUpdate) -> Booking:
    values = changes.model_dump(mode="json", exclude_unset=True)
    if not values:
        raise BookingValidationError([], "No changes supplied")

    validate_booking(values, partial=True)

    booking = _first(db.update(BOOKINGS_TABLE, values, [("id", "eq", booking_id)]), booking_id)
    log_debug_event(booking_id, "BACKEND", "Booking Edited", f"Fields: {sorted(values)}")
    flush_debug_log(db, booking_id)
    return booking


def update_linen_usage(db, booking_id: int, usage: Sequence[LinenUsageItem]) -> Booking:
    values = {"linen_used": [item.model_dump() for item in usage]}
    booking = _first(db.update(BOOKINGS_TABLE, values, [("id", "eq", booking_id)]), booking_id)
    log_debug_event(booking_id, "BACKEND", "Linen Updated", f"{sum(i.quantity for i in usage)} items")
    flush_debug_log(db, booking_id)
    return booking


def duplicate_booking(db, booking_id: int, date_time: datetime) -> Booking:
    source = get_booking(db, booking_id)
    values = source.model_dump(exclude=DUPLICATE_EXCLUDED_FIELDS, exclude_none=True)
    values.update({"date_time": date_time, "payment_status": "Unpaid", "booking_status": None})

    try:
        data = BookingCreate(**values)
    except ValidationError as e:
        raise BookingValidationError([str(err["loc"][0]) for err in e.errors()])

    booking = create_booking(db, data, action_type="booking_duplicated")
    logger.info(f"📄 Booking {booking_id} duplicated as {booking.id}")
    return booking


def assign_cleaner(db, booking_id: int, cleaner_id: Optional[int], pay_method: Optional[str] = None) -> Booking:
    booking = get_booking(db, booking_id)

    if cleaner_id is None:
        values = {"cleaner": None, "cleaner_pay": None, "cleaner_rate": None, "cleaner_percentage": None}
        log_debug_event(booking_id, "BACKEND", "Cleaner Unassigned", f"Previous cleaner: {booking.cleaner}")
    else:
        cleaner = get_cleaner(db, cleaner_id)
        if pay_method is None:
            pay_method = HOURLY if booking.cleaner_rate is not None else PERCENTAGE
        elif pay_method not in (HOURLY, PERCENTAGE):
            raise BookingValidationError(["pay_method"])

        state = recompute(CostFormState(
            hourly_service=False,
            hours=booking.total_hours or 0,
            total_cost=booking.total_cost or 0,
            cleaner_pay_method=pay_method,
            cleaner_hourly_rate=cleaner.hourly_rate,
            cleaner_percentage=cleaner.percentage_rate,
        ))
        values = {
            "cleaner": cleaner.id,
            "cleaner_pay": state.cleaner_pay,
            "cleaner_rate": cleaner.hourly_rate if pay_method == HOURLY else None,
            "cleaner_percentage": cleaner.percentage_rate if pay_method == PERCENTAGE else None,
        }
        log_debug_event(booking_id, "BACKEND", "Cleaner Assigned", f"cleaner={cleaner.id} pay={state.cleaner_pay} ({pay_method})")

    updated = _first(db.update(BOOKINGS_TABLE, values, [("id", "eq", booking_id)]), booking_id)
    flush_debug_log(db, booking_id, action_type="cleaner_assigned")
    return updated


def cancel_booking(db, booking_id: int) -> Booking:
    booking = _first(
        db.update(BOOKINGS_TABLE, {"booking_status": CANCELLED_STATUS}, [("id", "eq", booking_id)]), booking_id
    )
    log_debug_event(booking_id, "BACKEND", "Booking Cancelled", "Status set to cancelled")
    flush_debug_log(db, booking_id, action_type="booking_cancelled")
    return booking


def delete_booking(db, booking_id: int) -> None:
    rows = db.delete(BOOKINGS_TABLE, [("id", "eq", booking_id)])
    if not rows:
        raise BackendError(NOT_FOUND, f"Booking {booking_id} not found", status=404)
    logger.info(f"🗑️ Booking {booking_id} deleted")


def set_payment_status(db, booking_id: int, payment_status: str) -> Booking:
    if payment_status not in PAYMENT_STATUSES:
        raise BookingValidationError(["payment_status"])
    booking = _first(
        db.update(BOOKINGS_TABLE, {"payment_status": payment_status}, [("id", "eq", booking_id)]), booking_id
    )
    log_debug_event(booking_id, "BACKEND", "Payment Status", payment_status)
    flush_debug_log(db, booking_id, action_type="payment_status_changed")
    return booking


# === List View ===

def build_filters(filters: BookingFilters) -> list:
    query = []
    if filters.booking_status:
        query.append(("booking_status", "eq", filters.booking_status))
    if filters.payment_status:
        query.append(("payment_status", "eq", filters.payment_status))
    if filters.customer is not None:
        query.append(("customer", "eq", filters.customer))
    if filters.unassigned:
        query.append(("cleaner", "is", None))
    elif filters.cleaner is not None:
        query.append(("cleaner", "eq", filters.cleaner))
    if filters.service_type:
        query.append(("service_type", "eq", filters.service_type))
    if filters.date_from:
        query.append(("date_time", "gte", filters.date_from.isoformat()))
    if filters.date_to:
        query.append(("date_time", "lte", filters.date_to.isoformat()))
    if filters.search and filters.search.strip():
        term = f"*{filters.search.strip()}*"
        query.append(("or", "", [
            (column, "ilike", term)
            for column in ("first_name", "last_name", "email", "address", "postcode")
        ]))
    return query


def list_bookings(db, filters: BookingFilters) -> BookingPage:
    rows, total = db.select_with_count(
        BOOKINGS_TABLE,
        build_filters(filters),
        order="date_time",
        ascending=True,
        limit=filters.page_size,
        offset=(filters.page - 1) * filters.page_size,
    )
    return BookingPage(
        items=[Booking(**row) for row in rows],
        page=filters.page,
        page_size=filters.page_size,
        total=total,
    )


# === Bulk Operations ===

def _run_concurrently(func, items, max_workers: int = None):
    """Run func over items in a thread pool; returns [(item, result, error)]."""
    def safe(item):
        try:
            return item, func(item), None
        except Exception as e:
            return item, None, e

    workers = max(1, min(max_workers or settings.BULK_MAX_WORKERS, len(items) or 1))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(safe, items))


def bulk_create_airbnb(db, request: BulkAirbnbRequest, max_workers: int = None) -> BulkResult:
    if not request.dates:
        raise BookingValidationError(["dates"], "Add at least one booking date")
    if not request.address.strip() or not request.postcode.strip():
        raise BookingValidationError([f for f in ("address", "postcode") if not getattr(request, f).strip()])

    stamps = [d.date_time for d in request.dates]
    if len(set(stamps)) != len(stamps):
        raise BookingValidationError(["dates"], "Booking dates must be distinct")

    customer = get_customer(db, request.customer)
    total_cost = round(request.hours * request.cost_per_hour, 2)
    cleaner_pay = round(request.hours * request.cleaner_rate, 2)

    shared = {
        "customer": customer.id,
        "cleaner": request.cleaner,
        "first_name": customer.first_name,
        "last_name": customer.last_name,
        "email": customer.email,
        "phone_number": customer.phone,
        "address": request.address.strip(),
        "postcode": request.postcode.strip(),
        "service_type": AIRBNB_SERVICE,
        "cleaning_type": AIRBNB_SERVICE,
        "total_hours": request.hours,
        "total_cost": total_cost,
        "cleaning_cost_per_hour": request.cost_per_hour,
        "cleaner_rate": request.cleaner_rate,
        "cleaner_pay": cleaner_pay,
        "payment_method": request.payment_method,
    }

    def create(date):
        booking = BookingCreate(
            **shared,
            date_time=date.date_time,
            same_day=date.same_day,
            frequently="Same Day" if date.same_day else "One Off",
        )
        return create_booking(db, booking)

    result = BulkResult()
    for date, booking, error in _run_concurrently(create, request.dates, max_workers):
        if error is None:
            result.succeeded += 1
            result.created_ids.append(booking.id)
        else:
            result.failed += 1
            result.errors.append(f"{date.date_time.isoformat()}: {user_message_for(error)}")
            logger.error(f"❌ Airbnb booking for {date.date_time} failed: {error}")

    logger.info(f"📦 Bulk Airbnb create: {result.succeeded} created, {result.failed} failed")
    return result


def bulk_update_field(db, request: BulkEditRequest, max_workers: int = None) -> BulkResult:
    if not request.booking_ids:
        raise BookingValidationError(["booking_ids"], "Select at least one booking")
    try:
        value = normalize_field_value(request.field, request.value)
    except ValueError as e:
        raise BookingValidationError([request.field], str(e))

    def update(booking_id):
        rows = db.update(BOOKINGS_TABLE, {request.field: value}, [("id", "eq", booking_id)])
        if not rows:
            raise BackendError(NOT_FOUND, f"Booking {booking_id} not found", status=404)
        return rows[0]

    result = BulkResult()
    for booking_id, _, error in _run_concurrently(update, list(dict.fromkeys(request.booking_ids)), max_workers):
        if error is None:
            result.succeeded += 1
        else:
            result.failed += 1
            result.errors.append(f"{booking_id}: {user_message_for(error)}")
            logger.error(f"❌ Bulk edit of booking {booking_id} failed: {error}")

    logger.info(f"📦 Bulk edit {request.field}: {result.succeeded} updated, {result.failed} failed")
    return result
