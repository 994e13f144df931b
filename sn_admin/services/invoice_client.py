# === invoice_client.py ===

import requests

from sn_admin.config import BOOKINGS_TABLE, logger, settings
from sn_admin.models.booking_models import Booking
from sn_admin.services.errors import BookingValidationError, ExternalServiceError
from sn_admin.utils.logging_utils import flush_debug_log, log_debug_event


def _headers():
    return {
        "api-key": settings.INVOICE_API_KEY,
        "Content-Type": "application/json",
    }


def _post(path: str, payload: dict = None) -> dict:
    url = f"{settings.INVOICE_API_URL.rstrip('/')}/{path.lstrip('/')}"
    try:
        res = requests.post(url, headers=_headers(), json=payload or {}, timeout=settings.REQUEST_TIMEOUT)
    except requests.RequestException as e:
        logger.error(f"❌ Invoicing API unreachable: {e}")
        raise ExternalServiceError("invoicing", str(e))

    if not res.ok:
        logger.error(f"❌ Invoicing API {path} failed ({res.status_code}): {res.text}")
        raise ExternalServiceError("invoicing", f"{res.status_code}: {res.text}")

    try:
        return res.json()
    except ValueError:
        return {}


def build_invoice_payload(booking: Booking) -> dict:
    if booking.total_cost is None or booking.total_cost <= 0:
        raise BookingValidationError(["total_cost"], "Booking has no amount to invoice")

    description = f"{booking.service_type} cleaning"
    if booking.date_time:
        description += f" on {booking.date_time.strftime('%d/%m/%Y')}"
    if booking.address:
        description += f" at {booking.address}"

    return {
        "customer": {
            "name": " ".join(p for p in (booking.first_name, booking.last_name) if p),
            "email": booking.email,
            "phone": booking.phone_number,
        },
        "items": [{
            "name": description,
            "quantity": 1,
            "price": round(booking.total_cost, 2),
        }],
        "currency": "GBP",
        "reference": str(booking.id),
    }


def create_invoice(db, booking: Booking) -> Booking:
    payload = build_invoice_payload(booking)
    data = _post("invoices", payload)

    invoice_id = str(data.get("id") or "")
    invoice_link = data.get("url") or data.get("link")
    if not invoice_id:
        raise ExternalServiceError("invoicing", "No invoice id returned")

    log_debug_event(booking.id, "BACKEND", "Invoice Created", f"invoice_id={invoice_id}")
    rows = db.update(
        BOOKINGS_TABLE,
        {"invoice_id": invoice_id, "invoice_link": invoice_link},
        [("id", "eq", booking.id)],
    )
    flush_debug_log(db, booking.id, action_type="invoice_created")
    logger.info(f"✅ Invoice {invoice_id} created for booking {booking.id}")
    return Booking(**rows[0]) if rows else booking.model_copy(update={"invoice_id": invoice_id, "invoice_link": invoice_link})


def send_invoice(invoice_id: str) -> dict:
    if not invoice_id:
        raise BookingValidationError(["invoice_id"], "Booking has no invoice yet")
    data = _post(f"invoices/{invoice_id}/send")
    logger.info(f"📧 Invoice {invoice_id} sent")
    return data
