from sn_admin.config import logger, settings
from sn_admin.models.booking_models import Booking
from sn_admin.services.errors import BackendError, BookingValidationError, ExternalServiceError
from sn_admin.utils.logging_utils import log_debug_event

PAYMENT_LINK_FUNCTION = "stripe-send-payment-link"


def create_payment_link(db, booking: Booking) -> str:
    if booking.total_cost is None or booking.total_cost <= 0:
        raise BookingValidationError(["total_cost"], "Booking has no amount to collect")
    if not booking.email:
        raise BookingValidationError(["email"], "Booking has no customer email")

    payload = {
        "booking_id": booking.id,
        "customer_id": booking.customer,
        "customer_email": booking.email,
        "amount": round(booking.total_cost, 2),
        "description": f"{booking.service_type} cleaning",
        "return_url": settings.PAYMENT_RETURN_URL,
    }

    try:
        data = db.invoke(PAYMENT_LINK_FUNCTION, payload)
    except BackendError as e:
        logger.error(f"❌ Payment link for booking {booking.id} failed: {e}")
        raise ExternalServiceError("payment link", e.detail or str(e))

    url = data.get("url") or data.get("payment_link")
    if not url:
        raise ExternalServiceError("payment link", "No payment URL returned")

    log_debug_event(booking.id, "BACKEND", "Payment Link Created", url)
    return url
