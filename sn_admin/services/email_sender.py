import os

from jinja2 import Environment, FileSystemLoader, select_autoescape

from sn_admin.config import logger, settings
from sn_admin.models.booking_models import Booking
from sn_admin.services.errors import BackendError, ExternalServiceError
from sn_admin.utils.logging_utils import log_debug_event

EMAIL_FUNCTION = "send-notification-email"

# === Load Jinja Templates ===
template_dir = os.path.join(os.path.dirname(__file__), "templates")
env = Environment(
    loader=FileSystemLoader(template_dir),
    autoescape=select_autoescape(["html", "xml"])
)

EMAIL_TEMPLATES = {
    "booking_confirmation": ("booking_confirmation.html", "Your SN Cleaning booking is confirmed"),
    "invoice": ("invoice.html", "Your SN Cleaning invoice"),
    "payment_link": ("payment_link.html", "Complete your SN Cleaning payment"),
}


def render_email(template: str, booking: Booking, extra: dict = None):
    if template not in EMAIL_TEMPLATES:
        raise ValueError(f"Unknown email template: {template}")

    filename, subject = EMAIL_TEMPLATES[template]
    customer_name = " ".join(p for p in (booking.first_name, booking.last_name) if p).strip()
    context = {
        "name_line": f"Hi {customer_name}," if customer_name else "Hi there,",
        "booking": booking,
        "date_display": booking.date_time.strftime("%A %d %B %Y at %H:%M") if booking.date_time else "TBC",
        "total_display": f"£{booking.total_cost:,.2f}" if booking.total_cost is not None else "TBC",
    }
    context.update(extra or {})

    return f"{subject} (#{booking.id})", env.get_template(filename).render(**context)


def send_booking_email(db, booking: Booking, template: str, extra: dict = None) -> bool:
    """
    Render a booking email and hand it to the hosted email function.
    Returns False when the booking has no usable recipient.
    """
    to_email = (booking.email or "").strip()

    # === Input validation ===
    if not to_email or "@" not in to_email:
        log_debug_event(booking.id, "BACKEND", "Email Send Skipped", f"Invalid or missing email: {to_email}")
        logger.warning(f"⚠️ Email for booking {booking.id} skipped, no valid address")
        return False

    subject, body_html = render_email(template, booking, extra)

    payload = {
        "to": [to_email],
        "from": settings.EMAIL_FROM,
        "subject": subject,
        "html": body_html,
    }

    try:
        log_debug_event(booking.id, "BACKEND", "Email Sending", f"{template} to {to_email}")
        db.invoke(EMAIL_FUNCTION, payload)
    except BackendError as e:
        log_debug_event(booking.id, "BACKEND", "Email Send Failed", str(e))
        logger.error(f"❌ Failed to send {template} email for booking {booking.id}: {e}")
        raise ExternalServiceError("email", e.detail or str(e))

    log_debug_event(booking.id, "BACKEND", "Email Sent", f"{template} sent to {to_email}")
    logger.info(f"✅ {template} email sent to {to_email}")
    return True
