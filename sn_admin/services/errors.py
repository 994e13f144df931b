# === errors.py ===
# Error taxonomy shared by the services and the API layer.

from typing import List, Optional


# === Backend error codes (Postgres SQLSTATE / PostgREST) ===
FOREIGN_KEY_VIOLATION = "23503"
NOT_NULL_VIOLATION = "23502"
CHECK_VIOLATION = "23514"
UNIQUE_VIOLATION = "23505"
NOT_FOUND = "PGRST116"

ERROR_MESSAGES = {
    FOREIGN_KEY_VIOLATION: "The selected customer, cleaner or address no longer exists.",
    NOT_NULL_VIOLATION: "A required field is missing.",
    CHECK_VIOLATION: "One of the values is outside the allowed range.",
    UNIQUE_VIOLATION: "A record with these details already exists.",
    NOT_FOUND: "The record could not be found.",
}
GENERIC_ERROR_MESSAGE = "Something went wrong while saving. Please try again."


class DashboardError(Exception):
    """Base class for errors surfaced to the admin as a notification."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BookingValidationError(DashboardError):
    def __init__(self, missing: Optional[List[str]] = None, message: str = ""):
        self.missing = list(missing or [])
        if not message:
            message = f"Missing or invalid fields: {', '.join(self.missing)}"
        super().__init__(message)


class BackendError(DashboardError):
    """Raised by the persistence layer with a structured error code."""

    def __init__(self, code: Optional[str], message: str = "", status: int = 400):
        self.code = code or ""
        self.status = status
        self.detail = message
        super().__init__(message or self.user_message)

    @property
    def user_message(self) -> str:
        return ERROR_MESSAGES.get(self.code, GENERIC_ERROR_MESSAGE)

    @property
    def is_not_found(self) -> bool:
        return self.code == NOT_FOUND or self.status == 404


class InsufficientStockError(DashboardError):
    def __init__(self, product_id: str, available: int, already_selected: int, requested: int, product_name: str = ""):
        self.product_id = product_id
        self.available = available
        self.already_selected = already_selected
        self.requested = requested
        self.product_name = product_name
        name = product_name or product_id
        super().__init__(
            f"Only {available} {name} available in clean inventory. "
            f"You already have {already_selected} selected."
        )


class ExternalServiceError(DashboardError):
    """Email, invoicing or payment-link provider failure."""

    def __init__(self, service: str, message: str):
        self.service = service
        super().__init__(f"{service}: {message}")


def user_message_for(error: Exception) -> str:
    if isinstance(error, BackendError):
        return error.user_message
    if isinstance(error, DashboardError):
        return error.message
    return GENERIC_ERROR_MESSAGE
