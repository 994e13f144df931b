from fastapi import HTTPException

from sn_admin.config import logger
from sn_admin.services.errors import (
    BackendError,
    BookingValidationError,
    ExternalServiceError,
    InsufficientStockError,
)


def http_error(e: Exception) -> HTTPException:
    if isinstance(e, HTTPException):
        return e

    if isinstance(e, BookingValidationError):
        return HTTPException(status_code=422, detail={"message": e.message, "fields": e.missing})

    if isinstance(e, InsufficientStockError):
        return HTTPException(status_code=409, detail={
            "message": e.message,
            "product_id": e.product_id,
            "available": e.available,
            "already_selected": e.already_selected,
            "requested": e.requested,
        })

    if isinstance(e, BackendError):
        if e.is_not_found:
            status = 404
        elif e.status >= 500:
            status = 503
        else:
            status = 400
        return HTTPException(status_code=status, detail={"message": e.user_message, "code": e.code})

    if isinstance(e, ExternalServiceError):
        return HTTPException(status_code=502, detail={"message": e.message, "service": e.service})

    if isinstance(e, ValueError):
        return HTTPException(status_code=422, detail={"message": str(e)})

    logger.exception("Unexpected error")
    return HTTPException(status_code=500, detail={"message": f"Unexpected error: {e}"})
