from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from sn_admin.api.http_errors import http_error
from sn_admin.config import DEFAULT_PAGE_SIZE
from sn_admin.models.booking_models import (
    AssignCleanerRequest,
    Booking,
    BookingCreate,
    BookingFilters,
    BookingPage,
    BookingUpdate,
    BulkAirbnbRequest,
    BulkEditRequest,
    BulkResult,
    DuplicateBookingRequest,
    PaymentStatusRequest,
    ServiceLabel,
)
from sn_admin.services import booking_service
from sn_admin.services.email_sender import EMAIL_TEMPLATES, send_booking_email
from sn_admin.services.invoice_client import create_invoice, send_invoice
from sn_admin.services.payment_links import create_payment_link
from sn_admin.services.supabase_client import get_db
from sn_admin.utils.logging_utils import flush_debug_log

router = APIRouter()


class EmailRequest(BaseModel):
    template: str = "booking_confirmation"


class InvoiceRequest(BaseModel):
    send: bool = True


class InvoiceResponse(BaseModel):
    booking: Booking
    sent: bool


class PaymentLinkRequest(BaseModel):
    email_customer: bool = True


class PaymentLinkResponse(BaseModel):
    url: str
    emailed: bool


class EmailResponse(BaseModel):
    sent: bool
    template: str


# === List View ===
@router.get("/bookings", response_model=BookingPage)
def list_bookings(
    booking_status: Optional[str] = None,
    payment_status: Optional[str] = None,
    customer: Optional[int] = None,
    cleaner: Optional[int] = None,
    unassigned: bool = False,
    service_type: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    search: Optional[str] = None,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
    db=Depends(get_db),
):
    try:
        filters = BookingFilters(
            booking_status=booking_status,
            payment_status=payment_status,
            customer=customer,
            cleaner=cleaner,
            unassigned=unassigned,
            service_type=service_type,
            date_from=date_from,
            date_to=date_to,
            search=search,
            page=page,
            page_size=page_size,
        )
        return booking_service.list_bookings(db, filters)
    except Exception as e:
        raise http_error(e)


@router.get("/service-labels", response_model=List[ServiceLabel])
def service_labels(db=Depends(get_db)):
    try:
        return booking_service.get_service_labels(db)
    except Exception as e:
        raise http_error(e)


# === Bulk Operations ===
@router.post("/bookings/bulk-airbnb", response_model=BulkResult)
def bulk_airbnb(request: BulkAirbnbRequest, db=Depends(get_db)):
    try:
        return booking_service.bulk_create_airbnb(db, request)
    except Exception as e:
        raise http_error(e)


@router.post("/bookings/bulk-edit", response_model=BulkResult)
def bulk_edit(request: BulkEditRequest, db=Depends(get_db)):
    try:
        return booking_service.bulk_update_field(db, request)
    except Exception as e:
        raise http_error(e)


# === Create / Edit ===
@router.post("/bookings", response_model=Booking, status_code=201)
def create_booking(data: BookingCreate, db=Depends(get_db)):
    try:
        return booking_service.create_booking(db, data)
    except Exception as e:
        raise http_error(e)


@router.get("/bookings/{booking_id}", response_model=Booking)
def get_booking(booking_id: int, db=Depends(get_db)):
    try:
        return booking_service.get_booking(db, booking_id)
    except Exception as e:
        raise http_error(e)


@router.patch("/bookings/{booking_id}", response_model=Booking)
def edit_booking(booking_id: int, changes: BookingUpdate, db=Depends(get_db)):
    try:
        return booking_service.update_booking(db, booking_id, changes)
    except Exception as e:
        raise http_error(e)


@router.delete("/bookings/{booking_id}", status_code=204)
def delete_booking(booking_id: int, db=Depends(get_db)):
    try:
        booking_service.delete_booking(db, booking_id)
        return Response(status_code=204)
    except Exception as e:
        raise http_error(e)


# === Dialogs ===
@router.post("/bookings/{booking_id}/duplicate", response_model=Booking, status_code=201)
def duplicate_booking(booking_id: int, request: DuplicateBookingRequest, db=Depends(get_db)):
    try:
        return booking_service.duplicate_booking(db, booking_id, request.date_time)
    except Exception as e:
        raise http_error(e)


@router.post("/bookings/{booking_id}/assign-cleaner", response_model=Booking)
def assign_cleaner(booking_id: int, request: AssignCleanerRequest, db=Depends(get_db)):
    try:
        return booking_service.assign_cleaner(db, booking_id, request.cleaner, request.pay_method)
    except Exception as e:
        raise http_error(e)


@router.post("/bookings/{booking_id}/cancel", response_model=Booking)
def cancel_booking(booking_id: int, db=Depends(get_db)):
    try:
        return booking_service.cancel_booking(db, booking_id)
    except Exception as e:
        raise http_error(e)


@router.patch("/bookings/{booking_id}/payment-status", response_model=Booking)
def payment_status(booking_id: int, request: PaymentStatusRequest, db=Depends(get_db)):
    try:
        return booking_service.set_payment_status(db, booking_id, request.payment_status)
    except Exception as e:
        raise http_error(e)


# === Outbound ===
@router.post("/bookings/{booking_id}/email", response_model=EmailResponse)
def email_booking(booking_id: int, request: EmailRequest, db=Depends(get_db)):
    try:
        if request.template not in EMAIL_TEMPLATES:
            raise ValueError(f"Unknown email template: {request.template}")
        booking = booking_service.get_booking(db, booking_id)
        sent = send_booking_email(db, booking, request.template, {"invoice_link": booking.invoice_link})
        flush_debug_log(db, booking_id, action_type="email_sent")
        return EmailResponse(sent=sent, template=request.template)
    except Exception as e:
        raise http_error(e)


@router.post("/bookings/{booking_id}/invoice", response_model=InvoiceResponse)
def invoice_booking(booking_id: int, request: InvoiceRequest, db=Depends(get_db)):
    try:
        booking = booking_service.get_booking(db, booking_id)
        if not booking.invoice_id:
            booking = create_invoice(db, booking)
        if request.send:
            send_invoice(booking.invoice_id)
        return InvoiceResponse(booking=booking, sent=request.send)
    except Exception as e:
        raise http_error(e)


@router.post("/bookings/{booking_id}/payment-link", response_model=PaymentLinkResponse)
def payment_link(booking_id: int, request: PaymentLinkRequest, db=Depends(get_db)):
    try:
        booking = booking_service.get_booking(db, booking_id)
        url = create_payment_link(db, booking)
        emailed = False
        if request.email_customer:
            emailed = send_booking_email(db, booking, "payment_link", {"payment_url": url})
        flush_debug_log(db, booking_id, action_type="payment_link_sent")
        return PaymentLinkResponse(url=url, emailed=emailed)
    except Exception as e:
        raise http_error(e)
