from fastapi import APIRouter, Depends

from sn_admin.api.http_errors import http_error
from sn_admin.models.booking_models import Booking
from sn_admin.models.cost_models import CostFormChange, CostFormState
from sn_admin.models.tenancy_models import EndOfTenancyBookingRequest, EndOfTenancyForm, TenancyPriceBreakdown
from sn_admin.services import booking_service
from sn_admin.services.cost_logic import reduce_cost_form
from sn_admin.services.supabase_client import get_db
from sn_admin.services.tenancy_pricing import calculate_price_breakdown, flatten_to_booking

router = APIRouter()


# === Endpoint: End of Tenancy Quote ===
@router.post("/end-of-tenancy/quote", response_model=TenancyPriceBreakdown)
def end_of_tenancy_quote(form: EndOfTenancyForm):
    try:
        return calculate_price_breakdown(form)
    except Exception as e:
        raise http_error(e)


# === Endpoint: End of Tenancy Booking ===
@router.post("/end-of-tenancy/bookings", response_model=Booking, status_code=201)
def end_of_tenancy_booking(request: EndOfTenancyBookingRequest, db=Depends(get_db)):
    try:
        customer = booking_service.get_customer(db, request.customer)
        booking = flatten_to_booking(
            request.form,
            customer,
            request.date_time,
            request.address,
            postcode=request.postcode,
            payment_method=request.payment_method,
        )
        return booking_service.create_booking(db, booking)
    except Exception as e:
        raise http_error(e)


# === Endpoint: Cost Form Reducer ===
@router.post("/cost-form/reduce", response_model=CostFormState)
def cost_form_reduce(change: CostFormChange):
    try:
        return reduce_cost_form(change.state, change.field, change.value)
    except Exception as e:
        raise http_error(e)
