from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from sn_admin.api.http_errors import http_error
from sn_admin.models.booking_models import LinenInventory, LinenProduct, LinenUsageItem
from sn_admin.services import booking_service
from sn_admin.services.errors import BookingValidationError
from sn_admin.services.linen_logic import (
    adjust_linen_usage,
    fetch_inventory_snapshot,
    fetch_linen_products,
    set_linen_quantity,
)
from sn_admin.services.supabase_client import get_db

router = APIRouter(prefix="/linen")


class LinenChange(BaseModel):
    usage: List[LinenUsageItem] = []
    product_id: str
    product_name: str = ""
    inventory: List[LinenInventory] = []
    delta: Optional[int] = None
    quantity: Optional[int] = None
    booking_id: Optional[int] = None
    customer_id: Optional[int] = None
    address_id: Optional[str] = None


class LinenUsageResponse(BaseModel):
    usage: List[LinenUsageItem]
    total_items: int


def _inventory(db, change: LinenChange) -> List[LinenInventory]:
    # Selections saved to a booking are checked against stored inventory, never the caller's copy
    if change.customer_id is not None and change.address_id:
        return fetch_inventory_snapshot(db, change.customer_id, change.address_id)
    if change.booking_id is not None:
        raise BookingValidationError(["customer_id", "address_id"], "customer_id and address_id are required to save linen")
    return change.inventory


def _respond(db, change: LinenChange, usage) -> LinenUsageResponse:
    if change.booking_id is not None:
        booking_service.update_linen_usage(db, change.booking_id, usage)
    return LinenUsageResponse(usage=usage, total_items=sum(i.quantity for i in usage))


@router.get("/products", response_model=List[LinenProduct])
def list_linen_products(db=Depends(get_db)):
    try:
        return fetch_linen_products(db)
    except Exception as e:
        raise http_error(e)


@router.get("/inventory", response_model=List[LinenInventory])
def linen_inventory(customer_id: int, address_id: str, db=Depends(get_db)):
    try:
        return fetch_inventory_snapshot(db, customer_id, address_id)
    except Exception as e:
        raise http_error(e)


@router.post("/adjust", response_model=LinenUsageResponse)
def adjust_linen(change: LinenChange, db=Depends(get_db)):
    try:
        if change.delta is None:
            raise ValueError("delta is required")
        usage = adjust_linen_usage(change.usage, change.product_id, change.delta, _inventory(db, change), change.product_name)
        return _respond(db, change, usage)
    except Exception as e:
        raise http_error(e)


@router.post("/set", response_model=LinenUsageResponse)
def set_linen(change: LinenChange, db=Depends(get_db)):
    try:
        if change.quantity is None:
            raise ValueError("quantity is required")
        usage = set_linen_quantity(change.usage, change.product_id, change.quantity, _inventory(db, change), change.product_name)
        return _respond(db, change, usage)
    except Exception as e:
        raise http_error(e)
