"""
Linen selection for a booking.

Quantities are checked against a snapshot of clean inventory fetched earlier.
Nothing is reserved or locked: two bookings built from the same snapshot can
both pass the check.
"""

from typing import Iterable, List, Optional, Sequence

from sn_admin.config import logger
from sn_admin.models.booking_models import LinenInventory, LinenProduct, LinenUsageItem
from sn_admin.services.errors import InsufficientStockError

LINEN_PRODUCTS_TABLE = "linen_products"
LINEN_INVENTORY_TABLE = "linen_inventory"


def available_quantity(inventory: Iterable[LinenInventory], product_id: str) -> int:
    for item in inventory:
        if item.product_id == product_id:
            return item.clean_quantity or 0
    return 0


def selected_quantity(usage: Sequence[LinenUsageItem], product_id: str) -> int:
    return next((item.quantity for item in usage if item.product_id == product_id), 0)


def _replace_quantity(
    usage: Sequence[LinenUsageItem], product_id: str, quantity: int, product_name: str
) -> List[LinenUsageItem]:
    if quantity <= 0:
        return [item for item in usage if item.product_id != product_id]

    if any(item.product_id == product_id for item in usage):
        return [
            item.model_copy(update={"quantity": quantity}) if item.product_id == product_id else item
            for item in usage
        ]

    return list(usage) + [LinenUsageItem(product_id=product_id, quantity=quantity, product_name=product_name)]


def adjust_linen_usage(
    usage: Sequence[LinenUsageItem],
    product_id: str,
    delta: int,
    inventory: Iterable[LinenInventory],
    product_name: str = "",
) -> List[LinenUsageItem]:
    """
    Add ``delta`` of a product to the usage list.

    Returns a new list; ``usage`` is never modified. Raises
    InsufficientStockError when the resulting quantity would exceed the clean
    stock in ``inventory``.
    """
    already_selected = selected_quantity(usage, product_id)
    requested = already_selected + delta
    available = available_quantity(inventory, product_id)

    if requested > available:
        logger.warning(
            f"⚠️ Insufficient linen stock for {product_id}: requested {requested}, available {available}"
        )
        raise InsufficientStockError(product_id, available, already_selected, requested, product_name)

    if not product_name:
        product_name = next((item.product_name for item in usage if item.product_id == product_id), "")

    return _replace_quantity(usage, product_id, requested, product_name)


def set_linen_quantity(
    usage: Sequence[LinenUsageItem],
    product_id: str,
    quantity: int,
    inventory: Iterable[LinenInventory],
    product_name: str = "",
) -> List[LinenUsageItem]:
    current = selected_quantity(usage, product_id)
    return adjust_linen_usage(usage, product_id, quantity - current, inventory, product_name)


def total_items(usage: Sequence[LinenUsageItem]) -> int:
    return sum(item.quantity for item in usage)


# === Snapshot Loading ===

def fetch_linen_products(db) -> List[LinenProduct]:
    rows = db.select(LINEN_PRODUCTS_TABLE, [("is_active", "eq", True)], order="name")
    return [LinenProduct(**row) for row in rows]


def fetch_inventory_snapshot(db, customer_id: Optional[int], address_id: Optional[str]) -> List[LinenInventory]:
    if not customer_id or not address_id:
        return []

    rows = db.select(
        LINEN_INVENTORY_TABLE,
        [("customer_id", "eq", customer_id), ("address_id", "eq", address_id)],
        columns="product_id,clean_quantity,dirty_quantity,in_use_quantity",
    )
    return [LinenInventory(**row) for row in rows]
