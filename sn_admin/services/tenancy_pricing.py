import math
from datetime import datetime
from typing import Dict, Iterable

from sn_admin.config import logger
from sn_admin.models.booking_models import BookingCreate, Customer
from sn_admin.models.tenancy_models import AddOnTotals, EndOfTenancyForm, TenancyPriceBreakdown
from sn_admin.utils.logging_utils import log_debug_event

END_OF_TENANCY_SERVICE = "End of Tenancy"

# === Pricing Tables (GBP) ===
PROPERTY_BASE_PRICES = {
    "flat": 180,
    "house": 220,
    "house-share": 120,
}

CONDITION_MULTIPLIERS = {
    "well-maintained": 1.0,
    "good": 1.2,
    "moderate": 1.35,
    "heavily-used": 1.5,
    "intensive": 1.75,
}

ROOM_PRICE = 20

ADDITIONAL_ROOM_PRICES = {
    "garage": 30,
    "utility_room": 20,
    "conservatory": 25,
    "separate_kitchen_living": 25,
    "dining_room": 20,
    "study_room": 20,
    "other_room": 20,
}

OVEN_PRICES = {
    "single": 45,
    "double": 65,
    "range": 85,
}

BLINDS_PRICES = {
    "small": 6,
    "medium": 9,
    "large": 12,
}

EXTRA_SERVICE_PRICES = {
    "balcony": 30,
    "waste": 40,
    "garage": 50,
}

CARPET_PRICES = {
    "rug_small": 29,
    "rug_medium": 39,
    "rug_large": 59,
    "carpet_single_bedroom": 39,
    "carpet_double_bedroom": 59,
    "carpet_master_bedroom": 69,
    "carpet_lounge": 79,
    "carpet_dining_room": 59,
    "stairs": 49,
    "hallway": 19,
}

UPHOLSTERY_PRICES = {
    "sofa_2seat": 59,
    "sofa_3seat": 89,
    "sofa_corner": 109,
    "armchair": 39,
    "dining_chair": 15,
    "ottoman": 29,
    "headboard": 45,
    "curtains_half": 35,
    "curtains_full": 49,
}

MATTRESS_PRICES = {
    "mattress_single": 35,
    "mattress_double": 45,
    "mattress_king": 55,
    "mattress_superking": 65,
}

# bedrooms -> bathrooms -> hours
BASE_HOURS_MAP = {
    "studio": {"1": 3, "2": 3.5},
    "1": {"1": 4, "2": 4.5},
    "2": {"1": 5, "2": 5.5, "3": 6},
    "3": {"1": 6, "2": 6.5, "3": 7, "4": 7.5},
    "4": {"1": 7, "2": 7.5, "3": 8, "4": 8.5},
    "5": {"1": 8, "2": 8.5, "3": 9, "4": 9.5, "5": 10},
    "6+": {"1": 9, "2": 10, "3": 11, "4": 12, "5": 13, "6+": 14},
}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _sum_selected(table: Dict[str, float], selected: Iterable[str]) -> float:
    return float(sum(table.get(item, 0) for item in selected))


def _sum_counted(table: Dict[str, float], counts: Dict[str, int]) -> float:
    return float(sum(table.get(item, 0) * max(count, 0) for item, count in counts.items()))


def calculate_add_ons(form: EndOfTenancyForm) -> AddOnTotals:
    return AddOnTotals(
        additional_rooms=_sum_selected(ADDITIONAL_ROOM_PRICES, form.additional_rooms),
        oven_cleaning=float(OVEN_PRICES.get(form.oven_type or "", 0)),
        blinds=_sum_counted(BLINDS_PRICES, form.blinds),
        extra_services=_sum_selected(EXTRA_SERVICE_PRICES, form.extra_services),
        carpet_cleaning=_sum_selected(CARPET_PRICES, form.carpet_items),
        upholstery=_sum_counted(UPHOLSTERY_PRICES, form.upholstery_items),
        mattress_cleaning=_sum_selected(MATTRESS_PRICES, form.mattress_items),
    )


def estimate_hours(bedrooms: int, bathrooms: int) -> float:
    if bedrooms <= 0 and bathrooms <= 0:
        return 0.0
    bedroom_key = "studio" if bedrooms <= 0 else ("6+" if bedrooms >= 6 else str(bedrooms))
    bathroom_key = "6+" if bathrooms >= 6 else str(max(bathrooms, 1))

    bedroom_map = BASE_HOURS_MAP[bedroom_key]
    return float(bedroom_map.get(bathroom_key) or bedroom_map.get("1") or 4)


def calculate_price_breakdown(form: EndOfTenancyForm) -> TenancyPriceBreakdown:
    base_price = float(PROPERTY_BASE_PRICES.get(form.property_type, 0))
    multiplier = CONDITION_MULTIPLIERS.get(form.condition, 1.0)
    adjusted_base = base_price * multiplier
    room_charge = float((form.bedrooms + form.bathrooms) * ROOM_PRICE)
    add_ons = calculate_add_ons(form)

    total = round_half_up(adjusted_base + room_charge + add_ons.total)

    log_debug_event(
        None, "BACKEND", "End of Tenancy Price",
        f"{form.property_type or '-'} x{multiplier} base={adjusted_base:.2f} rooms={room_charge:.2f} "
        f"add-ons={add_ons.total:.2f} total={total}"
    )

    return TenancyPriceBreakdown(
        base_price=base_price,
        condition_multiplier=multiplier,
        adjusted_base=round(adjusted_base, 2),
        room_charge=room_charge,
        add_ons=add_ons,
        estimated_hours=estimate_hours(form.bedrooms, form.bathrooms),
        total_price=total,
    )


def calculate_end_of_tenancy_price(form: EndOfTenancyForm) -> int:
    return calculate_price_breakdown(form).total_price


# === Flatten wizard selection into a booking ===

def _label(item_id: str) -> str:
    return item_id.replace("_", " ").replace("-", " ").strip().capitalize()


def _describe(selected: Iterable[str]) -> str:
    return ", ".join(_label(item) for item in selected)


def _describe_counted(counts: Dict[str, int]) -> str:
    return ", ".join(f"{_label(item)} x{count}" for item, count in counts.items() if count > 0)


def describe_property(form: EndOfTenancyForm) -> str:
    bedrooms = "Studio" if form.bedrooms == 0 else f"{form.bedrooms} Bed"
    parts = [_label(form.property_type) if form.property_type else "", bedrooms, f"{form.bathrooms} Bath"]
    if form.condition:
        parts.append(_label(form.condition))
    if form.furniture_status:
        parts.append(_label(form.furniture_status))
    return ", ".join(p for p in parts if p)


def flatten_to_booking(
    form: EndOfTenancyForm,
    customer: Customer,
    date_time: datetime,
    address: str,
    postcode: str = "",
    payment_method: str = "Card",
) -> BookingCreate:
    breakdown = calculate_price_breakdown(form)

    extras = []
    if form.additional_rooms:
        extras.append(_describe(form.additional_rooms))
    if form.oven_type and form.oven_type in OVEN_PRICES:
        extras.append(f"{_label(form.oven_type)} oven")
    if form.blinds:
        extras.append(f"Blinds: {_describe_counted(form.blinds)}")
    if form.extra_services:
        extras.append(_describe(form.extra_services))

    logger.info(f"🧾 Flattening End of Tenancy quote for customer {customer.id}: £{breakdown.total_price}")

    return BookingCreate(
        customer=customer.id,
        first_name=customer.first_name,
        last_name=customer.last_name,
        email=customer.email,
        phone_number=customer.phone,
        date_time=date_time,
        address=address,
        postcode=postcode,
        service_type=END_OF_TENANCY_SERVICE,
        cleaning_type=END_OF_TENANCY_SERVICE,
        frequently="One Off",
        total_hours=breakdown.estimated_hours,
        total_cost=float(breakdown.total_price),
        payment_method=payment_method,
        property_details=describe_property(form),
        extras="; ".join(e for e in extras if e) or None,
        carpet_items=_describe(form.carpet_items) or None,
        upholstery_items=_describe_counted(form.upholstery_items) or None,
        mattress_items=_describe(form.mattress_items) or None,
        additional_details=form.notes or None,
        access=form.access or None,
        parking_details=form.parking_details or None,
    )
