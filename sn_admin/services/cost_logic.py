from sn_admin.config import logger
from sn_admin.models.cost_models import FIXED, HOURLY, PERCENTAGE, CostFormState

# Editing one of these re-enables automatic total_cost after a manual edit.
RATE_FIELDS = {"cost_per_hour", "hourly_service"}

NUMERIC_FIELDS = {
    "hours", "cost_per_hour", "discount_value", "total_cost",
    "cleaner_hourly_rate", "cleaner_percentage",
}

EDITABLE_FIELDS = NUMERIC_FIELDS | {
    "hourly_service", "discount_type", "cleaner_pay_method", "reset_total_cost",
}


def apply_discount(base_cost: float, discount_type, discount_value: float) -> float:
    base_cost = max(base_cost, 0.0)
    discount_value = max(discount_value or 0.0, 0.0)

    if discount_type == PERCENTAGE:
        discount_amount = base_cost * min(discount_value, 100.0) / 100
    elif discount_type == FIXED:
        discount_amount = discount_value
    else:
        discount_amount = 0.0

    return round(max(0.0, base_cost - discount_amount), 2)


def compute_total_cost(state: CostFormState) -> float:
    base_cost = state.hours * state.cost_per_hour
    return apply_discount(base_cost, state.discount_type, state.discount_value)


def compute_cleaner_pay(state: CostFormState) -> float:
    if state.cleaner_pay_method == HOURLY:
        return round(state.hours * state.cleaner_hourly_rate, 2)
    return round(state.total_cost * state.cleaner_percentage / 100, 2)


def recompute(state: CostFormState) -> CostFormState:
    if state.hourly_service and not state.total_cost_overridden:
        state = state.model_copy(update={"total_cost": compute_total_cost(state)})
    return state.model_copy(update={"cleaner_pay": compute_cleaner_pay(state)})


def _coerce(field: str, value):
    if field in NUMERIC_FIELDS:
        return max(float(value or 0), 0.0)
    if field == "hourly_service":
        return bool(value)
    if field == "discount_type":
        return value if value in {FIXED, PERCENTAGE} else None
    if field == "cleaner_pay_method":
        if value not in {HOURLY, PERCENTAGE}:
            raise ValueError(f"Unknown cleaner pay method: {value}")
        return value
    return value


def reduce_cost_form(state: CostFormState, field: str, value=None) -> CostFormState:
    """
    Apply one form edit and return the new state.

    A manual total_cost edit pins the total; later hours or discount edits
    leave it alone until the hourly rate changes or reset_total_cost is sent.
    Cleaner pay always follows the current total.
    """
    if field not in EDITABLE_FIELDS:
        raise ValueError(f"Unknown cost form field: {field}")

    if field == "reset_total_cost":
        return recompute(state.model_copy(update={"total_cost_overridden": False}))

    value = _coerce(field, value)
    update = {field: value}

    if field == "total_cost":
        update["total_cost_overridden"] = True
        logger.debug(f"✏️ Manual total cost override: {value}")
    elif field in RATE_FIELDS:
        update["total_cost_overridden"] = False

    return recompute(state.model_copy(update=update))
