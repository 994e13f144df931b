from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

HOURLY = "hourly"
PERCENTAGE = "percentage"
FIXED = "fixed"


# === Booking form cost/pay state ===
class CostFormState(BaseModel):
    model_config = ConfigDict(frozen=True)

    hourly_service: bool = True
    hours: float = Field(0.0, ge=0)
    cost_per_hour: float = Field(0.0, ge=0)

    discount_type: Optional[str] = None   # FIXED, PERCENTAGE or None
    discount_value: float = Field(0.0, ge=0)

    total_cost: float = 0.0
    total_cost_overridden: bool = False

    cleaner_pay_method: str = PERCENTAGE  # HOURLY or PERCENTAGE
    cleaner_hourly_rate: float = Field(0.0, ge=0)
    cleaner_percentage: float = Field(70.0, ge=0)
    cleaner_pay: float = 0.0


class CostFormChange(BaseModel):
    state: CostFormState
    field: str
    value: Any = None
