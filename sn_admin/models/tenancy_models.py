from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# === End of Tenancy Wizard Selection ===
class EndOfTenancyForm(BaseModel):
    model_config = ConfigDict(frozen=True)

    # === Property Details ===
    property_type: str = ""          # "flat", "house", "house-share"
    condition: str = ""              # "well-maintained", "good", "moderate", ...
    bedrooms: int = Field(0, ge=0)
    bathrooms: int = Field(0, ge=0)
    furniture_status: str = ""       # display only, does not affect price

    # === Add-ons ===
    additional_rooms: List[str] = []
    oven_type: Optional[str] = None
    blinds: Dict[str, int] = {}
    extra_services: List[str] = []
    carpet_items: List[str] = []
    upholstery_items: Dict[str, int] = {}
    mattress_items: List[str] = []

    # === Non-pricing Details ===
    notes: str = ""
    access: str = ""
    parking_details: str = ""


class AddOnTotals(BaseModel):
    additional_rooms: float = 0.0
    oven_cleaning: float = 0.0
    blinds: float = 0.0
    extra_services: float = 0.0
    carpet_cleaning: float = 0.0
    upholstery: float = 0.0
    mattress_cleaning: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.additional_rooms + self.oven_cleaning + self.blinds + self.extra_services
            + self.carpet_cleaning + self.upholstery + self.mattress_cleaning
        )


class TenancyPriceBreakdown(BaseModel):
    base_price: float
    condition_multiplier: float
    adjusted_base: float
    room_charge: float
    add_ons: AddOnTotals
    estimated_hours: float
    total_price: int


class EndOfTenancyBookingRequest(BaseModel):
    form: EndOfTenancyForm
    customer: int
    date_time: datetime
    address: str
    postcode: str = ""
    payment_method: str = "Card"
