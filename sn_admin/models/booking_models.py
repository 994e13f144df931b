from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sn_admin.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


# === People ===
class Customer(BaseModel):
    id: int
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    is_first_time: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Cleaner(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    first_name: str = ""
    last_name: str = ""
    hourly_rate: float = 0.0
    # backend column is spelled "presentage_rate"
    percentage_rate: float = Field(70.0, alias="presentage_rate")

    @field_validator("hourly_rate", "percentage_rate", mode="before")
    @classmethod
    def _none_to_default(cls, value, info):
        if value is None:
            return 70.0 if info.field_name == "percentage_rate" else 0.0
        return value


# === Linen ===
class LinenUsageItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    quantity: int = Field(gt=0)
    product_name: str = ""


class LinenProduct(BaseModel):
    id: str
    name: str
    type: Optional[str] = None
    price: float = 0.0
    supplier_cost: float = 0.0


class LinenInventory(BaseModel):
    product_id: str
    clean_quantity: int = 0
    dirty_quantity: int = 0
    in_use_quantity: int = 0


# === Service Labels ===
class ServiceLabel(BaseModel):
    name: str
    color: Optional[str] = None
    kind: str = "service_type"


# === Booking ===
PAYMENT_STATUSES = {"Unpaid", "Paid", "Authorized", "Collecting", "Refunded", "Failed"}
CANCELLED_STATUS = "cancelled"


class BookingFields(BaseModel):
    customer: Optional[int] = None
    cleaner: Optional[int] = None
    date_time: Optional[datetime] = None
    address: Optional[str] = None
    postcode: Optional[str] = None

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None

    service_type: Optional[str] = None
    cleaning_type: Optional[str] = None
    frequently: Optional[str] = None
    same_day: Optional[bool] = None

    total_hours: Optional[float] = None
    cleaning_cost_per_hour: Optional[float] = None
    total_cost: Optional[float] = None
    cleaner_rate: Optional[float] = None
    cleaner_percentage: Optional[float] = None
    cleaner_pay: Optional[float] = None

    payment_method: Optional[str] = None
    payment_status: Optional[str] = None
    booking_status: Optional[str] = None

    linen_used: Optional[List[LinenUsageItem]] = None

    property_details: Optional[str] = None
    additional_details: Optional[str] = None
    access: Optional[str] = None
    parking_details: Optional[str] = None
    key_collection: Optional[str] = None
    extras: Optional[str] = None
    carpet_items: Optional[str] = None
    upholstery_items: Optional[str] = None
    mattress_items: Optional[str] = None

    invoice_id: Optional[str] = None
    invoice_link: Optional[str] = None


class BookingCreate(BookingFields):
    customer: int
    date_time: datetime
    address: str
    service_type: str
    payment_status: str = "Unpaid"
    booking_status: Optional[str] = "active"


class BookingUpdate(BookingFields):
    pass


class Booking(BookingFields):
    id: int


class AssignCleanerRequest(BaseModel):
    cleaner: Optional[int] = None
    pay_method: Optional[str] = None  # "hourly" or "percentage"


class DuplicateBookingRequest(BaseModel):
    date_time: datetime


class PaymentStatusRequest(BaseModel):
    payment_status: str

    @field_validator("payment_status")
    @classmethod
    def _known_status(cls, value):
        if value not in PAYMENT_STATUSES:
            raise ValueError(f"payment_status must be one of {sorted(PAYMENT_STATUSES)}")
        return value


# === List / Bulk ===
class BookingFilters(BaseModel):
    booking_status: Optional[str] = None
    payment_status: Optional[str] = None
    customer: Optional[int] = None
    cleaner: Optional[int] = None
    unassigned: bool = False
    service_type: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    search: Optional[str] = None
    page: int = Field(1, ge=1)
    page_size: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)


class BookingPage(BaseModel):
    items: List[Booking]
    page: int
    page_size: int
    total: Optional[int] = None


class AirbnbBookingDate(BaseModel):
    date_time: datetime
    same_day: bool = False


class BulkAirbnbRequest(BaseModel):
    customer: int
    cleaner: Optional[int] = None
    address: str
    postcode: str
    hours: float = Field(3.0, gt=0)
    cost_per_hour: float = Field(20.0, ge=0)
    cleaner_rate: float = Field(16.0, ge=0)
    payment_method: str = "Cash"
    dates: List[AirbnbBookingDate]


class BulkEditRequest(BaseModel):
    booking_ids: List[int]
    field: str
    value: Any = None


class BulkResult(BaseModel):
    succeeded: int = 0
    failed: int = 0
    created_ids: List[int] = []
    errors: List[str] = []
