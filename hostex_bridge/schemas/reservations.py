from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MoneyAmount(BaseModel):
    """An amount paired with its ISO 4217 currency code."""

    amount: float = 0
    currency: Optional[str] = None


class Rates(BaseModel):
    total_rate: Optional[MoneyAmount] = None
    total_commission: Optional[MoneyAmount] = None


class Reservation(BaseModel):
    """
    A Hostex reservation (booking).

    Only the fields used for calendar rendering are typed; every other field
    returned by Hostex is kept as-is so it can be passed through unchanged.
    """

    model_config = ConfigDict(extra="allow")

    reservation_code: str = Field(..., description="Stable Hostex reservation code")
    property_id: int
    check_in_date: date
    check_out_date: date
    status: str = Field(
        "accepted",
        description="pending, accepted, cancelled or completed; only cancelled is treated specially",
    )

    guest_name: str = ""
    guest_email: Optional[str] = None
    guest_phone: Optional[str] = None

    number_of_guests: int = 0
    number_of_adults: int = 0
    number_of_children: int = 0
    number_of_infants: int = 0
    number_of_pets: int = 0

    rates: Optional[Rates] = None

    channel_type: Optional[str] = None
    booked_at: Optional[str] = None
    remarks: Optional[str] = None
    channel_remarks: Optional[str] = None

    @property
    def is_cancelled(self) -> bool:
        return self.status == "cancelled"
