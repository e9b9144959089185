from datetime import date, datetime
from typing import Union

from pydantic import BaseModel, ConfigDict, Field

from hostex_bridge.schemas.reservations import Reservation


class CalendarEvent(BaseModel):
    """
    A transient calendar entry derived from a reservation.

    All-day events span check-in to check-out as bare dates. Timed events mark a
    single check-in or check-out instant, so ``start == end``.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str
    start: Union[datetime, date]
    end: Union[datetime, date]
    is_all_day: bool = Field(..., alias="isAllDay")
    uid: str
    reservation: Reservation

    def to_json(self) -> dict:
        """Serialize with the public ``isAllDay`` key."""
        return self.model_dump(mode="json", by_alias=True)
