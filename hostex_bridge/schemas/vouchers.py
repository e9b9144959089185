from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

DiscountType = Literal["flat", "percent"]


class Voucher(BaseModel):
    """
    A Hostex promotion code scoped to one thirdparty account.

    Codes are unique per account, compared case-insensitively.
    """

    id: int
    code: str
    discount: float = 0
    discount_type: DiscountType = "flat"
    expired_at: Optional[str] = None
    stay_period: Optional[int] = None
    earliest_check_in: Optional[str] = None
    latest_check_out: Optional[str] = None
    minimum_stay: Optional[int] = None
    number_of_redemption: Optional[int] = None
    redeemed_time: int = 0


class CreateVoucherInput(BaseModel):
    """Payload for the Hostex promotion code create endpoint."""

    thirdparty_account_id: str
    code: str
    discount: int
    discount_type: DiscountType
    earliest_check_in: Optional[str] = None
    latest_check_out: Optional[str] = None
    expired_at: Optional[str] = None
    minimum_stay: int = 1
    number_of_redemption: int = 1
    stay_period: int = 1


class LoyaltyCard(BaseModel):
    """
    An Odoo ``loyalty.card`` record.

    Odoo sends ``False`` for empty fields; those become ``None`` here.
    """

    id: int
    code: Optional[str] = None
    points: Optional[float] = None
    expiration_date: Optional[str] = None
    partner_id: Optional[Union[int, list[Any]]] = Field(default=None)

    @field_validator("code", "points", "expiration_date", "partner_id", mode="before")
    @classmethod
    def false_is_none(cls, value: Any) -> Any:
        if value is False:
            return None
        return value
