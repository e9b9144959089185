from typing import Optional

from pydantic import BaseModel, Field

from hostex_bridge.schemas.vouchers import DiscountType


class PropertyTimeConfig(BaseModel):
    """Check-in and check-out times for a property, 24-hour clock."""

    check_in_hour: int = Field(16, ge=0, le=23)
    check_in_minute: int = Field(0, ge=0, le=59)
    check_out_hour: int = Field(12, ge=0, le=23)
    check_out_minute: int = Field(0, ge=0, le=59)


class LoyaltyToVoucherConfig(BaseModel):
    """How Odoo loyalty points convert into a Hostex voucher."""

    discount_type: DiscountType = Field("flat", description="flat = points as currency, percent = points as %")
    minimum_stay: Optional[int] = Field(None, description="Minimum nights required to use the voucher")
    number_of_redemptions: Optional[int] = Field(None, description="How many times the voucher can be used")


class PropertyConfig(BaseModel):
    """Operator supplied configuration for one Hostex property."""

    times: PropertyTimeConfig = Field(default_factory=PropertyTimeConfig)
    voucher_greenlist: list[str] = Field(
        default_factory=list,
        description="Voucher codes to keep; every other voucher is deleted at startup",
    )
    thirdparty_account_id: Optional[str] = Field(
        None, description="Hostex thirdparty_account_id, required for voucher management"
    )
    loyalty_to_voucher: Optional[LoyaltyToVoucherConfig] = None
