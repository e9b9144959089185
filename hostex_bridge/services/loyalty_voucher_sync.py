"""
Mirror Odoo loyalty cards into Hostex vouchers.

Each card with a code and a positive balance becomes a voucher (code
uppercased, discount = points rounded) on every configured property's
thirdparty account. Cards whose code already exists there are left alone,
so the job can be re-run safely.
"""

from dataclasses import dataclass
from typing import List, Protocol

import structlog

from hostex_bridge.calendar_feed.events import round_half_up
from hostex_bridge.metrics import voucher_operation_errors, vouchers_created
from hostex_bridge.properties import PropertyRegistry
from hostex_bridge.schemas.properties import LoyaltyToVoucherConfig
from hostex_bridge.schemas.vouchers import CreateVoucherInput, LoyaltyCard, Voucher

logger = structlog.get_logger(__name__)

VOUCHER_PAGE_SIZE = 1000

# Points as a flat currency discount, single use
DEFAULT_LOYALTY_CONFIG = LoyaltyToVoucherConfig(
    discount_type="flat", minimum_stay=1, number_of_redemptions=1
)


class VoucherWriter(Protocol):
    def get_vouchers(
        self, thirdparty_account_id: str, page: int = 1, page_size: int = 1000
    ) -> List[Voucher]: ...

    def create_voucher(self, voucher: CreateVoucherInput) -> int: ...


class LoyaltyCardSource(Protocol):
    def get_loyalty_cards(self) -> List[LoyaltyCard]: ...


@dataclass(frozen=True)
class LoyaltySyncSummary:
    created: int = 0
    skipped: int = 0
    errors: int = 0

    def __add__(self, other: "LoyaltySyncSummary") -> "LoyaltySyncSummary":
        return LoyaltySyncSummary(
            created=self.created + other.created,
            skipped=self.skipped + other.skipped,
            errors=self.errors + other.errors,
        )


CREATED = LoyaltySyncSummary(created=1)
SKIPPED = LoyaltySyncSummary(skipped=1)
FAILED = LoyaltySyncSummary(errors=1)


def build_voucher_input(
    card: LoyaltyCard, thirdparty_account_id: str, config: LoyaltyToVoucherConfig
) -> CreateVoucherInput:
    """Map a loyalty card with a code and points onto a voucher create payload."""
    return CreateVoucherInput(
        thirdparty_account_id=thirdparty_account_id,
        code=(card.code or "").upper(),
        discount=round_half_up(card.points or 0),
        discount_type=config.discount_type,
        earliest_check_in=None,
        latest_check_out=None,
        expired_at=card.expiration_date,
        minimum_stay=config.minimum_stay or 1,
        number_of_redemption=config.number_of_redemptions or 1,
        stay_period=1,
    )


def _sync_card(
    hostex: VoucherWriter,
    card: LoyaltyCard,
    thirdparty_account_id: str,
    config: LoyaltyToVoucherConfig,
) -> LoyaltySyncSummary:
    if not card.code:
        logger.info("loyalty_card_skipped", card_id=card.id, reason="no_code")
        return SKIPPED

    if card.points is None or card.points <= 0:
        logger.info(
            "loyalty_card_skipped",
            card_id=card.id,
            code=card.code,
            points=card.points,
            reason="no_points",
        )
        return SKIPPED

    vouchers = hostex.get_vouchers(thirdparty_account_id, page=1, page_size=VOUCHER_PAGE_SIZE)
    existing = next((v for v in vouchers if v.code.upper() == card.code.upper()), None)
    if existing is not None:
        logger.info(
            "voucher_exists",
            code=card.code,
            voucher_id=existing.id,
            thirdparty_account_id=thirdparty_account_id,
        )
        return SKIPPED

    payload = build_voucher_input(card, thirdparty_account_id, config)
    discount = (
        f"{payload.discount}%" if payload.discount_type == "percent" else f"€{payload.discount}"
    )
    logger.info(
        "voucher_creating",
        code=payload.code,
        discount=discount,
        thirdparty_account_id=thirdparty_account_id,
    )
    voucher_id = hostex.create_voucher(payload)
    vouchers_created.inc()
    logger.info("voucher_created", code=payload.code, voucher_id=voucher_id)
    return CREATED


def sync_loyalty_cards_to_vouchers(
    hostex: VoucherWriter,
    odoo: LoyaltyCardSource,
    properties: PropertyRegistry,
) -> LoyaltySyncSummary:
    """
    Create a Hostex voucher for every eligible Odoo loyalty card.

    Cards are fetched once. A failure for one card (voucher lookup or
    creation) is logged and counted; the remaining cards and properties are
    still processed.

    Args:
        hostex: Voucher writer (normally HostexClient).
        odoo: Loyalty card source (normally OdooClient).
        properties: Configured properties, processed in configuration order.

    Returns:
        LoyaltySyncSummary: Totals across all properties.

    Raises:
        OdooError: If the loyalty cards cannot be fetched at all.
    """
    property_ids = properties.get_all_property_ids()
    if not property_ids:
        logger.info("loyalty_sync_no_properties")
        return LoyaltySyncSummary()

    cards = odoo.get_loyalty_cards()
    if not cards:
        logger.info("loyalty_sync_no_cards")
        return LoyaltySyncSummary()
    logger.info("loyalty_cards_fetched", count=len(cards))

    total = LoyaltySyncSummary()
    for property_id in property_ids:
        thirdparty_account_id = properties.get_property_thirdparty_account_id(property_id)
        if not thirdparty_account_id:
            logger.warning("loyalty_sync_no_account", property_id=property_id)
            continue

        config = (
            properties.get_property_loyalty_to_voucher_config(property_id)
            or DEFAULT_LOYALTY_CONFIG
        )
        logger.info(
            "loyalty_sync_property",
            property_id=property_id,
            thirdparty_account_id=thirdparty_account_id,
            discount_type=config.discount_type,
        )

        for card in cards:
            try:
                total += _sync_card(hostex, card, thirdparty_account_id, config)
            except Exception as e:
                voucher_operation_errors.labels(job="loyalty_sync").inc()
                logger.exception(
                    "loyalty_voucher_failed",
                    property_id=property_id,
                    card=card.code or card.id,
                    error=str(e),
                )
                total += FAILED

    logger.info(
        "loyalty_sync_completed",
        created=total.created,
        skipped=total.skipped,
        errors=total.errors,
    )
    return total
