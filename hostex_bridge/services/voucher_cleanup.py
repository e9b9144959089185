"""
Startup cleanup of Hostex vouchers.

For every configured property, any voucher whose code is not on that
property's greenlist is deleted. Codes are compared case-insensitively.
"""

from dataclasses import dataclass, replace
from typing import List, Protocol

import structlog

from hostex_bridge.metrics import voucher_operation_errors, vouchers_deleted
from hostex_bridge.properties import PropertyRegistry
from hostex_bridge.schemas.vouchers import Voucher

logger = structlog.get_logger(__name__)

VOUCHER_PAGE_SIZE = 1000


class VoucherStore(Protocol):
    def get_vouchers(
        self, thirdparty_account_id: str, page: int = 1, page_size: int = 1000
    ) -> List[Voucher]: ...

    def delete_voucher(self, thirdparty_account_id: str, voucher_id: int) -> None: ...


@dataclass(frozen=True)
class CleanupSummary:
    properties_checked: int = 0
    vouchers_checked: int = 0
    deleted: int = 0
    errors: int = 0
    skipped: int = 0

    def __add__(self, other: "CleanupSummary") -> "CleanupSummary":
        return CleanupSummary(
            properties_checked=self.properties_checked + other.properties_checked,
            vouchers_checked=self.vouchers_checked + other.vouchers_checked,
            deleted=self.deleted + other.deleted,
            errors=self.errors + other.errors,
            skipped=self.skipped + other.skipped,
        )


def _cleanup_property(
    client: VoucherStore,
    property_id: int,
    thirdparty_account_id: str,
    greenlist: List[str],
    skip_empty_greenlist: bool,
) -> CleanupSummary:
    if not greenlist and skip_empty_greenlist:
        logger.warning("voucher_cleanup_empty_greenlist_skipped", property_id=property_id)
        return CleanupSummary(skipped=1)

    try:
        vouchers = client.get_vouchers(
            thirdparty_account_id, page=1, page_size=VOUCHER_PAGE_SIZE
        )
    except Exception as e:
        voucher_operation_errors.labels(job="cleanup").inc()
        logger.exception(
            "voucher_list_failed",
            property_id=property_id,
            thirdparty_account_id=thirdparty_account_id,
            error=str(e),
        )
        return CleanupSummary(properties_checked=1, errors=1)

    logger.info(
        "voucher_cleanup_property",
        property_id=property_id,
        thirdparty_account_id=thirdparty_account_id,
        voucher_count=len(vouchers),
        greenlist_count=len(greenlist),
    )
    if not greenlist:
        logger.warning(
            "voucher_cleanup_empty_greenlist",
            property_id=property_id,
            vouchers_to_delete=len(vouchers),
        )

    keep = {code.upper() for code in greenlist}
    summary = CleanupSummary(properties_checked=1, vouchers_checked=len(vouchers))

    for voucher in vouchers:
        if voucher.code.upper() in keep:
            logger.debug("voucher_kept", code=voucher.code, voucher_id=voucher.id)
            continue

        try:
            client.delete_voucher(thirdparty_account_id, voucher.id)
        except Exception as e:
            voucher_operation_errors.labels(job="cleanup").inc()
            logger.exception(
                "voucher_delete_failed",
                property_id=property_id,
                code=voucher.code,
                voucher_id=voucher.id,
                error=str(e),
            )
            summary = replace(summary, errors=summary.errors + 1)
            continue

        vouchers_deleted.inc()
        logger.info(
            "voucher_deleted", property_id=property_id, code=voucher.code, voucher_id=voucher.id
        )
        summary = replace(summary, deleted=summary.deleted + 1)

    return summary


def cleanup_vouchers(
    client: VoucherStore,
    properties: PropertyRegistry,
    skip_empty_greenlist: bool = False,
) -> CleanupSummary:
    """
    Delete every voucher not on its property's greenlist.

    Properties without a thirdparty_account_id are skipped. Running the job
    twice in a row deletes nothing the second time.

    Args:
        client: Voucher store (normally HostexClient).
        properties: Configured properties, processed in configuration order.
        skip_empty_greenlist (bool): Leave properties with an empty greenlist
            alone instead of deleting all of their vouchers.

    Returns:
        CleanupSummary: Totals across all properties.
    """
    property_ids = properties.get_all_property_ids()
    if not property_ids:
        logger.info("voucher_cleanup_no_properties")
        return CleanupSummary()

    total = CleanupSummary()
    for property_id in property_ids:
        thirdparty_account_id = properties.get_property_thirdparty_account_id(property_id)
        if not thirdparty_account_id:
            logger.warning("voucher_cleanup_no_account", property_id=property_id)
            total += CleanupSummary(skipped=1)
            continue

        total += _cleanup_property(
            client,
            property_id,
            thirdparty_account_id,
            properties.get_property_voucher_greenlist(property_id),
            skip_empty_greenlist,
        )

    logger.info(
        "voucher_cleanup_completed",
        properties_checked=total.properties_checked,
        vouchers_checked=total.vouchers_checked,
        deleted=total.deleted,
        errors=total.errors,
        skipped=total.skipped,
    )
    return total
