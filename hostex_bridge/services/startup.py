"""Voucher jobs run once when the service starts."""

from dataclasses import dataclass
from typing import Optional

import structlog

from hostex_bridge.config import VOUCHER_CLEANUP_SKIP_EMPTY_GREENLIST
from hostex_bridge.hostex_api.client import HostexClient
from hostex_bridge.metrics import voucher_job_runs
from hostex_bridge.odoo_api.client import OdooClient
from hostex_bridge.properties import PropertyRegistry
from hostex_bridge.services.loyalty_voucher_sync import (
    LoyaltySyncSummary,
    sync_loyalty_cards_to_vouchers,
)
from hostex_bridge.services.voucher_cleanup import CleanupSummary, cleanup_vouchers

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StartupJobsResult:
    """Outcome of each job; None means that job failed outright."""

    cleanup: Optional[CleanupSummary] = None
    loyalty_sync: Optional[LoyaltySyncSummary] = None


def run_startup_jobs(
    hostex: HostexClient,
    odoo: Optional[OdooClient],
    properties: PropertyRegistry,
    skip_empty_greenlist: bool = VOUCHER_CLEANUP_SKIP_EMPTY_GREENLIST,
) -> StartupJobsResult:
    """
    Run voucher cleanup, then loyalty card sync.

    A failure in one job is logged and does not stop the other. Nothing is
    raised to the caller, so application start never depends on these jobs.

    Args:
        hostex: Hostex client.
        odoo: Odoo client, or None when Odoo is not configured (sync is skipped).
        properties: Configured properties.
        skip_empty_greenlist (bool): Passed through to the cleanup job.

    Returns:
        StartupJobsResult: Summaries of the jobs that completed.
    """
    logger.info("startup_jobs_started")

    cleanup: Optional[CleanupSummary] = None
    try:
        cleanup = cleanup_vouchers(hostex, properties, skip_empty_greenlist=skip_empty_greenlist)
        voucher_job_runs.labels(job="cleanup", status="success").inc()
    except Exception as e:
        voucher_job_runs.labels(job="cleanup", status="failure").inc()
        logger.exception("voucher_cleanup_failed", error=str(e))

    loyalty_sync: Optional[LoyaltySyncSummary] = None
    if odoo is None:
        logger.warning("loyalty_sync_skipped", reason="odoo_not_configured")
    else:
        try:
            loyalty_sync = sync_loyalty_cards_to_vouchers(hostex, odoo, properties)
            voucher_job_runs.labels(job="loyalty_sync", status="success").inc()
        except Exception as e:
            voucher_job_runs.labels(job="loyalty_sync", status="failure").inc()
            logger.exception("loyalty_sync_failed", error=str(e))

    logger.info(
        "startup_jobs_completed",
        cleanup_ok=cleanup is not None,
        loyalty_sync_ok=loyalty_sync is not None,
    )
    return StartupJobsResult(cleanup=cleanup, loyalty_sync=loyalty_sync)
