"""
Run the voucher jobs once without starting the web server.

Usage:
    python -m hostex_bridge.jobs
    python -m hostex_bridge.jobs --skip-empty-greenlist
    python -m hostex_bridge.jobs --log-level DEBUG
"""

import argparse
from typing import List, Optional

import structlog

from hostex_bridge import config
from hostex_bridge.dependencies import build_hostex_client, build_odoo_client
from hostex_bridge.logging_config import setup_logging
from hostex_bridge.odoo_api.errors import OdooAuthError
from hostex_bridge.properties import load_property_registry
from hostex_bridge.services.startup import run_startup_jobs

logger = structlog.get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run Hostex voucher cleanup and loyalty sync")
    parser.add_argument(
        "--properties",
        default=config.PROPERTY_CONFIG_PATH,
        help="Path to the property configuration JSON (default: $PROPERTY_CONFIG_PATH)",
    )
    parser.add_argument(
        "--skip-empty-greenlist",
        action="store_true",
        default=config.VOUCHER_CLEANUP_SKIP_EMPTY_GREENLIST,
        help="Leave properties with an empty greenlist untouched",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override LOG_LEVEL for this run (e.g. DEBUG)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Return 0 when both jobs completed, 1 otherwise."""
    args = parse_args(argv)
    setup_logging(args.log_level)

    hostex = build_hostex_client()
    try:
        odoo = build_odoo_client()
    except OdooAuthError as e:
        logger.warning("odoo_unavailable", error=str(e))
        odoo = None

    try:
        result = run_startup_jobs(
            hostex,
            odoo,
            load_property_registry(args.properties),
            skip_empty_greenlist=args.skip_empty_greenlist,
        )
    finally:
        hostex.close()
    return 0 if result.cleanup is not None and result.loyalty_sync is not None else 1


if __name__ == "__main__":
    raise SystemExit(main())
