import os
from datetime import datetime, timezone
from typing import Optional

from dateutil import parser as date_parser
from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = LOG_LEVEL == "DEBUG"

# Hostex open API (access token auth)
HOSTEX_ACCESS_TOKEN = os.getenv("HOSTEX_ACCESS_TOKEN")
HOSTEX_BASE_URL = os.getenv("HOSTEX_BASE_URL", "https://api.hostex.io/v3")

# Hostex private API (session cookie auth, used for promotion codes)
HOSTEX_PRIVATE_API_BASE_URL = os.getenv(
    "HOSTEX_PRIVATE_API_BASE_URL", "https://hostex.io/api/bs"
)
HOSTEX_SESSION_COOKIE = os.getenv("HOSTEX_SESSION_COOKIE")

# Timeouts are configured in milliseconds
HOSTEX_TIMEOUT = int(os.getenv("HOSTEX_TIMEOUT", "30000")) / 1000

ODOO_URL = os.getenv("ODOO_URL")
ODOO_DATABASE = os.getenv("ODOO_DATABASE")
ODOO_USERNAME = os.getenv("ODOO_USERNAME")
ODOO_PASSWORD = os.getenv("ODOO_PASSWORD")
ODOO_TIMEOUT = int(os.getenv("ODOO_TIMEOUT", "30000")) / 1000

PROPERTY_CONFIG_PATH = os.getenv("PROPERTY_CONFIG_PATH")

RUN_STARTUP_JOBS = os.getenv("RUN_STARTUP_JOBS", "true").lower() == "true"
VOUCHER_CLEANUP_SKIP_EMPTY_GREENLIST = (
    os.getenv("VOUCHER_CLEANUP_SKIP_EMPTY_GREENLIST", "false").lower() == "true"
)

WEBHOOK_URL = os.getenv("WEBHOOK_URL")

ALLOWED_ORIGINS: list[str] = [
    origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",")
]


def parse_cutoff_date(raw: Optional[str]) -> Optional[datetime]:
    """
    Parse the message export cutoff into a timezone-aware datetime.

    Args:
        raw (Optional[str]): ISO 8601 string. Empty or None disables the cutoff.

    Returns:
        Optional[datetime]: Parsed cutoff, assumed UTC when no offset is given.
    """
    if not raw or not raw.strip():
        return None
    parsed = date_parser.isoparse(raw.strip())
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# Messages older than this are excluded from the LLM training export
MESSAGE_EXPORT_CUTOFF_DATE = parse_cutoff_date(
    os.getenv("MESSAGE_EXPORT_CUTOFF_DATE", "2025-07-15T00:00:00Z")
)
