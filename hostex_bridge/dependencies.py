"""
FastAPI dependency injection providers.

Route handlers receive their Hostex client, property registry and export
cutoff through these providers. Tests replace them with
``app.dependency_overrides`` so no network access is needed.

Testing Example:
    >>> from unittest.mock import Mock
    >>> from fastapi.testclient import TestClient
    >>>
    >>> mock_hostex = Mock(spec=HostexClient)
    >>> app.dependency_overrides[get_hostex_client] = lambda: mock_hostex
    >>> TestClient(app).get("/bookings/next")
"""

from __future__ import annotations

from datetime import datetime
from typing import Generator, Optional

from hostex_bridge import config
from hostex_bridge.hostex_api.client import HostexClient
from hostex_bridge.hostex_api.errors import HostexAuthError
from hostex_bridge.odoo_api.client import OdooClient
from hostex_bridge.odoo_api.errors import OdooAuthError
from hostex_bridge.properties import PropertyRegistry, get_property_registry


def build_hostex_client() -> HostexClient:
    """
    Build a Hostex client from the environment.

    Raises:
        HostexAuthError: If HOSTEX_ACCESS_TOKEN is not set.
    """
    if not config.HOSTEX_ACCESS_TOKEN:
        raise HostexAuthError("HOSTEX_ACCESS_TOKEN is not configured")
    return HostexClient(
        access_token=config.HOSTEX_ACCESS_TOKEN,
        base_url=config.HOSTEX_BASE_URL,
        timeout=config.HOSTEX_TIMEOUT,
        session_cookie=config.HOSTEX_SESSION_COOKIE,
        private_api_base_url=config.HOSTEX_PRIVATE_API_BASE_URL,
    )


def build_odoo_client() -> OdooClient:
    """
    Build an Odoo client from the environment.

    Raises:
        OdooAuthError: If any of the Odoo connection settings is missing.
    """
    settings = {
        "ODOO_URL": config.ODOO_URL,
        "ODOO_DATABASE": config.ODOO_DATABASE,
        "ODOO_USERNAME": config.ODOO_USERNAME,
        "ODOO_PASSWORD": config.ODOO_PASSWORD,
    }
    missing = [name for name, value in settings.items() if not value]
    if missing:
        raise OdooAuthError(f"Odoo is not configured: missing {', '.join(missing)}")
    return OdooClient(
        url=config.ODOO_URL or "",
        database=config.ODOO_DATABASE or "",
        username=config.ODOO_USERNAME or "",
        password=config.ODOO_PASSWORD or "",
        timeout=config.ODOO_TIMEOUT,
    )


def get_hostex_client() -> Generator[HostexClient, None, None]:
    """
    Provide a Hostex client for one request.

    The client's pooled connections are released once the response is done.

    Yields:
        HostexClient: Client built from the environment
    """
    client = build_hostex_client()
    try:
        yield client
    finally:
        client.close()


def get_properties() -> PropertyRegistry:
    """Provide the process-wide property registry."""
    return get_property_registry()


def get_export_cutoff() -> Optional[datetime]:
    """Provide the message export cutoff (None disables filtering)."""
    return config.MESSAGE_EXPORT_CUTOFF_DATE
