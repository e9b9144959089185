"""
Odoo external API client (XML-RPC).

See https://www.odoo.com/documentation/17.0/developer/reference/external_api.html
"""

from __future__ import annotations

import http.client
import xmlrpc.client
from typing import Any, Optional

import structlog

from hostex_bridge.metrics import odoo_calls
from hostex_bridge.odoo_api.errors import OdooAuthError, OdooError, OdooNetworkError
from hostex_bridge.schemas.vouchers import LoyaltyCard

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 30.0

LOYALTY_CARD_MODEL = "loyalty.card"
LOYALTY_CARD_FIELDS = ["id", "code", "points", "expiration_date", "partner_id"]


class _TimeoutTransport(xmlrpc.client.Transport):
    def __init__(self, timeout: float):
        super().__init__()
        self.timeout = timeout

    def make_connection(self, host: Any) -> http.client.HTTPConnection:
        conn = super().make_connection(host)
        conn.timeout = self.timeout
        return conn


class _TimeoutSafeTransport(xmlrpc.client.SafeTransport):
    def __init__(self, timeout: float):
        super().__init__()
        self.timeout = timeout

    def make_connection(self, host: Any) -> http.client.HTTPConnection:
        conn = super().make_connection(host)
        conn.timeout = self.timeout
        return conn


class OdooClient:
    """
    Minimal Odoo client: authenticate once, then execute_kw on models.

    Args:
        url (str): Odoo base URL, e.g. https://example.odoo.com
        database (str): Database name.
        username (str): Login.
        password (str): Password or API key.
        timeout (float): Socket timeout in seconds for every call.
    """

    def __init__(
        self,
        url: str,
        database: str,
        username: str,
        password: str,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.url = url.rstrip("/")
        self.database = database
        self.username = username
        self.password = password
        self.timeout = timeout
        self._uid: Optional[int] = None

    def _proxy(self, path: str) -> xmlrpc.client.ServerProxy:
        transport: xmlrpc.client.Transport
        if self.url.startswith("https"):
            transport = _TimeoutSafeTransport(self.timeout)
        else:
            transport = _TimeoutTransport(self.timeout)
        return xmlrpc.client.ServerProxy(
            f"{self.url}{path}", transport=transport, allow_none=True
        )

    def authenticate(self) -> int:
        """
        Log in and cache the user id.

        Raises:
            OdooAuthError: If Odoo rejects the credentials.
            OdooNetworkError: If Odoo cannot be reached.
        """
        try:
            uid = self._proxy("/xmlrpc/2/common").authenticate(
                self.database, self.username, self.password, {}
            )
        except xmlrpc.client.Fault as err:
            raise OdooAuthError(f"Authentication failed: {err.faultString}") from err
        except (OSError, xmlrpc.client.ProtocolError) as err:
            raise OdooNetworkError(str(err) or "XMLRPC request failed") from err

        if not uid:
            raise OdooAuthError("Authentication failed: Invalid credentials")

        self._uid = int(uid)
        logger.info("odoo_authenticated", database=self.database, uid=self._uid)
        return self._uid

    def execute_kw(
        self,
        model: str,
        method: str,
        args: Optional[list[Any]] = None,
        kwargs: Optional[dict[str, Any]] = None,
    ) -> Any:
        """
        Call an ORM method on a model, authenticating first if needed.

        Raises:
            OdooError: On an XML-RPC fault.
            OdooNetworkError: On transport failure or timeout.
        """
        uid = self._uid if self._uid is not None else self.authenticate()
        try:
            result = self._proxy("/xmlrpc/2/object").execute_kw(
                self.database, uid, self.password, model, method, args or [], kwargs or {}
            )
        except xmlrpc.client.Fault as err:
            odoo_calls.labels(model=model, method=method, status="failure").inc()
            raise OdooError(err.faultString, code=str(err.faultCode)) from err
        except (OSError, xmlrpc.client.ProtocolError) as err:
            odoo_calls.labels(model=model, method=method, status="failure").inc()
            raise OdooNetworkError(str(err) or "XMLRPC request failed") from err

        odoo_calls.labels(model=model, method=method, status="success").inc()
        return result

    def search_read(
        self,
        model: str,
        domain: Optional[list[Any]] = None,
        fields: Optional[list[str]] = None,
        order: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        kwargs: dict[str, Any] = {}
        if fields:
            kwargs["fields"] = fields
        if order:
            kwargs["order"] = order
        if limit is not None:
            kwargs["limit"] = limit
        if offset is not None:
            kwargs["offset"] = offset
        return list(self.execute_kw(model, "search_read", [domain or []], kwargs))

    def get_loyalty_cards(
        self,
        domain: Optional[list[Any]] = None,
        fields: Optional[list[str]] = None,
        order: Optional[str] = "id desc",
    ) -> list[LoyaltyCard]:
        """
        Read loyalty.card records.

        Args:
            domain: Odoo search domain; empty means all cards.
            fields: Fields to read (defaults to the ones needed for vouchers).
            order: Sort order.
        """
        records = self.search_read(
            LOYALTY_CARD_MODEL,
            domain,
            fields=fields or LOYALTY_CARD_FIELDS,
            order=order,
        )
        return [LoyaltyCard.model_validate(record) for record in records]
