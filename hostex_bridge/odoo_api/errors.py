"""Exceptions raised by the Odoo XML-RPC client."""

from typing import Optional


class OdooError(Exception):
    """Odoo returned an XML-RPC fault (access error, bad domain, missing field...)."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class OdooNetworkError(Exception):
    """Transport failure or timeout talking to Odoo. The cause is chained."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class OdooAuthError(Exception):
    """Odoo credentials are missing or were rejected."""
