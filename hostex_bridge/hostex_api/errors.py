"""Exceptions raised by the Hostex API client."""

from typing import Optional


class HostexError(Exception):
    """
    Hostex answered with a non-2xx status or a non-zero error_code.

    Attributes:
        message: Error message from Hostex (error_msg) or the HTTP status line
        request_id: Hostex request id, useful when contacting support
        error_code: Hostex error code
    """

    def __init__(
        self,
        message: str,
        request_id: Optional[str] = None,
        error_code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.request_id = request_id or "Unknown requestId"
        self.error_code = error_code or "Unknown errorCode"


class HostexNetworkError(Exception):
    """Transport failure or timeout talking to Hostex. The cause is chained."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class HostexAuthError(Exception):
    """Hostex credentials are missing from the environment."""
