"""
Client for the Hostex open API (reservations, conversations, webhooks) and the
Hostex private API (promotion codes / vouchers).

All calls are sequential and blocking; each one has a timeout and either
returns parsed data or raises HostexError / HostexNetworkError. A timeout
passed to a single call is a hard limit on the whole exchange, body included;
the client-wide timeout only bounds each connect and read.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Any, Dict, List, Optional, cast
from urllib.parse import urlsplit

import requests
import structlog
from pydantic import ValidationError

from hostex_bridge.hostex_api.errors import HostexError, HostexNetworkError
from hostex_bridge.metrics import api_latency, api_requests
from hostex_bridge.schemas.messages import (
    Conversation,
    ConversationDetails,
    ConversationPage,
    Message,
)
from hostex_bridge.schemas.reservations import Reservation
from hostex_bridge.schemas.vouchers import CreateVoucherInput, Voucher
from hostex_bridge.utils.datetime import parse_timestamp, to_iso_z, utc_now

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://api.hostex.io/v3"
DEFAULT_PRIVATE_API_BASE_URL = "https://hostex.io/api/bs"
DEFAULT_TIMEOUT = 30.0

# Query parameters the Hostex web app sends with every private API call
PRIVATE_API_PARAMS = {"opid": "117892", "opclient": "Web-Mac-Chrome"}

WEBHOOK_EVENTS = [
    "reservation.created",
    "reservation.updated",
    "reservation.cancelled",
    "message.received",
    "review.created",
]


class HostexClient:
    """
    Thin wrapper around the Hostex HTTP APIs.

    Args:
        access_token (str): Token for the open API, sent as Hostex-Access-Token.
        base_url (str): Open API base URL.
        timeout (float): Default per-request timeout in seconds.
        session_cookie (Optional[str]): hostex_session cookie for the private API.
        private_api_base_url (str): Private API base URL.
        session (Optional[requests.Session]): Injected session, mainly for tests.
    """

    def __init__(
        self,
        access_token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session_cookie: Optional[str] = None,
        private_api_base_url: str = DEFAULT_PRIVATE_API_BASE_URL,
        session: Optional[requests.Session] = None,
    ):
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session_cookie = session_cookie
        self.private_api_base_url = private_api_base_url.rstrip("/")
        self.session = session or requests.Session()

    # ------------------------------------------------------------------ transport

    def _request(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        timeout: Optional[float] = None,
        check_error_code: bool = False,
    ) -> Dict[str, Any]:
        """
        Perform one HTTP call and decode the Hostex envelope.

        Args:
            method (str): HTTP method.
            url (str): Absolute URL.
            headers (Dict[str, str]): Request headers.
            params (Optional[Dict[str, Any]]): Query parameters.
            json (Optional[Any]): JSON body.
            timeout (Optional[float]): Deadline in seconds for the whole call,
                including reading the body. None uses the client timeout per read.
            check_error_code (bool): Also fail on a non-zero error_code in a 2xx body.

        Returns:
            Dict[str, Any]: Decoded JSON body.

        Raises:
            HostexError: Hostex reported an error.
            HostexNetworkError: The request could not be completed in time.
        """
        endpoint = urlsplit(url).path
        start_time = time.time()
        try:
            res = self._send(method, url, headers, params, json, timeout)
        except requests.RequestException as err:
            api_requests.labels(endpoint=endpoint, status_code="error").inc()
            logger.warning("hostex_request_failed", endpoint=endpoint, error=str(err))
            raise HostexNetworkError(str(err) or "Network request failed") from err
        except FuturesTimeoutError as err:
            api_requests.labels(endpoint=endpoint, status_code="timeout").inc()
            logger.warning("hostex_request_timed_out", endpoint=endpoint, timeout=timeout)
            raise HostexNetworkError(
                f"Request to {endpoint} did not complete within {timeout}s"
            ) from err

        api_requests.labels(endpoint=endpoint, status_code=str(res.status_code)).inc()
        api_latency.labels(endpoint=endpoint).observe(time.time() - start_time)

        try:
            data = cast(Dict[str, Any], res.json())
        except ValueError as err:
            if not res.ok:
                raise HostexError(f"HTTP {res.status_code}: {res.reason}") from err
            raise HostexNetworkError(f"Invalid JSON from {endpoint}") from err

        error_code = data.get("error_code")
        if not res.ok or (check_error_code and error_code not in (None, 0, "0")):
            raise HostexError(
                data.get("error_msg") or f"HTTP {res.status_code}: {res.reason}",
                request_id=data.get("request_id"),
                error_code=str(error_code) if error_code is not None else None,
            )

        return data

    def _send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        params: Optional[Dict[str, Any]],
        json: Optional[Any],
        deadline: Optional[float],
    ) -> requests.Response:
        if deadline is None:
            return self.session.request(
                method, url, headers=headers, params=params, json=json, timeout=self.timeout
            )

        # Deadline covers the whole exchange; an abandoned read ends at its socket timeout
        executor = ThreadPoolExecutor(max_workers=1)
        future = executor.submit(
            self.session.request,
            method,
            url,
            headers=headers,
            params=params,
            json=json,
            timeout=deadline,
        )
        try:
            return future.result(timeout=deadline)
        finally:
            executor.shutdown(wait=False)

    def close(self) -> None:
        """Release pooled connections."""
        self.session.close()

    def _open_api(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        headers = {
            "Hostex-Access-Token": self.access_token,
            "Content-Type": "application/json",
        }
        return self._request(
            method, f"{self.base_url}{path}", headers, params=params, json=json, timeout=timeout
        )

    def _private_api(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> Dict[str, Any]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json, text/plain, */*",
        }
        if self.session_cookie:
            headers["Cookie"] = f"hostex_session={self.session_cookie};"
        query = {**(params or {}), **PRIVATE_API_PARAMS}
        return self._request(
            method,
            f"{self.private_api_base_url}{path}",
            headers,
            params=query,
            json=json,
            check_error_code=True,
        )

    # --------------------------------------------------------------- reservations

    def get_reservations(self, **params: Any) -> List[Reservation]:
        """
        Fetch reservations, forwarding any non-None query parameters.

        Supported filters include property_id, status, check_in_from, check_in_to,
        check_out_from, check_out_to, updated_from, updated_to, page and page_size.
        Records that do not validate are logged and skipped.

        Returns:
            List[Reservation]: Parsed reservations in API order.
        """
        query = {key: value for key, value in params.items() if value is not None}
        body = self._open_api("GET", "/reservations", params=query or None)
        raw_reservations = (body.get("data") or {}).get("reservations") or []

        reservations: List[Reservation] = []
        for raw in raw_reservations:
            try:
                reservations.append(Reservation.model_validate(raw))
            except ValidationError as err:
                logger.error(
                    "reservation_invalid",
                    reservation_code=raw.get("reservation_code") if isinstance(raw, dict) else None,
                    error=str(err),
                )

        logger.info("reservations_fetched", count=len(reservations))
        return reservations

    # -------------------------------------------------------------- conversations

    def get_conversations(self, page: int = 1, page_size: int = 20) -> ConversationPage:
        """
        Fetch one page of conversations (1-based page number).

        Returns:
            ConversationPage: Conversations on the page and the reported total.
        """
        offset = (page - 1) * page_size
        body = self._open_api(
            "GET", "/conversations", params={"offset": offset, "limit": page_size}
        )
        data = body.get("data") or {}
        raw_conversations = data.get("conversations") or []

        conversations = [
            Conversation(
                id=str(conv["id"]),
                guest_name=(conv.get("guest") or {}).get("name") or "",
                property_id=str(conv.get("property_title") or ""),
                channel=conv.get("channel_type"),
                last_message_at=conv.get("last_message_at"),
            )
            for conv in raw_conversations
        ]

        return ConversationPage(
            data=conversations,
            total=data.get("total") or len(conversations),
            page=page,
            page_size=page_size,
            request_id=body.get("request_id"),
        )

    def get_conversation_details(
        self, conversation_id: str, timeout: Optional[float] = None
    ) -> ConversationDetails:
        """
        Fetch a conversation with all of its messages.

        Args:
            conversation_id (str): Hostex conversation id.
            timeout (Optional[float]): Hard limit in seconds for the whole fetch.

        Raises:
            HostexError: If the response carries no message list.
            HostexNetworkError: If the fetch fails or exceeds the timeout.
        """
        body = self._open_api("GET", f"/conversations/{conversation_id}", timeout=timeout)
        data = body.get("data")
        if not data or data.get("messages") is None:
            raise HostexError(
                f"Invalid response structure for conversation {conversation_id}",
                request_id=body.get("request_id"),
                error_code=str(body.get("error_code")),
            )

        conv_id = str(data.get("id") or conversation_id)
        conversation = Conversation(
            id=conv_id,
            guest_name=(data.get("guest") or {}).get("name") or "",
            property_id=str(data.get("property_title") or ""),
            channel=data.get("channel_type"),
            last_message_at=data.get("last_message_at") or to_iso_z(utc_now()),
        )
        messages = [
            Message(
                id=str(msg["id"]),
                conversation_id=conv_id,
                content=msg.get("content") or "",
                sent_by=msg.get("sender_role", "guest"),
                sent_at=parse_timestamp(msg["created_at"]),
                message_type="text" if msg.get("display_type") == "Text" else "image",
                image_url=msg.get("attachment") or None,
            )
            for msg in data["messages"]
        ]
        return ConversationDetails(conversation=conversation, messages=messages)

    # ------------------------------------------------------------------- webhooks

    def get_webhooks(self) -> List[Dict[str, Any]]:
        body = self._open_api("GET", "/webhooks")
        return list((body.get("data") or {}).get("webhooks") or [])

    def create_webhook(self, url: str, events: Optional[List[str]] = None) -> Dict[str, Any]:
        body = self._open_api(
            "POST", "/webhooks", json={"url": url, "events": events or WEBHOOK_EVENTS}
        )
        return cast(Dict[str, Any], (body.get("data") or {}).get("webhook") or {})

    # ------------------------------------------------------------------- vouchers

    def get_vouchers(
        self, thirdparty_account_id: str, page: int = 1, page_size: int = 1000
    ) -> List[Voucher]:
        """
        List promotion codes for one thirdparty account.

        Returns:
            List[Voucher]: Vouchers on the requested page.
        """
        body = self._private_api(
            "GET",
            "/promotion_code/list",
            params={
                "thirdparty_account_id": thirdparty_account_id,
                "page": page,
                "page_size": page_size,
            },
        )
        return [Voucher.model_validate(raw) for raw in body.get("data") or []]

    def create_voucher(self, voucher: CreateVoucherInput) -> int:
        """
        Create a promotion code.

        Returns:
            int: Id of the created voucher.
        """
        payload = voucher.model_dump()
        # Hostex only accepts null or a full ISO timestamp here
        if payload.get("expired_at"):
            payload["expired_at"] = to_iso_z(parse_timestamp(payload["expired_at"]))
        body = self._private_api("POST", "/promotion_code/create", json=payload)
        created = body.get("data") or {}
        if "id" not in created:
            raise HostexError(
                f"Voucher {voucher.code} created without an id in the response",
                request_id=body.get("request_id"),
            )
        return int(created["id"])

    def delete_voucher(self, thirdparty_account_id: str, voucher_id: int) -> None:
        self._private_api(
            "POST",
            "/promotion_code/delete",
            json={"thirdparty_account_id": thirdparty_account_id, "id": voucher_id},
        )
