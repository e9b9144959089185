from dataclasses import dataclass, field
from typing import List, Protocol

import structlog

from hostex_bridge.metrics import message_export_conversations
from hostex_bridge.schemas.messages import Conversation, ConversationDetails, ConversationPage

logger = structlog.get_logger(__name__)

CONVERSATION_PAGE_SIZE = 100
CONVERSATION_DETAIL_TIMEOUT = 10.0


class ConversationSource(Protocol):
    def get_conversations(self, page: int = 1, page_size: int = 20) -> ConversationPage: ...

    def get_conversation_details(
        self, conversation_id: str, timeout: float | None = None
    ) -> ConversationDetails: ...


@dataclass(frozen=True)
class ConversationFetchResult:
    """
    Conversations discovered by paginating the listing.

    Attributes:
        conversations: Conversations in API order.
        pages_fetched: Number of page requests made (including a failed one).
        truncated: True when a page request failed and pagination stopped early.
    """

    conversations: List[Conversation] = field(default_factory=list)
    pages_fetched: int = 0
    truncated: bool = False


def fetch_all_conversations(
    client: ConversationSource, page_size: int = CONVERSATION_PAGE_SIZE
) -> ConversationFetchResult:
    """
    Page through the conversation list starting at page 1.

    Stops when a page returns fewer than ``page_size`` items or the running
    count reaches the server-reported total. A page that fails is logged and
    treated as an empty last page, and the result is flagged as truncated.

    Args:
        client: Conversation source (normally HostexClient).
        page_size (int): Conversations per page.

    Returns:
        ConversationFetchResult: Everything fetched before pagination ended.
    """
    conversations: List[Conversation] = []
    page = 1
    truncated = False

    while True:
        logger.info("conversations_page_fetching", page=page)
        try:
            response = client.get_conversations(page, page_size)
        except Exception as e:
            logger.error("conversations_page_failed", page=page, error=str(e))
            truncated = True
            break

        conversations.extend(response.data)
        logger.info("conversations_page_fetched", page=page, count=len(response.data))

        has_more_pages = len(response.data) == page_size and page * page_size < response.total
        if not has_more_pages:
            break
        page += 1

    return ConversationFetchResult(
        conversations=conversations, pages_fetched=page, truncated=truncated
    )


def fetch_conversation_messages(
    client: ConversationSource,
    conversations: List[Conversation],
    timeout: float = CONVERSATION_DETAIL_TIMEOUT,
) -> List[ConversationDetails]:
    """
    Fetch the full message list of each conversation, one at a time.

    A conversation whose fetch fails or times out is logged and left out; it
    is not retried.

    Args:
        client: Conversation source (normally HostexClient).
        conversations: Conversations to fetch, in output order.
        timeout (float): Per-conversation timeout in seconds.

    Returns:
        List[ConversationDetails]: Details for every conversation that succeeded.
    """
    threads: List[ConversationDetails] = []

    for conversation in conversations:
        try:
            details = client.get_conversation_details(conversation.id, timeout=timeout)
        except Exception as e:
            message_export_conversations.labels(status="failed").inc()
            logger.error(
                "conversation_fetch_failed",
                conversation_id=conversation.id,
                guest_name=conversation.guest_name,
                error=str(e),
            )
            continue

        logger.debug(
            "conversation_fetched",
            conversation_id=conversation.id,
            message_count=len(details.messages),
        )
        threads.append(details)

    logger.info(
        "conversations_fetched",
        requested=len(conversations),
        fetched=len(threads),
    )
    return threads
