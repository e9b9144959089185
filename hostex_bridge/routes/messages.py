"""Message export endpoint."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from hostex_bridge.dependencies import get_export_cutoff, get_hostex_client
from hostex_bridge.hostex_api.client import HostexClient
from hostex_bridge.services.message_export import export_messages

router = APIRouter()

EXPORT_FILENAME = "hostex-messages-llm-training.txt"


@router.get("/export/llm-training.txt")
def export_llm_training(
    hostex: HostexClient = Depends(get_hostex_client),
    cutoff: Optional[datetime] = Depends(get_export_cutoff),
) -> PlainTextResponse:
    """
    Every guest conversation as one flat transcript.

    Sets ``X-Export-Truncated: true`` when the conversation listing failed
    part way and the transcript is incomplete.
    """
    export = export_messages(hostex, cutoff)

    headers = {"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'}
    if export.truncated:
        headers["X-Export-Truncated"] = "true"

    return PlainTextResponse(
        content=export.content,
        media_type="text/plain; charset=utf-8",
        headers=headers,
    )
