"""
Prometheus metrics endpoint.

Example:
    GET /metrics

    Response:
        # HELP hostex_api_requests_total Total Hostex API requests made
        # TYPE hostex_api_requests_total counter
        hostex_api_requests_total{endpoint="/v3/reservations",status_code="200"} 42.0
        ...
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics", response_class=Response)
async def metrics() -> Any:
    """
    Return metrics in Prometheus text exposition format.

    Returns:
        Response: Metrics with Content-Type set for Prometheus scrapers.
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
