"""
Home and liveness endpoints.

Health checks are used by container orchestration platforms to determine
if the application should be restarted.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse, PlainTextResponse

router = APIRouter()


@router.get("/")
def home() -> PlainTextResponse:
    return PlainTextResponse("Hello World")


@router.get("/health")
def health_check() -> JSONResponse:
    """
    Liveness check endpoint.

    Returns 200 if the application is running. It does not call Hostex or
    Odoo, so an upstream outage never restarts the container.

    Example:
        >>> GET /health
        {"status": "ok"}
    """
    return JSONResponse(content={"status": "ok"})
