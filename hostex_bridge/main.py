# hostex_bridge/main.py

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hostex_bridge import config
from hostex_bridge.logging_config import setup_logging
from hostex_bridge.middleware import RequestIDMiddleware
from hostex_bridge.routes.bookings import router as bookings_router
from hostex_bridge.routes.health import router as health_router
from hostex_bridge.routes.messages import router as messages_router
from hostex_bridge.routes.metrics import router as metrics_router

# Initialize structured logging
setup_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Hostex Bridge API",
    description="Calendar feeds, message export and voucher jobs on top of Hostex and Odoo",
    version="1.0.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS if "*" not in config.ALLOWED_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)

# Register routers
app.include_router(health_router, tags=["Health"])
app.include_router(metrics_router, tags=["Metrics"])
app.include_router(bookings_router, prefix="/bookings", tags=["Bookings"])
app.include_router(messages_router, prefix="/messages", tags=["Messages"])


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return JSONResponse(
            status_code=404,
            content={
                "error": "Not Found",
                "message": "The requested resource was not found on this server.",
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Runs outside RequestIDMiddleware; the id is read back from the shared request state
    request_id = getattr(request.state, "request_id", None)
    logger.error(
        "request_failed",
        path=request.url.path,
        request_id=request_id,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": str(exc) or type(exc).__name__,
        },
        headers={"X-Request-ID": request_id} if request_id else None,
    )


@app.on_event("startup")
def startup_event() -> None:
    """Run the voucher jobs and register the Hostex webhook."""
    from hostex_bridge.dependencies import build_hostex_client, build_odoo_client
    from hostex_bridge.odoo_api.errors import OdooAuthError
    from hostex_bridge.properties import get_property_registry
    from hostex_bridge.services.startup import run_startup_jobs
    from hostex_bridge.services.webhook_registration import register_webhooks

    logger.info("FastAPI application starting up...")

    if not config.RUN_STARTUP_JOBS and not config.WEBHOOK_URL:
        logger.info("FastAPI application initialized")
        return

    try:
        hostex = build_hostex_client()
    except Exception as e:
        logger.exception("startup_hostex_unavailable", error=str(e))
        return

    if config.RUN_STARTUP_JOBS:
        try:
            odoo = build_odoo_client()
        except OdooAuthError as e:
            logger.warning("startup_odoo_unavailable", error=str(e))
            odoo = None
        try:
            run_startup_jobs(hostex, odoo, get_property_registry())
        except Exception as e:
            logger.exception("startup_jobs_failed", error=str(e))

    if config.WEBHOOK_URL:
        try:
            register_webhooks(hostex, config.WEBHOOK_URL)
        except Exception as e:
            logger.exception("webhook_registration_failed", error=str(e))

    hostex.close()

    logger.info("FastAPI application initialized")
