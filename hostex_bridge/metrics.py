"""
Prometheus metrics for upstream API calls, calendar generation, message export
and the voucher reconciliation jobs.

Metrics are exposed via the /metrics endpoint for scraping by Prometheus.

Example:
    >>> from hostex_bridge.metrics import calendar_events_generated
    >>> calendar_events_generated.labels(mode="full_day").inc(len(events))
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Upstream API Metrics
# =============================================================================

api_requests = Counter(
    "hostex_api_requests_total",
    "Total Hostex API requests made",
    ["endpoint", "status_code"],
)
"""
Counter for API requests to Hostex.

Labels:
    endpoint: API endpoint path without query string (e.g., "/reservations")
    status_code: HTTP status code, or "error" for transport failures
"""

api_latency = Histogram(
    "hostex_api_latency_seconds",
    "Hostex API request latency in seconds",
    ["endpoint"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, float("inf")),
)
"""
Histogram for API request latency.

Labels:
    endpoint: API endpoint path

Buckets: 0.1s, 0.25s, 0.5s, 1s, 2.5s, 5s, 10s, 30s, +Inf
"""

odoo_calls = Counter(
    "odoo_calls_total",
    "Total Odoo XML-RPC execute_kw calls",
    ["model", "method", "status"],
)
"""
Counter for Odoo calls.

Labels:
    model: Odoo model name (e.g., "loyalty.card")
    method: ORM method (e.g., "search_read")
    status: success or failure
"""

# =============================================================================
# Calendar Metrics
# =============================================================================

calendar_events_generated = Counter(
    "calendar_events_generated_total",
    "Total calendar events generated from reservations",
    ["mode"],
)
"""
Counter for generated calendar events.

Labels:
    mode: full_day or checkinout
"""

reservation_processing_failures = Counter(
    "reservation_processing_failures_total",
    "Reservations skipped because their event could not be built",
    ["mode"],
)

# =============================================================================
# Message Export Metrics
# =============================================================================

message_export_conversations = Counter(
    "message_export_conversations_total",
    "Conversations handled by the message export",
    ["status"],
)
"""
Counter for exported conversations.

Labels:
    status: exported, failed (detail fetch error) or empty (nothing left after filtering)
"""

# =============================================================================
# Voucher Job Metrics
# =============================================================================

voucher_job_runs = Counter(
    "voucher_job_runs_total",
    "Voucher reconciliation job runs",
    ["job", "status"],
)
"""
Counter for voucher job runs.

Labels:
    job: cleanup or loyalty_sync
    status: success or failure
"""

vouchers_deleted = Counter(
    "vouchers_deleted_total",
    "Vouchers deleted by the greenlist cleanup",
)

vouchers_created = Counter(
    "vouchers_created_total",
    "Vouchers created from loyalty cards",
)

voucher_operation_errors = Counter(
    "voucher_operation_errors_total",
    "Per-item failures inside voucher jobs",
    ["job"],
)
