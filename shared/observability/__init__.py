from .setup import add_trace_context, configure_logging, configure_tracing, setup_observability
from .metrics import (
    orders_create_total,
    orders_create_duration_seconds,
    orders_upstream_requests_total
)
