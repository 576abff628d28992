from prometheus_client import Counter, Histogram

# Business Metrics
orders_create_total = Counter(
    "orders_create_total",
    "Total order creation attempts",
    ["outcome"] # Labels: 'created', 'unauthorized', 'user_not_found', 'insufficient_stock', ...
)

orders_create_duration_seconds = Histogram(
    "orders_create_duration_seconds",
    "Order creation duration in seconds"
)

orders_upstream_requests_total = Counter(
    "orders_upstream_requests_total",
    "Requests issued to upstream services",
    ["service", "outcome"] # Labels: service='user'|'product', outcome='found'|'absent'|'error'
)
