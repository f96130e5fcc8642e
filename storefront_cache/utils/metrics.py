"""Prometheus metrics for monitoring."""

from prometheus_client import Counter

# Cache metrics
cache_requests_total = Counter(
    "storefront_cache_requests_total",
    "Total number of read-through lookups",
    ["category", "result"],
)

cache_errors_total = Counter(
    "storefront_cache_errors_total",
    "Total number of cache medium failures",
    ["operation"],
)

cache_invalidations_total = Counter(
    "storefront_cache_invalidations_total",
    "Total number of invalidation requests",
    ["scope", "status"],
)

# Backing store metrics
backing_store_errors_total = Counter(
    "storefront_backing_store_errors_total",
    "Total number of failed backing store fetches",
    ["category"],
)
