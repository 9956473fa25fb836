"""
Prometheus metrics for registry activity
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

registrations_total = Counter(
    'token_registry_registrations_total',
    'Number of (user, token) pairs added to the index',
    ['policy']
)
removals_total = Counter(
    'token_registry_removals_total',
    'Number of (user, token) pairs pruned from the index',
    ['policy']
)
balance_read_failures_total = Counter(
    'token_registry_balance_read_failures_total',
    'Balance source reads that failed and were degraded to zero or no-op',
    ['policy', 'path']
)
query_seconds = Histogram(
    'token_registry_query_seconds',
    'Time spent answering multi-user registry queries',
    ['operation']
)


def export_metrics() -> tuple:
    """Return (payload, content_type) for the default registry"""
    return generate_latest(), CONTENT_TYPE_LATEST
