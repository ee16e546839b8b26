"""Prometheus metrics for the pricing service"""
from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry, generate_latest
import time
from functools import wraps
from typing import Callable

registry = CollectorRegistry()

request_count = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status'],
    registry=registry
)

request_duration = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=registry
)

db_operations = Counter(
    'db_operations_total',
    'Total database operations',
    ['operation', 'table', 'status'],
    registry=registry
)

db_query_duration = Histogram(
    'db_query_duration_seconds',
    'Database query duration in seconds',
    ['table', 'operation'],
    registry=registry
)

weather_lookups = Counter(
    'weather_lookups_total',
    'Weather provider lookups by outcome (ok, fallback)',
    ['outcome'],
    registry=registry
)

weather_lookup_duration = Histogram(
    'weather_lookup_duration_seconds',
    'Weather provider lookup duration in seconds',
    registry=registry
)

price_estimates = Histogram(
    'price_estimates',
    'Estimated service prices in currency units',
    ['service_type'],
    buckets=(25, 50, 75, 100, 150, 200, 300, 500, 1000),
    registry=registry
)

nearby_results = Histogram(
    'nearby_query_results',
    'Pending requests returned per nearby query',
    buckets=(0, 1, 2, 5, 10, 25, 50, 100),
    registry=registry
)

status_transitions = Counter(
    'service_status_transitions_total',
    'Service request status changes',
    ['from_status', 'to_status'],
    registry=registry
)

rate_limit_exceeded = Counter(
    'rate_limit_exceeded_total',
    'Total rate limit exceeded events',
    ['user_id'],
    registry=registry
)

webhook_deliveries = Counter(
    'webhook_deliveries_total',
    'Total webhook delivery attempts',
    ['status', 'retry_count'],
    registry=registry
)

webhook_duration = Histogram(
    'webhook_delivery_duration_seconds',
    'Webhook delivery duration in seconds',
    ['status'],
    registry=registry
)

redis_connected = Gauge(
    'redis_connected',
    'Redis connection status (1=connected, 0=disconnected)',
    registry=registry
)

db_connected = Gauge(
    'db_connected',
    'Database connection status (1=connected, 0=disconnected)',
    registry=registry
)


def track_db_operation(operation: str, table: str):
    """Count and time a repository coroutine; any exception is recorded as an error"""
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            start_time = time.time()
            outcome = 'error'
            try:
                result = await func(*args, **kwargs)
                outcome = 'success'
                return result
            finally:
                db_operations.labels(operation=operation, table=table, status=outcome).inc()
                db_query_duration.labels(table=table, operation=operation).observe(time.time() - start_time)
        return wrapper
    return decorator


def get_metrics_text() -> str:
    """Generate Prometheus metrics in text format"""
    return generate_latest(registry).decode('utf-8')
