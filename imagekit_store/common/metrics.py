"""
Prometheus metrics for storage adapter operations.

Tracks, per operation (exists/save/read/delete):
- Outcome counts
- Latency
"""

import inspect
import time
from functools import wraps
from typing import Callable

from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
)

# Registry private to this package so hosts can merge or ignore it
REGISTRY = CollectorRegistry()

# ========== Counters ==========

storage_operations_total = Counter(
    "storage_operations_total",
    "Total number of storage adapter operations",
    ["operation", "status"],  # success/failure/missing
    registry=REGISTRY,
)

# ========== Histograms ==========

storage_operation_duration_seconds = Histogram(
    "storage_operation_duration_seconds",
    "Time spent in a storage adapter operation",
    ["operation"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
    registry=REGISTRY,
)


# ========== Metric Decorators ==========

def track_storage_operation(operation: str):
    """
    Decorator to count and time a storage operation.

    A result of exactly ``False`` is recorded as ``missing``, an exception
    as ``failure``, anything else as ``success``.

    Args:
        operation: Operation name (exists/save/read/delete)
    """
    def _record(start_time: float, status: str) -> None:
        duration = time.time() - start_time
        storage_operation_duration_seconds.labels(
            operation=operation).observe(duration)
        storage_operations_total.labels(
            operation=operation, status=status).inc()

    def decorator(func: Callable):
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            start_time = time.time()
            status = "success"
            try:
                result = await func(*args, **kwargs)
                if result is False:
                    status = "missing"
                return result
            except Exception:
                status = "failure"
                raise
            finally:
                _record(start_time, status)

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            start_time = time.time()
            status = "success"
            try:
                result = func(*args, **kwargs)
                if result is False:
                    status = "missing"
                return result
            except Exception:
                status = "failure"
                raise
            finally:
                _record(start_time, status)

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


def get_metrics() -> bytes:
    """Render all collected metrics in Prometheus text format."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
