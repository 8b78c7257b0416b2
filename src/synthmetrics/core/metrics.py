"""Helper functions for creating and registering instruments."""

from collections.abc import Sequence

from synthmetrics.core.instruments import Counter, Gauge, Histogram
from synthmetrics.core.registry import Registry

DEFAULT_HISTOGRAM_BUCKETS = [0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10]


def counter(
    registry: Registry,
    name: str,
    help: str,
    label_names: Sequence[str] = (),
) -> Counter:
    """Create a counter and register it.

    Args:
        registry: Registry that will own the counter
        name: Metric name (e.g., "http_requests_total")
        help: Human-readable description
        label_names: Optional dimension label keys

    Returns:
        The registered Counter
    """
    return registry.register(Counter(name, help, label_names))


def gauge(
    registry: Registry,
    name: str,
    help: str,
    label_names: Sequence[str] = (),
) -> Gauge:
    """Create a gauge and register it.

    Args:
        registry: Registry that will own the gauge
        name: Metric name (e.g., "app_cpu_usage_percent")
        help: Human-readable description
        label_names: Optional dimension label keys

    Returns:
        The registered Gauge
    """
    return registry.register(Gauge(name, help, label_names))


def histogram(
    registry: Registry,
    name: str,
    help: str,
    label_names: Sequence[str] = (),
    buckets: Sequence[float] | None = None,
) -> Histogram:
    """Create a histogram and register it.

    Args:
        registry: Registry that will own the histogram
        name: Metric name (e.g., "http_request_duration_ms")
        help: Human-readable description
        label_names: Optional dimension label keys
        buckets: Bucket boundaries (default: Prometheus standard buckets)

    Returns:
        The registered Histogram
    """
    bucket_boundaries = buckets if buckets is not None else DEFAULT_HISTOGRAM_BUCKETS
    return registry.register(Histogram(name, help, label_names, bucket_boundaries))
