"""synthmetrics - synthetic application telemetry in Prometheus text format."""

__version__ = "0.1.0"

from synthmetrics.core.encoding.prometheus import CONTENT_TYPE, encode
from synthmetrics.core.errors import (
    DuplicateNameError,
    LabelMismatchError,
    MetricsError,
    StructuralFaultError,
)
from synthmetrics.core.instruments import Counter, Gauge, Histogram
from synthmetrics.core.metrics import counter, gauge, histogram
from synthmetrics.core.registry import Registry

__all__ = [
    "CONTENT_TYPE",
    "Counter",
    "DuplicateNameError",
    "Gauge",
    "Histogram",
    "LabelMismatchError",
    "MetricsError",
    "Registry",
    "StructuralFaultError",
    "__version__",
    "counter",
    "encode",
    "gauge",
    "histogram",
]
