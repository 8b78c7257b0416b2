"""Snapshot models handed from instruments to the exposition encoder."""

from dataclasses import dataclass, field
from typing import Literal

MetricKind = Literal["counter", "gauge", "histogram"]


@dataclass(frozen=True)
class Sample:
    """Current value of one counter or gauge series.

    Attributes:
        label_values: Label values, positionally matching the family's label names.
        value: The series value.
    """

    label_values: tuple[str, ...]
    value: float


@dataclass(frozen=True)
class HistogramSample:
    """Current state of one histogram series.

    Attributes:
        label_values: Label values, positionally matching the family's label names.
        bucket_counts: Cumulative counts, one per finite bucket followed by +Inf.
        sum: Sum of all observed values.
        count: Number of observations.
    """

    label_values: tuple[str, ...]
    bucket_counts: tuple[float, ...]
    sum: float
    count: float


@dataclass(frozen=True)
class MetricFamily:
    """Point-in-time snapshot of an instrument and all of its series.

    Attributes:
        name: Metric name (e.g., http_requests_total).
        help: Human-readable description.
        kind: One of "counter", "gauge", "histogram".
        label_names: Declared label keys.
        samples: One entry per label-value-tuple, in creation order.
        buckets: Finite bucket upper bounds (histograms only).
    """

    name: str
    help: str
    kind: MetricKind
    label_names: tuple[str, ...]
    samples: tuple[Sample | HistogramSample, ...] = field(default_factory=tuple)
    buckets: tuple[float, ...] = field(default_factory=tuple)
