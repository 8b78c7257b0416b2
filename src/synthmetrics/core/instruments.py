"""Counter, Gauge and Histogram instruments.

Every instrument owns a lock that guards all of its series, so updates from
worker threads and interleaved asyncio tasks are never lost. Series are keyed
by label-value-tuple and created lazily on first update.
"""

import math
import re
import threading
from collections.abc import Iterable, Mapping
from typing import Any

from synthmetrics.core.errors import LabelMismatchError
from synthmetrics.core.models import HistogramSample, MetricFamily, MetricKind, Sample

_METRIC_NAME_RE = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*$")
_LABEL_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

Labels = Mapping[str, Any] | None


def _validate_identity(name: str, label_names: tuple[str, ...]) -> None:
    if not _METRIC_NAME_RE.match(name):
        raise ValueError(f"Invalid metric name: {name!r}")
    for label in label_names:
        if not _LABEL_NAME_RE.match(label) or label.startswith("__"):
            raise ValueError(f"Invalid label name for '{name}': {label!r}")
    if len(set(label_names)) != len(label_names):
        raise ValueError(f"Duplicate label names for '{name}': {list(label_names)}")


class _Instrument:
    """Shared identity, label handling and locking for all instruments."""

    _kind: MetricKind

    def __init__(
        self,
        name: str,
        help: str,
        label_names: Iterable[str] = (),
    ) -> None:
        label_names = tuple(label_names)
        _validate_identity(name, label_names)
        self._name = name
        self._help = help
        self._label_names = label_names
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    @property
    def help(self) -> str:
        return self._help

    @property
    def kind(self) -> MetricKind:
        return self._kind

    @property
    def label_names(self) -> tuple[str, ...]:
        return self._label_names

    def _key(self, labels: Labels) -> tuple[str, ...]:
        """Turn a label map into the label-value-tuple for this instrument.

        Raises:
            LabelMismatchError: If the keys differ from the declared label names.
        """
        labels = labels or {}
        if set(labels) != set(self._label_names):
            raise LabelMismatchError(self._name, self._label_names, tuple(labels))
        return tuple(str(labels[label]) for label in self._label_names)

    def _key_from_args(
        self, values: tuple[Any, ...], labelkw: dict[str, Any]
    ) -> tuple[str, ...]:
        if values and labelkw:
            raise ValueError("Pass label values positionally or by keyword, not both")
        if labelkw:
            return self._key(labelkw)
        if len(values) != len(self._label_names):
            raise LabelMismatchError(
                self._name, self._label_names, tuple(f"#{i}" for i in range(len(values)))
            )
        return tuple(str(v) for v in values)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._name!r})"


class Counter(_Instrument):
    """Monotonically non-decreasing accumulator per label-value-tuple.

    Example:
        ```python
        requests = Counter("requests_total", "Requests served", ["method"])
        requests.increment({"method": "GET"})
        requests.labels("POST").increment(2)
        ```
    """

    _kind: MetricKind = "counter"

    def __init__(
        self, name: str, help: str, label_names: Iterable[str] = ()
    ) -> None:
        super().__init__(name, help, label_names)
        self._values: dict[tuple[str, ...], float] = {}

    def increment(self, labels: Labels = None, amount: float = 1.0) -> None:
        """Add a non-negative amount to the series identified by labels.

        Args:
            labels: Label map whose keys match the declared label names.
            amount: Increment, must be >= 0 (default: 1.0).

        Raises:
            ValueError: If amount is negative or NaN.
            LabelMismatchError: If the label keys do not match.
        """
        self._increment_key(self._key(labels), amount)

    def _increment_key(self, key: tuple[str, ...], amount: float) -> None:
        if not amount >= 0:
            raise ValueError(
                f"Counter '{self._name}' can only be increased, got {amount!r}"
            )
        with self._lock:
            self._values[key] = self._values.get(key, 0.0) + amount

    def value(self, labels: Labels = None) -> float | None:
        """Return the current value of one series, or None if never updated."""
        key = self._key(labels)
        with self._lock:
            return self._values.get(key)

    def labels(self, *values: Any, **labelkw: Any) -> "BoundCounter":
        """Bind one label-value-tuple for repeated updates."""
        return BoundCounter(self, self._key_from_args(values, labelkw))

    def collect(self) -> MetricFamily:
        with self._lock:
            samples = tuple(Sample(key, value) for key, value in self._values.items())
        return MetricFamily(
            name=self._name,
            help=self._help,
            kind=self._kind,
            label_names=self._label_names,
            samples=samples,
        )


class Gauge(_Instrument):
    """Value per label-value-tuple that can be set, increased and decreased."""

    _kind: MetricKind = "gauge"

    def __init__(
        self, name: str, help: str, label_names: Iterable[str] = ()
    ) -> None:
        super().__init__(name, help, label_names)
        self._values: dict[tuple[str, ...], float] = {}

    def set(self, labels: Labels, value: float) -> None:
        """Overwrite the series value unconditionally."""
        self._set_key(self._key(labels), value)

    def increment(self, labels: Labels = None, amount: float = 1.0) -> None:
        """Adjust the series by amount relative to its last value (0 if unset)."""
        self._add_key(self._key(labels), amount)

    def decrement(self, labels: Labels = None, amount: float = 1.0) -> None:
        """Adjust the series by -amount relative to its last value (0 if unset)."""
        self._add_key(self._key(labels), -amount)

    def _set_key(self, key: tuple[str, ...], value: float) -> None:
        with self._lock:
            self._values[key] = float(value)

    def _add_key(self, key: tuple[str, ...], amount: float) -> None:
        with self._lock:
            self._values[key] = self._values.get(key, 0.0) + amount

    def value(self, labels: Labels = None) -> float | None:
        """Return the current value of one series, or None if never set."""
        key = self._key(labels)
        with self._lock:
            return self._values.get(key)

    def labels(self, *values: Any, **labelkw: Any) -> "BoundGauge":
        """Bind one label-value-tuple for repeated updates."""
        return BoundGauge(self, self._key_from_args(values, labelkw))

    def collect(self) -> MetricFamily:
        with self._lock:
            samples = tuple(Sample(key, value) for key, value in self._values.items())
        return MetricFamily(
            name=self._name,
            help=self._help,
            kind=self._kind,
            label_names=self._label_names,
            samples=samples,
        )


class _HistogramSeries:
    __slots__ = ("bucket_counts", "sum", "count")

    def __init__(self, size: int) -> None:
        self.bucket_counts = [0.0] * size
        self.sum = 0.0
        self.count = 0.0


class Histogram(_Instrument):
    """Cumulative bucketed distribution per label-value-tuple.

    Buckets are finite upper bounds in strictly ascending order; the +Inf
    bucket is always implied. A histogram declared with no buckets can still
    record observations but is reported as a structural fault on exposition.
    """

    _kind: MetricKind = "histogram"

    def __init__(
        self,
        name: str,
        help: str,
        label_names: Iterable[str] = (),
        buckets: Iterable[float] = (),
    ) -> None:
        super().__init__(name, help, label_names)
        if "le" in self._label_names:
            raise ValueError(f"Histogram '{name}' cannot use reserved label 'le'")
        bounds = tuple(float(b) for b in buckets)
        for bound in bounds:
            if math.isnan(bound) or math.isinf(bound):
                raise ValueError(
                    f"Histogram '{name}' bucket bounds must be finite, got {bound!r}"
                )
        if any(lower >= upper for lower, upper in zip(bounds, bounds[1:])):
            raise ValueError(
                f"Histogram '{name}' buckets must be strictly ascending: {list(bounds)}"
            )
        self._buckets = bounds
        self._series: dict[tuple[str, ...], _HistogramSeries] = {}

    @property
    def buckets(self) -> tuple[float, ...]:
        return self._buckets

    def observe(self, labels: Labels, value: float) -> None:
        """Record one observation.

        Every bucket whose upper bound is >= value is incremented, along with
        the +Inf bucket and the count; value is added to the sum.
        """
        self._observe_key(self._key(labels), value)

    def _observe_key(self, key: tuple[str, ...], value: float) -> None:
        with self._lock:
            series = self._series.get(key)
            if series is None:
                series = self._series[key] = _HistogramSeries(len(self._buckets) + 1)
            for i, bound in enumerate(self._buckets):
                if value <= bound:
                    series.bucket_counts[i] += 1
            series.bucket_counts[-1] += 1
            series.sum += value
            series.count += 1

    def snapshot(self, labels: Labels = None) -> HistogramSample | None:
        """Return the state of one series, or None if never observed."""
        key = self._key(labels)
        with self._lock:
            series = self._series.get(key)
            if series is None:
                return None
            return HistogramSample(
                key, tuple(series.bucket_counts), series.sum, series.count
            )

    def labels(self, *values: Any, **labelkw: Any) -> "BoundHistogram":
        """Bind one label-value-tuple for repeated updates."""
        return BoundHistogram(self, self._key_from_args(values, labelkw))

    def collect(self) -> MetricFamily:
        with self._lock:
            samples = tuple(
                HistogramSample(key, tuple(s.bucket_counts), s.sum, s.count)
                for key, s in self._series.items()
            )
        return MetricFamily(
            name=self._name,
            help=self._help,
            kind=self._kind,
            label_names=self._label_names,
            samples=samples,
            buckets=self._buckets,
        )


class BoundCounter:
    """A Counter bound to one label-value-tuple."""

    def __init__(self, counter: Counter, key: tuple[str, ...]) -> None:
        self._counter = counter
        self._key = key

    def increment(self, amount: float = 1.0) -> None:
        self._counter._increment_key(self._key, amount)


class BoundGauge:
    """A Gauge bound to one label-value-tuple."""

    def __init__(self, gauge: Gauge, key: tuple[str, ...]) -> None:
        self._gauge = gauge
        self._key = key

    def set(self, value: float) -> None:
        self._gauge._set_key(self._key, value)

    def increment(self, amount: float = 1.0) -> None:
        self._gauge._add_key(self._key, amount)

    def decrement(self, amount: float = 1.0) -> None:
        self._gauge._add_key(self._key, -amount)


class BoundHistogram:
    """A Histogram bound to one label-value-tuple."""

    def __init__(self, histogram: Histogram, key: tuple[str, ...]) -> None:
        self._histogram = histogram
        self._key = key

    def observe(self, value: float) -> None:
        self._histogram._observe_key(self._key, value)
