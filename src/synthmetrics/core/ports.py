"""Port interfaces for registry entries.

The registry and the exposition encoder depend only on this protocol, not on
the concrete instrument classes.
"""

from typing import Protocol, runtime_checkable

from synthmetrics.core.models import MetricFamily, MetricKind


@runtime_checkable
class Collectable(Protocol):
    """Anything the registry can hold and the encoder can render.

    Examples: Counter, Gauge, Histogram.
    """

    @property
    def name(self) -> str:
        """Unique metric name."""
        ...

    @property
    def help(self) -> str:
        """Human-readable description."""
        ...

    @property
    def kind(self) -> MetricKind:
        """Exposition type of the metric."""
        ...

    @property
    def label_names(self) -> tuple[str, ...]:
        """Declared label keys."""
        ...

    def collect(self) -> MetricFamily:
        """Return a snapshot of the current state.

        Returns:
            MetricFamily holding one sample per created label-value-tuple.
        """
        ...
