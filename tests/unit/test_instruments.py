"""Tests for Counter, Gauge and Histogram instruments."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from hypothesis import given
from hypothesis import strategies as st

from synthmetrics.core.errors import LabelMismatchError
from synthmetrics.core.instruments import Counter, Gauge, Histogram
from synthmetrics.core.models import HistogramSample, Sample

pytestmark = [pytest.mark.unit, pytest.mark.core, pytest.mark.tier(0)]

amounts = st.floats(min_value=0, max_value=1e6, allow_nan=False)
values = st.floats(min_value=-1e6, max_value=1e6, allow_nan=False)


class TestInstrumentIdentity:
    """Tests for names, help text and label names."""

    def test_identity_is_exposed_read_only(self) -> None:
        """Name, help, kind and label names are available as properties."""
        c = Counter("requests_total", "Requests served", ["method", "route"])
        assert c.name == "requests_total"
        assert c.help == "Requests served"
        assert c.kind == "counter"
        assert c.label_names == ("method", "route")
        with pytest.raises(AttributeError):
            c.name = "other"  # type: ignore[misc]

    @pytest.mark.parametrize("name", ["", "1abc", "has-dash", "sp ace"])
    def test_invalid_metric_name_raises(self, name: str) -> None:
        """Metric names must match the Prometheus name grammar."""
        with pytest.raises(ValueError, match="Invalid metric name"):
            Gauge(name, "help")

    @pytest.mark.parametrize("label", ["__reserved", "1x", "a-b"])
    def test_invalid_label_name_raises(self, label: str) -> None:
        """Label names must match the grammar and not start with '__'."""
        with pytest.raises(ValueError, match="Invalid label name"):
            Counter("c_total", "help", [label])

    def test_duplicate_label_names_raise(self) -> None:
        """The same label key cannot be declared twice."""
        with pytest.raises(ValueError, match="Duplicate label names"):
            Counter("c_total", "help", ["a", "a"])

    def test_kinds(self) -> None:
        """Each variant reports its exposition type."""
        assert Gauge("g", "help").kind == "gauge"
        assert Histogram("h", "help", buckets=[1]).kind == "histogram"


class TestCounter:
    """Tests for Counter."""

    @pytest.mark.tra("Core.Counter.Increment")
    def test_increment_defaults_to_one(self) -> None:
        """increment() without amount adds 1."""
        c = Counter("requests_total", "help", ["method"])
        c.increment({"method": "GET"})
        c.increment({"method": "GET"})
        assert c.value({"method": "GET"}) == 2

    def test_increment_accepts_custom_amount(self) -> None:
        """increment() adds the given amount."""
        c = Counter("bytes_total", "help")
        c.increment(amount=2.5)
        assert c.value() == 2.5

    def test_series_are_independent(self) -> None:
        """Different label values accumulate separately."""
        c = Counter("requests_total", "help", ["method"])
        c.increment({"method": "GET"}, 3)
        c.increment({"method": "POST"})
        assert c.value({"method": "GET"}) == 3
        assert c.value({"method": "POST"}) == 1

    def test_unseen_series_is_none(self) -> None:
        """value() returns None for a label combination never updated."""
        c = Counter("requests_total", "help", ["method"])
        assert c.value({"method": "GET"}) is None

    @pytest.mark.tra("Core.Counter.Negative")
    def test_negative_amount_raises(self) -> None:
        """Counters can only go up."""
        c = Counter("requests_total", "help")
        with pytest.raises(ValueError, match="can only be increased"):
            c.increment(amount=-1)
        assert c.value() is None

    def test_nan_amount_raises(self) -> None:
        """NaN increments are rejected."""
        c = Counter("requests_total", "help")
        with pytest.raises(ValueError):
            c.increment(amount=float("nan"))

    @pytest.mark.tra("Core.Labels.Mismatch")
    @pytest.mark.parametrize(
        "labels",
        [None, {}, {"verb": "GET"}, {"method": "GET", "extra": "x"}],
    )
    def test_label_mismatch_raises(self, labels) -> None:
        """Label keys must equal the declared label names."""
        c = Counter("requests_total", "help", ["method"])
        with pytest.raises(LabelMismatchError) as exc_info:
            c.increment(labels)
        assert exc_info.value.name == "requests_total"
        assert exc_info.value.expected == ("method",)

    def test_label_mismatch_is_value_error(self) -> None:
        """LabelMismatchError can be caught as ValueError."""
        c = Counter("requests_total", "help")
        with pytest.raises(ValueError):
            c.increment({"method": "GET"})

    def test_label_values_are_stringified(self) -> None:
        """Non-string label values are converted with str()."""
        c = Counter("requests_total", "help", ["status_code"])
        c.increment({"status_code": 200})
        assert c.value({"status_code": "200"}) == 1

    def test_label_order_in_map_does_not_matter(self) -> None:
        """Keys are matched by name, values placed in declaration order."""
        c = Counter("requests_total", "help", ["method", "route"])
        c.increment({"route": "/", "method": "GET"})
        family = c.collect()
        assert family.samples == (Sample(("GET", "/"), 1.0),)

    def test_bound_child_positional(self) -> None:
        """labels(*values) binds positionally to the declared names."""
        c = Counter("requests_total", "help", ["method", "route"])
        child = c.labels("GET", "/")
        child.increment()
        child.increment(2)
        assert c.value({"method": "GET", "route": "/"}) == 3

    def test_bound_child_keyword(self) -> None:
        """labels(**kw) binds by key."""
        c = Counter("requests_total", "help", ["method"])
        c.labels(method="POST").increment()
        assert c.value({"method": "POST"}) == 1

    def test_bound_child_wrong_arity_raises(self) -> None:
        """Positional label values must match the declared count."""
        c = Counter("requests_total", "help", ["method", "route"])
        with pytest.raises(LabelMismatchError):
            c.labels("GET")

    def test_bound_child_mixed_arguments_raise(self) -> None:
        """Positional and keyword label values cannot be combined."""
        c = Counter("requests_total", "help", ["method", "route"])
        with pytest.raises(ValueError, match="not both"):
            c.labels("GET", route="/")

    def test_bound_child_rejects_negative(self) -> None:
        """Bound children enforce monotonicity too."""
        c = Counter("requests_total", "help", ["method"])
        with pytest.raises(ValueError):
            c.labels("GET").increment(-5)

    @given(st.lists(amounts, max_size=50))
    def test_value_is_sum_of_increments_and_never_decreases(
        self, increments: list[float]
    ) -> None:
        """Final value equals the sum; every intermediate value is a prefix sum."""
        c = Counter("requests_total", "help")
        previous = 0.0
        expected = 0.0
        for amount in increments:
            c.increment(amount=amount)
            expected += amount
            current = c.value()
            assert current is not None
            assert current >= previous
            previous = current
        assert (c.value() or 0.0) == pytest.approx(expected)

    @pytest.mark.tra("Core.Counter.Concurrent")
    def test_concurrent_increments_are_not_lost(self) -> None:
        """N threads incrementing M times each yield exactly N*M."""
        c = Counter("requests_total", "help", ["method"])
        threads, per_thread = 8, 2000
        barrier = threading.Barrier(threads)

        def worker() -> None:
            barrier.wait()
            child = c.labels("GET")
            for _ in range(per_thread):
                child.increment()

        with ThreadPoolExecutor(max_workers=threads) as pool:
            for future in [pool.submit(worker) for _ in range(threads)]:
                future.result()

        assert c.value({"method": "GET"}) == threads * per_thread


class TestGauge:
    """Tests for Gauge."""

    @pytest.mark.tra("Core.Gauge.Set")
    @given(st.lists(values, min_size=1, max_size=20))
    def test_set_is_last_write_wins(self, writes: list[float]) -> None:
        """The visible value after set() is the value just written."""
        g = Gauge("app_cpu_usage_percent", "help")
        for v in writes:
            g.set(None, v)
            assert g.value() == v

    def test_increment_and_decrement_are_relative(self) -> None:
        """increment/decrement adjust the last value."""
        g = Gauge("in_flight", "help", ["route"])
        labels = {"route": "/"}
        g.set(labels, 10)
        g.increment(labels, 5)
        g.decrement(labels, 2)
        assert g.value(labels) == 13

    def test_increment_starts_from_zero(self) -> None:
        """A never-set gauge starts at 0."""
        g = Gauge("in_flight", "help")
        g.decrement()
        assert g.value() == -1

    def test_set_requires_matching_labels(self) -> None:
        """set() validates label keys."""
        g = Gauge("in_flight", "help", ["route"])
        with pytest.raises(LabelMismatchError):
            g.set({"path": "/"}, 1)

    def test_bound_gauge(self) -> None:
        """labels() returns a child supporting set/increment/decrement."""
        g = Gauge("in_flight", "help", ["route"])
        child = g.labels("/")
        child.set(4)
        child.increment()
        child.decrement(3)
        assert g.value({"route": "/"}) == 2

    def test_unset_gauge_has_no_samples(self) -> None:
        """Series are created lazily, even for unlabelled gauges."""
        g = Gauge("app_health_status", "help")
        assert g.collect().samples == ()


class TestHistogram:
    """Tests for Histogram."""

    def test_buckets_must_be_ascending(self) -> None:
        """Bucket bounds must strictly increase."""
        with pytest.raises(ValueError, match="strictly ascending"):
            Histogram("latency_ms", "help", buckets=[500, 100])
        with pytest.raises(ValueError, match="strictly ascending"):
            Histogram("latency_ms", "help", buckets=[100, 100])

    def test_buckets_must_be_finite(self) -> None:
        """+Inf is implied and may not be declared."""
        with pytest.raises(ValueError, match="finite"):
            Histogram("latency_ms", "help", buckets=[1, float("inf")])

    def test_le_label_is_reserved(self) -> None:
        """'le' is used for bucket bounds on exposition."""
        with pytest.raises(ValueError, match="reserved"):
            Histogram("latency_ms", "help", ["le"], buckets=[1])

    def test_empty_buckets_allowed_at_construction(self) -> None:
        """Observations still land in +Inf when no buckets are declared."""
        h = Histogram("latency_ms", "help")
        h.observe(None, 3)
        assert h.snapshot() == HistogramSample((), (1.0,), 3.0, 1.0)

    @pytest.mark.tra("Core.Histogram.Observe")
    def test_observe_example(self) -> None:
        """50, 150, 600 against [100, 500] gives 1/2/3 and sum 800."""
        h = Histogram("latency_ms", "help", buckets=[100, 500])
        for v in (50, 150, 600):
            h.observe(None, v)
        snapshot = h.snapshot()
        assert snapshot is not None
        assert snapshot.bucket_counts == (1, 2, 3)
        assert snapshot.sum == 800
        assert snapshot.count == 3

    def test_boundary_value_is_included(self) -> None:
        """A value equal to a bound counts in that bucket."""
        h = Histogram("latency_ms", "help", buckets=[100, 500])
        h.observe(None, 100)
        assert h.snapshot().bucket_counts == (1, 1, 1)  # type: ignore[union-attr]

    def test_bound_histogram(self) -> None:
        """labels() returns a child supporting observe()."""
        h = Histogram("latency_ms", "help", ["method"], buckets=[10])
        h.labels("GET").observe(5)
        snapshot = h.snapshot({"method": "GET"})
        assert snapshot is not None
        assert snapshot.count == 1

    def test_snapshot_of_unseen_series_is_none(self) -> None:
        """snapshot() returns None for a label combination never observed."""
        h = Histogram("latency_ms", "help", ["method"], buckets=[10])
        assert h.snapshot({"method": "GET"}) is None

    @given(
        buckets=st.lists(
            st.integers(min_value=-1000, max_value=1000), min_size=1, max_size=15, unique=True
        ).map(sorted),
        history=st.lists(st.integers(min_value=-2000, max_value=2000), max_size=20),
        value=st.integers(min_value=-2000, max_value=2000),
    )
    def test_observe_increments_exactly_the_covering_buckets(
        self, buckets: list[int], history: list[int], value: int
    ) -> None:
        """Buckets >= value gain exactly 1, count gains 1, sum gains value."""
        h = Histogram("latency_ms", "help", buckets=buckets)
        for v in history:
            h.observe(None, v)
        before = h.snapshot() or HistogramSample((), (0.0,) * (len(buckets) + 1), 0.0, 0.0)

        h.observe(None, value)
        after = h.snapshot()

        assert after is not None
        for bound, old, new in zip(buckets, before.bucket_counts, after.bucket_counts):
            assert new - old == (1 if value <= bound else 0)
        assert after.bucket_counts[-1] - before.bucket_counts[-1] == 1
        assert after.count - before.count == 1
        assert after.sum - before.sum == value
        assert list(after.bucket_counts) == sorted(after.bucket_counts)

    def test_collect_carries_buckets(self) -> None:
        """The family snapshot includes the declared bounds."""
        h = Histogram("latency_ms", "help", buckets=[100, 500])
        family = h.collect()
        assert family.kind == "histogram"
        assert family.buckets == (100.0, 500.0)
        assert family.samples == ()

    def test_concurrent_observations_are_not_lost(self) -> None:
        """Count and sum stay exact under concurrent observe()."""
        h = Histogram("latency_ms", "help", buckets=[1])
        threads, per_thread = 8, 1000

        def worker() -> None:
            for _ in range(per_thread):
                h.observe(None, 2)

        with ThreadPoolExecutor(max_workers=threads) as pool:
            for future in [pool.submit(worker) for _ in range(threads)]:
                future.result()

        snapshot = h.snapshot()
        assert snapshot is not None
        assert snapshot.count == threads * per_thread
        assert snapshot.sum == 2 * threads * per_thread
        assert snapshot.bucket_counts == (0, threads * per_thread)
