"""BDD step definitions for exposition features."""

from dataclasses import dataclass, field

import pytest
from pytest_bdd import given, parsers, then, when

from synthmetrics.core.encoding.prometheus import encode
from synthmetrics.core.errors import DuplicateNameError
from synthmetrics.core.instruments import Counter, Gauge, Histogram
from synthmetrics.core.registry import Registry


@dataclass
class ExpositionContext:
    """State shared between the steps of one scenario."""

    registry: Registry = field(default_factory=Registry)
    error: Exception | None = None


@pytest.fixture
def ctx() -> ExpositionContext:
    """Fresh scenario context for each test."""
    return ExpositionContext()


def _floats(csv: str) -> list[float]:
    return [float(part) for part in csv.split(",") if part.strip()]


# === Given ===
@given("an empty registry")
def step_empty_registry(ctx: ExpositionContext) -> None:
    ctx.registry = Registry()


@given(parsers.parse('a counter "{name}" with label "{label}"'))
def step_counter(ctx: ExpositionContext, name: str, label: str) -> None:
    ctx.registry.register(Counter(name, f"{name} help", [label]))


@given(parsers.parse('a histogram "{name}" with buckets "{buckets}"'))
def step_histogram(ctx: ExpositionContext, name: str, buckets: str) -> None:
    ctx.registry.register(Histogram(name, f"{name} help", buckets=_floats(buckets)))


@given(parsers.parse('a histogram "{name}" without buckets'))
def step_histogram_without_buckets(ctx: ExpositionContext, name: str) -> None:
    ctx.registry.register(Histogram(name, f"{name} help"))


# === When ===
@when(
    parsers.parse(
        'the counter "{name}" is incremented {n:d} times with method "{method}"'
    )
)
def step_increment(ctx: ExpositionContext, name: str, n: int, method: str) -> None:
    counter = ctx.registry.lookup(name)
    for _ in range(n):
        counter.increment({"method": method})  # type: ignore[union-attr]


@when(parsers.parse('the histogram "{name}" observes "{values}"'))
def step_observe(ctx: ExpositionContext, name: str, values: str) -> None:
    histogram = ctx.registry.lookup(name)
    for value in _floats(values):
        histogram.observe(None, value)  # type: ignore[union-attr]


@when(parsers.parse('a gauge named "{name}" is registered'))
def step_register_gauge(ctx: ExpositionContext, name: str) -> None:
    try:
        ctx.registry.register(Gauge(name, "duplicate"))
    except DuplicateNameError as e:
        ctx.error = e


# === Then ===
@then(parsers.parse("the exposition contains the line '{line}'"))
def step_line_present(ctx: ExpositionContext, line: str) -> None:
    lines = encode(ctx.registry).splitlines()
    assert line in lines, f"{line!r} not in {lines!r}"


@then("registration fails with a duplicate name error")
def step_duplicate_error(ctx: ExpositionContext) -> None:
    assert isinstance(ctx.error, DuplicateNameError)


@then("encoding the registry twice gives identical output")
def step_deterministic(ctx: ExpositionContext) -> None:
    first = encode(ctx.registry)
    assert first
    assert encode(ctx.registry) == first
