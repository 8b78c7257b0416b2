"""Prometheus text exposition format (0.0.4) encoder."""

import math
from collections.abc import Iterable, Sequence

from synthmetrics.core.errors import StructuralFaultError
from synthmetrics.core.logs import get_logger
from synthmetrics.core.models import HistogramSample, MetricFamily, Sample
from synthmetrics.core.ports import Collectable
from synthmetrics.core.registry import Registry

CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

_KINDS = frozenset({"counter", "gauge", "histogram"})

logger = get_logger(__name__)


def format_value(value: float) -> str:
    """Render a number as a float literal Prometheus can parse.

    Integral values drop the decimal point (``3`` rather than ``3.0``),
    infinities become ``+Inf``/``-Inf`` and NaN becomes ``NaN``.
    """
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float))


def _escape_help(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\n", "\\n")


def _escape_label_value(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def _format_labels(
    names: Sequence[str],
    values: Sequence[str],
    extra: tuple[str, str] | None = None,
) -> str:
    pairs = [
        f'{name}="{_escape_label_value(value)}"' for name, value in zip(names, values)
    ]
    if extra is not None:
        pairs.append(f'{extra[0]}="{extra[1]}"')
    if not pairs:
        return ""
    return "{" + ",".join(pairs) + "}"


def validate_family(family: MetricFamily) -> None:
    """Check that a family is renderable.

    Raises:
        StructuralFaultError: If the family's state is malformed.
    """
    if family.kind not in _KINDS:
        raise StructuralFaultError(family.name, f"unknown metric type {family.kind!r}")
    if family.kind == "histogram" and not family.buckets:
        raise StructuralFaultError(family.name, "histogram has no buckets")
    width = len(family.label_names)
    for sample in family.samples:
        if len(sample.label_values) != width:
            raise StructuralFaultError(
                family.name,
                f"expected {width} label values, got {len(sample.label_values)}",
            )
        if not all(isinstance(value, str) for value in sample.label_values):
            raise StructuralFaultError(family.name, "label values must be strings")
        if family.kind == "histogram":
            _validate_histogram_sample(family, sample)
        elif not isinstance(sample, Sample):
            raise StructuralFaultError(
                family.name, f"unexpected {type(sample).__name__} in {family.kind}"
            )
        elif not _is_number(sample.value):
            raise StructuralFaultError(
                family.name, f"sample value {sample.value!r} is not a number"
            )


def _validate_histogram_sample(
    family: MetricFamily, sample: Sample | HistogramSample
) -> None:
    if not isinstance(sample, HistogramSample):
        raise StructuralFaultError(
            family.name, f"unexpected {type(sample).__name__} in histogram"
        )
    counts = sample.bucket_counts
    if len(counts) != len(family.buckets) + 1:
        raise StructuralFaultError(
            family.name,
            f"expected {len(family.buckets) + 1} bucket counts, got {len(counts)}",
        )
    if not all(_is_number(v) for v in (*counts, sample.sum, sample.count)):
        raise StructuralFaultError(family.name, "histogram values must be numbers")
    if any(lower > upper for lower, upper in zip(counts, counts[1:])):
        raise StructuralFaultError(family.name, "bucket counts are not cumulative")


def _encode_family(family: MetricFamily) -> list[str]:
    validate_family(family)
    lines = [
        f"# HELP {family.name} {_escape_help(family.help)}",
        f"# TYPE {family.name} {family.kind}",
    ]
    names = family.label_names
    for sample in family.samples:
        if isinstance(sample, HistogramSample):
            bounds = [format_value(b) for b in family.buckets] + ["+Inf"]
            for bound, count in zip(bounds, sample.bucket_counts):
                labels = _format_labels(names, sample.label_values, ("le", bound))
                lines.append(f"{family.name}_bucket{labels} {format_value(count)}")
            labels = _format_labels(names, sample.label_values)
            lines.append(f"{family.name}_sum{labels} {format_value(sample.sum)}")
            lines.append(f"{family.name}_count{labels} {format_value(sample.count)}")
        else:
            labels = _format_labels(names, sample.label_values)
            lines.append(f"{family.name}{labels} {format_value(sample.value)}")
    return lines


def encode_families(families: Iterable[MetricFamily]) -> str:
    """Encode metric families to the Prometheus text format.

    A family that fails validation is replaced by a ``# SKIPPED`` comment and
    a warning is logged; the remaining families are still rendered.

    Args:
        families: An iterable of MetricFamily snapshots.

    Returns:
        Exposition text ending in a newline. Empty string if no families.
    """
    lines: list[str] = []
    for family in families:
        try:
            lines.extend(_encode_family(family))
        except StructuralFaultError as e:
            lines.append(_skipped(e))
    return _join(lines)


def encode(registry: Registry) -> str:
    """Encode every instrument in a registry, in registration order.

    Each instrument is snapshotted and rendered on its own, so an instrument
    whose ``collect()`` raises is skipped like a malformed family. Reads only;
    safe to call while other threads update instruments.
    """
    lines: list[str] = []
    for instrument in registry.instruments():
        try:
            lines.extend(_encode_family(_collect(instrument)))
        except StructuralFaultError as e:
            lines.append(_skipped(e))
    return _join(lines)


def _collect(instrument: Collectable) -> MetricFamily:
    try:
        return instrument.collect()
    except Exception as e:
        raise StructuralFaultError(instrument.name, f"collect failed: {e}") from e


def _skipped(error: StructuralFaultError) -> str:
    logger.warning(
        "Skipping malformed metric family",
        extra={"metric": error.name, "reason": error.reason},
    )
    return f"# SKIPPED {error.name}: {_escape_help(error.reason)}"


def _join(lines: list[str]) -> str:
    if not lines:
        return ""
    return "\n".join(lines) + "\n"
