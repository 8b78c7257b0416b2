"""Error types raised by the metrics core."""


class MetricsError(Exception):
    """Base class for all synthmetrics errors."""


class DuplicateNameError(MetricsError, ValueError):
    """An instrument with the same name is already registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Instrument '{name}' is already registered")
        self.name = name


class LabelMismatchError(MetricsError, ValueError):
    """Label keys supplied to an update differ from the declared label names."""

    def __init__(
        self, name: str, expected: tuple[str, ...], received: tuple[str, ...]
    ) -> None:
        super().__init__(
            f"Instrument '{name}' expects labels {list(expected)}, "
            f"got {list(received)}"
        )
        self.name = name
        self.expected = expected
        self.received = received


class StructuralFaultError(MetricsError):
    """A metric family cannot be rendered because its state is malformed."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"{name}: {reason}")
        self.name = name
        self.reason = reason
