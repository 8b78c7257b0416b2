"""Registry owning the instruments of one application."""

import threading
from collections.abc import Iterator
from typing import TypeVar

from synthmetrics.core.errors import DuplicateNameError
from synthmetrics.core.models import MetricFamily
from synthmetrics.core.ports import Collectable

C = TypeVar("C", bound=Collectable)


class Registry:
    """Name-unique, insertion-ordered container of instruments.

    A registry is created once by the application and handed to whatever
    serves scrapes. Instruments are registered during initialization and
    never removed.

    Example:
        ```python
        registry = Registry()
        requests = registry.register(
            Counter("requests_total", "Requests served", ["method"])
        )
        requests.increment({"method": "GET"})
        ```
    """

    def __init__(self) -> None:
        self._instruments: dict[str, Collectable] = {}
        self._lock = threading.Lock()

    def register(self, instrument: C) -> C:
        """Register an instrument under its name.

        Args:
            instrument: Counter, Gauge, Histogram or any Collectable.

        Returns:
            The same instrument, for use by the update path.

        Raises:
            DuplicateNameError: If the name is already registered. The
                existing instrument is left untouched.
        """
        with self._lock:
            if instrument.name in self._instruments:
                raise DuplicateNameError(instrument.name)
            self._instruments[instrument.name] = instrument
        return instrument

    def lookup(self, name: str) -> Collectable | None:
        """Return the instrument registered under name, or None."""
        with self._lock:
            return self._instruments.get(name)

    def names(self) -> list[str]:
        """Registered names in registration order."""
        with self._lock:
            return list(self._instruments)

    def instruments(self) -> list[Collectable]:
        """Registered instruments in registration order (a copy)."""
        with self._lock:
            return list(self._instruments.values())

    def collect(self) -> Iterator[MetricFamily]:
        """Yield a snapshot of each instrument in registration order.

        Each snapshot is taken when the iterator reaches it; there is no
        consistency across instruments.
        """
        for instrument in self.instruments():
            yield instrument.collect()

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._instruments

    def __len__(self) -> int:
        with self._lock:
            return len(self._instruments)
