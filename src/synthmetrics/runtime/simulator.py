"""Simulated CPU load that feeds the ``app_cpu_usage_percent`` gauge."""

import random
import time
from collections.abc import Callable

from synthmetrics.core.instruments import Gauge
from synthmetrics.core.logs import get_logger

BASELINE_CPU_PERCENT = 30.0
STRESS_CPU_PERCENT = 85.0
SPIKE_PROBABILITY = 0.2

logger = get_logger(__name__)


class CpuLoadSimulator:
    """Random CPU readings with occasional spikes and an on-demand stress mode.

    Each ``tick()`` picks a reading between 60% and 85% with probability 0.2,
    otherwise between 20% and 50%. While a stress window is open the gauge is
    pinned at 85% and ticks are ignored; the first tick after the window
    closes restores the 30% baseline.
    """

    def __init__(
        self,
        gauge: Gauge,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._gauge = gauge
        self._rng = rng or random.Random()
        self._clock = clock
        self._stress_until: float | None = None

    @property
    def stressed(self) -> bool:
        return self._stress_until is not None

    def reset(self) -> None:
        """Set the gauge to the baseline reading."""
        self._gauge.set(None, BASELINE_CPU_PERCENT)

    def tick(self) -> None:
        """Publish the next simulated reading."""
        if self._stress_until is not None:
            if self._clock() < self._stress_until:
                return
            self._stress_until = None
            logger.info("CPU stress window ended")
            self.reset()
            return

        if self._rng.random() < SPIKE_PROBABILITY:
            reading = 60 + self._rng.random() * 25
        else:
            reading = 20 + self._rng.random() * 30
        self._gauge.set(None, reading)

    def stress(self, duration: float) -> None:
        """Pin the gauge at 85% for ``duration`` seconds."""
        self._stress_until = self._clock() + duration
        self._gauge.set(None, STRESS_CPU_PERCENT)
        logger.info("CPU stress window started", extra={"duration_seconds": duration})
