"""Background update sources and process-level instruments."""

from synthmetrics.runtime.periodic import PeriodicTask
from synthmetrics.runtime.process import ProcessMetrics
from synthmetrics.runtime.simulator import CpuLoadSimulator

__all__ = ["CpuLoadSimulator", "PeriodicTask", "ProcessMetrics"]
