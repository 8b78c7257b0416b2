"""Default process instruments backed by psutil."""

import os
import platform

import psutil

from synthmetrics.core.instruments import Counter, Gauge
from synthmetrics.core.registry import Registry


class ProcessMetrics:
    """Resource usage of the current process.

    Instruments are registered once like any other; ``refresh()`` reads the
    process through psutil and updates them. It is meant to run from a
    ``PeriodicTask`` and once at startup.
    """

    def __init__(self, registry: Registry, process: psutil.Process | None = None) -> None:
        self._process = process or psutil.Process(os.getpid())
        self._last_cpu_seconds = 0.0

        self.cpu_seconds = registry.register(
            Counter(
                "process_cpu_seconds_total",
                "Total user and system CPU time spent in seconds.",
            )
        )
        self.resident_memory = registry.register(
            Gauge("process_resident_memory_bytes", "Resident memory size in bytes.")
        )
        self.virtual_memory = registry.register(
            Gauge("process_virtual_memory_bytes", "Virtual memory size in bytes.")
        )
        self.start_time = registry.register(
            Gauge(
                "process_start_time_seconds",
                "Start time of the process since unix epoch in seconds.",
            )
        )
        self.threads = registry.register(
            Gauge("process_num_threads", "Number of OS threads in the process.")
        )
        self.open_fds: Gauge | None = None
        if hasattr(self._process, "num_fds"):
            self.open_fds = registry.register(
                Gauge("process_open_fds", "Number of open file descriptors.")
            )

        python_info = registry.register(
            Gauge(
                "python_info",
                "Python platform information.",
                ["implementation", "major", "minor", "patchlevel"],
            )
        )
        major, minor, patchlevel = platform.python_version_tuple()
        python_info.set(
            {
                "implementation": platform.python_implementation(),
                "major": major,
                "minor": minor,
                "patchlevel": patchlevel,
            },
            1,
        )

    @classmethod
    def register(cls, registry: Registry) -> "ProcessMetrics":
        return cls(registry)

    def refresh(self) -> None:
        """Read the process and update every instrument."""
        with self._process.oneshot():
            cpu = self._process.cpu_times()
            memory = self._process.memory_info()
            self.start_time.set(None, self._process.create_time())
            self.threads.set(None, self._process.num_threads())
            if self.open_fds is not None:
                self.open_fds.set(None, self._process.num_fds())

        cpu_seconds = cpu.user + cpu.system
        self.cpu_seconds.increment(amount=max(0.0, cpu_seconds - self._last_cpu_seconds))
        self._last_cpu_seconds = max(cpu_seconds, self._last_cpu_seconds)
        self.resident_memory.set(None, memory.rss)
        self.virtual_memory.set(None, memory.vms)
