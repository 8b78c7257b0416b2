"""FastAPI demo application exposing synthetic telemetry.

Run with:
    python -m synthmetrics

Endpoints:
    /          - Liveness message with timestamp
    /health    - Randomly healthy (200) or unhealthy (503), feeds app_health_status
    /stress    - Pins the simulated CPU gauge at 85% for a while
    /metrics   - Prometheus text format
"""

import random
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from synthmetrics import __version__
from synthmetrics.adapters.frameworks.asgi import ASGIMetricsMiddleware, HttpMetrics
from synthmetrics.adapters.frameworks.fastapi import create_metrics_router
from synthmetrics.config import Settings, get_settings
from synthmetrics.core.logs import get_logger
from synthmetrics.core.metrics import gauge
from synthmetrics.core.registry import Registry
from synthmetrics.runtime.periodic import PeriodicTask
from synthmetrics.runtime.process import ProcessMetrics
from synthmetrics.runtime.simulator import STRESS_CPU_PERCENT, CpuLoadSimulator

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    registry: Registry | None = None,
    rng: random.Random | None = None,
) -> FastAPI:
    """Build the demo application and register all of its instruments.

    Args:
        settings: Configuration (default: ``get_settings()``).
        registry: Registry to populate (default: a new one).
        rng: Random source shared by the health probe and CPU simulator.

    Returns:
        FastAPI app. Background tasks run only inside its lifespan.
    """
    settings = settings or get_settings()
    registry = registry if registry is not None else Registry()
    rng = rng or random.Random()

    process_metrics = ProcessMetrics.register(registry) if settings.default_metrics else None
    http_metrics = HttpMetrics.register(registry, settings.request_duration_buckets)
    health_status = gauge(
        registry,
        "app_health_status",
        "Application health status (1 = healthy, 0 = unhealthy)",
    )
    cpu_usage = gauge(
        registry,
        "app_cpu_usage_percent",
        "Application CPU usage percentage (simulated)",
    )
    simulator = CpuLoadSimulator(cpu_usage, rng=rng)

    tasks = [PeriodicTask("cpu-simulator", settings.cpu_sample_interval, simulator.tick)]
    if process_metrics is not None:
        tasks.append(
            PeriodicTask(
                "process-metrics",
                settings.process_metrics_interval,
                process_metrics.refresh,
            )
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        health_status.set(None, 1)
        simulator.reset()
        if process_metrics is not None:
            process_metrics.refresh()
        for task in tasks:
            task.start()
        try:
            yield
        finally:
            for task in tasks:
                await task.stop()

    app = FastAPI(title="Synthetic Telemetry Demo", version=__version__, lifespan=lifespan)
    app.add_middleware(ASGIMetricsMiddleware, http_metrics=http_metrics)
    app.include_router(create_metrics_router(registry))

    app.state.settings = settings
    app.state.registry = registry
    app.state.http_metrics = http_metrics
    app.state.simulator = simulator
    app.state.background_tasks = tasks

    @app.get("/", summary="Liveness message")
    async def root() -> dict[str, str]:
        return {
            "status": "ok",
            "message": "Demo monitoring application is running",
            "timestamp": datetime.now(tz=UTC).isoformat(),
        }

    @app.get("/health", summary="Simulated health check")
    async def health() -> JSONResponse:
        """Report healthy most of the time and mirror the result in the gauge."""
        if rng.random() >= settings.health_failure_rate:
            health_status.set(None, 1)
            return JSONResponse({"status": "healthy"}, status_code=200)
        health_status.set(None, 0)
        logger.warning("Health check reported unhealthy")
        return JSONResponse({"status": "unhealthy"}, status_code=503)

    @app.get("/stress", summary="Simulate high CPU load")
    async def stress() -> dict[str, str]:
        simulator.stress(settings.stress_duration)
        return {
            "message": (
                f"CPU stress simulated for {settings.stress_duration:g} seconds "
                f"at {STRESS_CPU_PERCENT:g}%"
            )
        }

    return app
