"""Example plain ASGI application with request metrics and a scrape endpoint.

Run with:
    uvicorn examples.asgi_example:app --reload

Endpoints:
    /metrics   - Prometheus text format
    /*         - Hello world, counted and timed by the middleware

Instrumentation:
    This example uses the framework-agnostic adapter only; no FastAPI needed.
"""

from synthmetrics import Registry, gauge
from synthmetrics.adapters.frameworks.asgi import (
    ASGIMetricsMiddleware,
    HttpMetrics,
    Receive,
    Scope,
    Send,
    create_asgi_app,
)

registry = Registry()
http_metrics = HttpMetrics.register(registry)
in_flight = gauge(registry, "hello_in_flight", "Hello requests being served")
metrics_app = create_asgi_app(registry)


async def hello(scope: Scope, receive: Receive, send: Send) -> None:
    """Answer everything except /metrics with a greeting."""
    if scope["type"] != "http":
        return
    if scope["path"] == "/metrics":
        await metrics_app(scope, receive, send)
        return
    in_flight.increment()
    try:
        await send(
            {
                "type": "http.response.start",
                "status": 200,
                "headers": [(b"content-type", b"text/plain")],
            }
        )
        await send({"type": "http.response.body", "body": b"Hello! Check /metrics\n"})
    finally:
        in_flight.decrement()


app = ASGIMetricsMiddleware(hello, http_metrics, exclude_paths=["/metrics"])
