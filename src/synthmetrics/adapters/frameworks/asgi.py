"""ASGI generic adapter for the metrics endpoint and request metrics.

This adapter provides a framework-agnostic ASGI application and middleware
that can be used with any ASGI server (uvicorn, hypercorn, daphne) without
requiring FastAPI as a dependency.
"""

import fnmatch
import json
import time
from collections.abc import Callable, Coroutine, Sequence
from dataclasses import dataclass
from typing import Any

from synthmetrics.core.encoding.prometheus import CONTENT_TYPE, encode
from synthmetrics.core.instruments import Counter, Histogram
from synthmetrics.core.logs import get_logger, log_exception
from synthmetrics.core.registry import Registry

# ASGI type aliases
Scope = dict[str, Any]
Receive = Callable[[], Coroutine[Any, Any, dict[str, Any]]]
Send = Callable[[dict[str, Any]], Coroutine[Any, Any, None]]
ASGIApp = Callable[[Scope, Receive, Send], Coroutine[Any, Any, None]]

DEFAULT_DURATION_BUCKETS_MS = [50, 100, 200, 300, 400, 500, 1000, 2000, 5000]
HTTP_LABEL_NAMES = ("method", "route", "status_code")

logger = get_logger(__name__)


@dataclass(frozen=True)
class HttpMetrics:
    """The request instruments the middleware updates.

    Attributes:
        request_duration: Histogram of request durations in milliseconds.
        requests_total: Counter of completed requests.
    """

    request_duration: Histogram
    requests_total: Counter

    @classmethod
    def register(
        cls,
        registry: Registry,
        buckets: Sequence[float] | None = None,
        request_histogram_name: str = "http_request_duration_ms",
        request_counter_name: str = "http_requests_total",
    ) -> "HttpMetrics":
        """Create both instruments and register them.

        Args:
            registry: Registry that will own the instruments.
            buckets: Duration buckets in milliseconds
                (default: 50, 100, 200, 300, 400, 500, 1000, 2000, 5000).
            request_histogram_name: Name of the duration histogram.
            request_counter_name: Name of the request counter.

        Raises:
            DuplicateNameError: If either name is already registered.
        """
        request_duration = registry.register(
            Histogram(
                request_histogram_name,
                "Duration of HTTP requests in milliseconds",
                HTTP_LABEL_NAMES,
                buckets if buckets is not None else DEFAULT_DURATION_BUCKETS_MS,
            )
        )
        requests_total = registry.register(
            Counter(
                request_counter_name,
                "Total number of HTTP requests",
                HTTP_LABEL_NAMES,
            )
        )
        return cls(request_duration=request_duration, requests_total=requests_total)

    def record(self, method: str, route: str, status_code: int, duration_ms: float) -> None:
        """Record one completed request."""
        labels = {"method": method, "route": route, "status_code": str(status_code)}
        self.request_duration.observe(labels, duration_ms)
        self.requests_total.increment(labels)


def _route_template(scope: Scope) -> str:
    """Return the matched route template, falling back to the raw path.

    Routers such as FastAPI's store the matched route in ``scope["route"]``
    while dispatching; unmatched requests only have the raw path.
    """
    route = scope.get("route")
    template = getattr(route, "path", None)
    if isinstance(template, str) and template:
        return template
    return str(scope["path"])


async def _send_response(send: Send, status: int, content_type: str, body: str) -> None:
    """Send an HTTP response with headers and body.

    Args:
        send: ASGI send callable for writing response.
        status: HTTP status code.
        content_type: Content-Type header value.
        body: Response body as string (will be encoded to bytes).
    """
    headers = [(b"content-type", content_type.encode())]
    await send({"type": "http.response.start", "status": status, "headers": headers})
    await send({"type": "http.response.body", "body": body.encode()})


async def _handle_endpoint(
    send: Send,
    endpoint_func: Callable[[], str],
    content_type: str,
    log_message: str,
) -> None:
    """Execute an endpoint function with error handling and send response.

    Args:
        send: ASGI send callable for writing response.
        endpoint_func: Function that returns the response body.
        content_type: Content-Type header for success response.
        log_message: Message to log on error.
    """
    try:
        body = endpoint_func()
    except Exception:
        log_exception(log_message, logger=logger)
        error_body = json.dumps({"error": "Internal Server Error"})
        await _send_response(send, 500, "application/json", error_body)
        return
    await _send_response(send, 200, content_type, body)


class ASGIMetricsMiddleware:
    """ASGI middleware that records request duration and count.

    Every HTTP request that is not excluded is observed in the duration
    histogram (milliseconds) and counted, labelled with method, route
    template and status code.

    Example:
        ```python
        http_metrics = HttpMetrics.register(registry)
        app = ASGIMetricsMiddleware(app, http_metrics, exclude_paths=["/metrics"])
        ```
    """

    def __init__(
        self,
        app: ASGIApp,
        http_metrics: HttpMetrics,
        exclude_paths: list[str] | None = None,
    ) -> None:
        """Initialize the middleware with a wrapped app and its instruments.

        Args:
            app: The ASGI application to wrap.
            http_metrics: Instruments to update, see HttpMetrics.register.
            exclude_paths: List of paths to exclude from metrics.
                          Supports exact matches and wildcard patterns
                          (e.g., "/internal/*").
        """
        self.app = app
        self.http_metrics = http_metrics
        self.exclude_paths = exclude_paths or []
        self.record_metrics = True

    def set_record_metrics(self, enabled: bool) -> None:
        """Set whether to record metrics.

        Args:
            enabled: True to enable metrics recording, False to disable.
        """
        self.record_metrics = enabled

    def _path_excluded(self, path: str) -> bool:
        """Check if path matches any pattern in exclude_paths."""
        return any(fnmatch.fnmatch(path, pattern) for pattern in self.exclude_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI callable interface that processes requests through the wrapped app."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        captured: dict[str, Any] = {"status": None, "exception": None}

        async def wrapped_send(message: dict[str, Any]) -> None:
            if message["type"] == "http.response.start":
                captured["status"] = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, wrapped_send)
        except Exception as e:
            captured["exception"] = e
            if captured["status"] is None:
                captured["status"] = 500

        duration_ms = (time.perf_counter() - start_time) * 1000
        self._record(scope, captured["status"], duration_ms)
        if captured["exception"] is not None:
            raise captured["exception"]

    def _record(self, scope: Scope, status: int | None, duration_ms: float) -> None:
        """Record request metrics if enabled and the path is not excluded."""
        if not self.record_metrics or status is None:
            return
        if self._path_excluded(scope["path"]):
            return
        self.http_metrics.record(
            scope["method"], _route_template(scope), status, duration_ms
        )


def create_asgi_app(registry: Registry, metrics_path: str = "/metrics") -> ASGIApp:
    """Create an ASGI app serving the registry in Prometheus text format.

    Args:
        registry: Registry to expose.
        metrics_path: Path of the scrape endpoint (default: "/metrics").

    Returns:
        ASGI application callable. Other paths answer 404.
    """

    async def app(scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return

        if scope["path"] == metrics_path:
            await _handle_endpoint(
                send,
                lambda: encode(registry),
                CONTENT_TYPE,
                "Error encoding metrics endpoint",
            )
        else:
            await _send_response(send, 404, "text/plain", "Not Found")

    return app
