"""FastAPI adapter for the metrics endpoint."""

from fastapi import APIRouter, Response

from synthmetrics.core.encoding.prometheus import CONTENT_TYPE, encode
from synthmetrics.core.registry import Registry


def create_metrics_router(registry: Registry, path: str = "/metrics") -> APIRouter:
    """Create a FastAPI router with the Prometheus scrape endpoint.

    Args:
        registry: Registry to expose.
        path: Path of the scrape endpoint (default: "/metrics").

    Returns:
        APIRouter with a GET endpoint at ``path``.
    """
    router = APIRouter()

    @router.get(path, include_in_schema=False)
    async def get_metrics() -> Response:
        """Return metrics in Prometheus text format."""
        return Response(content=encode(registry), media_type=CONTENT_TYPE)

    return router
