"""Run the demo service: ``python -m synthmetrics``."""

import uvicorn

from synthmetrics.adapters.logging import configure_logging
from synthmetrics.app import create_app
from synthmetrics.config import get_settings
from synthmetrics.core.logs import get_logger

logger = get_logger("synthmetrics")


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level, json_output=settings.log_json)
    app = create_app(settings)
    logger.info(
        "Demo app listening",
        extra={
            "url": f"http://{settings.host}:{settings.port}",
            "metrics_url": f"http://{settings.host}:{settings.port}/metrics",
        },
    )
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None,
        access_log=False,
    )


if __name__ == "__main__":
    main()
