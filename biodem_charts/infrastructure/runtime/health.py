"""Prometheus endpoint for render, aggregation and query counters."""

import structlog
from prometheus_client import start_http_server

from biodem_charts.infrastructure.config.settings import Settings

logger = structlog.get_logger()


def start_metrics_server(settings: Settings) -> bool:
    """Expose chart metrics over HTTP; a port of 0 disables the endpoint."""
    if not settings.prometheus_port:
        logger.info("metrics_server_disabled")
        return False
    start_http_server(settings.prometheus_port)
    logger.info("metrics_server_started", port=settings.prometheus_port)
    return True
