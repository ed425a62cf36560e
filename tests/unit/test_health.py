"""Unit tests for the metrics endpoint."""

from unittest.mock import patch

from biodem_charts.infrastructure.config.settings import Settings
from biodem_charts.infrastructure.runtime.health import start_metrics_server


def test_metrics_server_started_on_configured_port():
    """Test that the endpoint listens on the configured port."""
    settings = Settings(_env_file=None, prometheus_port=9400)
    with patch("biodem_charts.infrastructure.runtime.health.start_http_server") as start:
        assert start_metrics_server(settings)
    start.assert_called_once_with(9400)


def test_metrics_server_disabled_by_port_zero():
    """Test that port 0 skips the endpoint."""
    settings = Settings(_env_file=None, prometheus_port=0)
    with patch("biodem_charts.infrastructure.runtime.health.start_http_server") as start:
        assert not start_metrics_server(settings)
    start.assert_not_called()
