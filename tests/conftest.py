"""Root test configuration."""

import logging

import pytest
import structlog

from grafanaclient.config import get_settings

GRAFANA_URL = "http://grafana.example.com"

SIMPLE_TEMPLATE = """
title = "cpu"

[[row]]
title = "CPU"

  [[row.panel]]
  title = "CPU busy"

    [[row.panel.metric]]
    measurement = "cpu"
    fields = ["busy"]
    hosts = ["host1", "host2"]
"""


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


@pytest.fixture(autouse=True)
def _clean_settings(monkeypatch):
    """Isolate tests from GRAFANA_* variables of the calling shell."""
    for name in ("GRAFANA_URL", "GRAFANA_USER", "GRAFANA_PASSWORD", "GRAFANA_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def simple_template(tmp_path):
    path = tmp_path / "cpu.toml"
    path.write_text(SIMPLE_TEMPLATE)
    return path
