"""Tests for structured logging setup in `vetmonitor/log.py`."""

import json
from collections.abc import Iterator

import pytest
import structlog

from vetmonitor.config import LoggingConfig
from vetmonitor.log import configure_logging


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()


def test_json_renderer_emits_event_fields() -> None:
    configure_logging(LoggingConfig(level="INFO", format="json"))
    renderer = structlog.get_config()["processors"][-1]
    assert isinstance(renderer, structlog.processors.JSONRenderer)

    line = renderer(None, "info", {"event": "report_built", "symptoms": 3})
    assert json.loads(line) == {"event": "report_built", "symptoms": 3}


def test_console_renderer_in_development() -> None:
    configure_logging(LoggingConfig(level="DEBUG", format="console"))
    renderer = structlog.get_config()["processors"][-1]
    assert isinstance(renderer, structlog.dev.ConsoleRenderer)


def test_defaults_to_json() -> None:
    configure_logging()
    assert isinstance(structlog.get_config()["processors"][-1], structlog.processors.JSONRenderer)


def test_services_package_exports() -> None:
    import vetmonitor.services as services

    for name in services.__all__:
        assert hasattr(services, name)
