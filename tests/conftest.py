"""Shared test fixtures and configuration for Watcher Report tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from watcher_report.config.loader import ReportSettings
from watcher_report.models.report import (
    AuthConfig,
    ReportAction,
    ReportConfig,
    WatcherTask,
)


PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-data"
PDF_BYTES = b"%PDF-1.4 fake-document"


def make_page():
    """Playwright page double returning canned capture bytes."""
    page = AsyncMock()
    page.screenshot.return_value = PNG_BYTES
    page.pdf.return_value = PDF_BYTES
    return page


def make_factory(page=None):
    """BrowserFactory double handing out ``page``."""
    factory = MagicMock()
    factory.start = AsyncMock()
    factory.stop = AsyncMock()
    factory.new_page = AsyncMock(return_value=page or make_page())
    return factory


@pytest.fixture
def page():
    return make_page()


@pytest.fixture
def factory(page):
    return make_factory(page)


@pytest.fixture
def report_config():
    """Report configuration with authentication disabled."""
    return ReportConfig(
        active=True,
        timeout=5000,
        authentication=AuthConfig(enabled=False),
    )


@pytest.fixture
def settings(report_config):
    return ReportSettings(app_name="Sentinl", report=report_config)


@pytest.fixture
def sample_task():
    return WatcherTask(id="watcher-1", title="Daily traffic")


@pytest.fixture
def sample_action():
    return ReportAction(**{
        "snapshot": {
            "url": "http://x",
            "type": "png",
            "res": "800x600",
        },
        "from": "watcher@example.com",
        "to": "ops@example.com",
        "stateless": False,
    })


@pytest.fixture
def sample_payload():
    return {"_id": "abc", "hits": {"total": 42}}


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
