"""Browser factory for launching and tearing down Playwright browsers.

This module provides the BrowserFactory class that owns one browser process:
it starts Playwright, launches the configured engine with container-friendly
arguments, hands out pages in a fresh context and stops everything again.
"""

import logging
from typing import Any, Dict, List, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    async_playwright,
)

logger = logging.getLogger(__name__)

# Chromium refuses to start as root inside containers without these
NO_SANDBOX_ARGS = ['--no-sandbox', '--disable-setuid-sandbox']


class BrowserEngineType:
    """Supported browser engine types."""
    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"


class BrowserConfig:
    """Configuration for browser launch and context setup."""

    def __init__(
        self,
        engine: str = BrowserEngineType.CHROMIUM,
        headless: bool = True,
        executable_path: Optional[str] = None,
        args: Optional[List[str]] = None,
        viewport: Optional[Dict[str, int]] = None,
        extra_headers: Optional[Dict[str, str]] = None,
        ignore_https_errors: bool = False,
        **kwargs
    ):
        """Initialize browser configuration.

        Args:
            engine: Browser engine to use (chromium, firefox, webkit)
            headless: Run browser in headless mode
            executable_path: Browser binary to launch instead of the bundled one
            args: Extra command line arguments for the browser process
            viewport: Viewport size dict with 'width' and 'height'
            extra_headers: Additional HTTP headers for all requests
            ignore_https_errors: Ignore SSL/TLS certificate errors
        """
        self.engine = engine
        self.headless = headless
        self.executable_path = executable_path
        self.args = list(args or [])
        self.viewport = viewport
        self.extra_headers = extra_headers or {}
        self.ignore_https_errors = ignore_https_errors
        self.extra_options = kwargs

    def to_browser_options(self) -> Dict[str, Any]:
        """Convert to Playwright browser launch options."""
        options: Dict[str, Any] = {'headless': self.headless}

        if self.executable_path:
            options['executable_path'] = self.executable_path

        if self.args:
            options['args'] = self.args

        options.update(self.extra_options)
        return options

    def to_context_options(self) -> Dict[str, Any]:
        """Convert to Playwright browser context options."""
        options: Dict[str, Any] = {}

        if self.viewport:
            options['viewport'] = self.viewport

        if self.extra_headers:
            options['extra_http_headers'] = self.extra_headers

        if self.ignore_https_errors:
            options['ignore_https_errors'] = True

        return options


class BrowserFactory:
    """Owns a single Playwright browser process."""

    def __init__(self, config: BrowserConfig):
        self.config = config
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None

    async def start(self) -> None:
        """Start Playwright and launch browser."""
        if self.playwright is not None:
            logger.warning("Browser factory already started")
            return

        logger.info(f"Starting browser factory with engine: {self.config.engine}")

        try:
            self.playwright = await async_playwright().start()

            if self.config.engine == BrowserEngineType.FIREFOX:
                browser_type = self.playwright.firefox
            elif self.config.engine == BrowserEngineType.WEBKIT:
                browser_type = self.playwright.webkit
            else:
                browser_type = self.playwright.chromium

            self.browser = await browser_type.launch(**self.config.to_browser_options())

            logger.info(f"Browser launched successfully (headless={self.config.headless})")

        except Exception as e:
            logger.error(f"Failed to start browser: {e}")
            await self.stop()
            raise

    async def new_page(self, **context_overrides) -> Page:
        """Open a page in a fresh browser context.

        Raises:
            RuntimeError: If browser factory not started
        """
        if not self.browser:
            raise RuntimeError("Browser factory not started. Call start() first.")

        context_options = self.config.to_context_options()
        context_options.update(context_overrides)

        self.context = await self.browser.new_context(**context_options)
        page = await self.context.new_page()
        logger.debug("Opened new page")
        return page

    async def stop(self, raise_on_error: bool = False) -> None:
        """Stop browser and cleanup resources.

        Args:
            raise_on_error: Re-raise the first error instead of only logging it
        """
        logger.info("Stopping browser factory")

        try:
            if self.context:
                await self.context.close()
                self.context = None

            if self.browser:
                await self.browser.close()
                self.browser = None

            if self.playwright:
                await self.playwright.stop()
                self.playwright = None

            logger.info("Browser factory stopped successfully")

        except Exception as e:
            logger.error(f"Error stopping browser factory: {e}")
            self.context = None
            self.browser = None
            self.playwright = None
            if raise_on_error:
                raise

    @property
    def is_running(self) -> bool:
        """Check if browser factory is running."""
        if self.browser is None:
            return False
        try:
            return self.browser.is_connected()
        except Exception:
            return True

    def __repr__(self) -> str:
        return (
            f"BrowserFactory(engine={self.config.engine}, "
            f"headless={self.config.headless}, "
            f"running={self.is_running})"
        )


def create_report_factory(executable_path: Optional[str] = None) -> BrowserFactory:
    """Create a headless chromium factory suitable for report capture.

    Args:
        executable_path: Browser binary; Playwright's bundled chromium when None

    Returns:
        Configured BrowserFactory instance
    """
    config = BrowserConfig(
        engine=BrowserEngineType.CHROMIUM,
        headless=True,
        executable_path=executable_path,
        args=NO_SANDBOX_ARGS,
        ignore_https_errors=True,
    )
    return BrowserFactory(config)
