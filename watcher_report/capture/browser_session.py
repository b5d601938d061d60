"""Browser session owning one tab for the lifetime of one report.

The session walks a fixed sequence of states: launch the browser, navigate
to the target page, log in or let the page settle, capture, close. There
are no retries between states. Use it as an async context manager so the
browser is closed exactly once on every exit path::

    async with BrowserSession(config) as session:
        await session.open(url, config.executable_path)
        artifact = await session.capture(SnapshotType.PNG)
"""

import logging
from enum import Enum
from typing import Callable, Optional, Union

from playwright.async_api import Page

from .authenticator import Authenticator
from .browser_factory import BrowserFactory, create_report_factory
from ..errors import (
    CaptureError,
    LaunchError,
    NavigationError,
    TeardownError,
)
from ..models.report import AuthMode, CapturedArtifact, ReportConfig, SnapshotType
from ..packaging import mime_type_for

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Lifecycle states of a browser session."""
    IDLE = "idle"
    LAUNCHING = "launching"
    NAVIGATING = "navigating"
    AUTHENTICATING = "authenticating"
    STABILIZING = "stabilizing"
    READY = "ready"
    CAPTURING = "capturing"
    CLOSED = "closed"


class BrowserSession:
    """Drives one headless browser tab through a report capture."""

    def __init__(
        self,
        config: ReportConfig,
        factory_builder: Callable[[Optional[str]], BrowserFactory] = create_report_factory,
        authenticator: type = Authenticator
    ):
        """Initialize browser session.

        Args:
            config: Resolved report configuration for this run
            factory_builder: Creates the browser factory from an executable path
            authenticator: Login strategy set
        """
        self.config = config
        self.factory_builder = factory_builder
        self.authenticator = authenticator

        self.state = SessionState.IDLE
        self.url: Optional[str] = None
        self.factory: Optional[BrowserFactory] = None
        self.page: Optional[Page] = None
        self.teardown_error: Optional[TeardownError] = None
        self._close_attempted = False

    async def __aenter__(self) -> "BrowserSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        try:
            await self.close()
        except TeardownError as e:
            if exc is None:
                # Keep whatever the block already captured
                logger.warning(f"{e.message}; keeping captured artifact")
            else:
                logger.error(f"{e.message} while handling: {exc}")
        return False

    async def open(self, url: str, executable_path: Optional[str] = None) -> None:
        """Launch the browser, load ``url`` and log in or wait for it to settle.

        Raises:
            LaunchError: If the browser cannot be started
            NavigationError: If the page cannot be loaded
            AuthenticationError: If the configured login fails
        """
        self.url = url
        auth = self.config.authentication
        timeout = self.config.timeout

        self.state = SessionState.LAUNCHING
        try:
            self.factory = self.factory_builder(executable_path)
            await self.factory.start()
            self.page = await self.factory.new_page()
        except Exception as e:
            raise LaunchError(f"Failed to open headless browser, {e}") from e

        if auth.enabled and auth.mode == AuthMode.BASIC:
            await self.authenticator.apply_basic_auth_header(self.page, auth.username, auth.password)

        self.state = SessionState.NAVIGATING
        try:
            await self.page.goto(url, wait_until="networkidle")
        except Exception as e:
            raise NavigationError(url, str(e)) from e
        logger.debug(f"Navigation completed: {url}")

        if auth.enabled:
            self.state = SessionState.AUTHENTICATING
            await self.authenticator.authenticate(self.page, auth, timeout)
        else:
            self.state = SessionState.STABILIZING
            await self.page.wait_for_timeout(timeout)

        self.state = SessionState.READY

    async def capture(self, snapshot_type: Union[SnapshotType, str] = SnapshotType.PNG) -> CapturedArtifact:
        """Capture the loaded page as a PDF document or a raster image.

        Raises:
            CaptureError: If the session is not open or the capture fails
        """
        snapshot_type = SnapshotType(snapshot_type)

        if self.state != SessionState.READY or self.page is None:
            raise CaptureError(self.url, snapshot_type.value, f"session is {self.state.value}, not ready")

        self.state = SessionState.CAPTURING
        try:
            if snapshot_type.is_document:
                pdf = self.config.file.pdf
                data = await self.page.pdf(format=pdf.format, landscape=pdf.landscape)
            else:
                screenshot = self.config.file.screenshot
                await self.page.set_viewport_size({
                    'width': screenshot.width,
                    'height': screenshot.height,
                })
                data = await self.page.screenshot(type=snapshot_type.value)
        except Exception as e:
            raise CaptureError(self.url, snapshot_type.value, str(e)) from e

        self.state = SessionState.READY
        logger.info(f"Captured {snapshot_type.value} of {self.url} ({len(data)} bytes)")

        return CapturedArtifact(
            data=data,
            mime_type=mime_type_for(snapshot_type),
            snapshot_type=snapshot_type,
        )

    async def close(self) -> None:
        """Terminate the browser process. Only the first call does anything.

        Raises:
            TeardownError: If the browser cannot be closed
        """
        if self._close_attempted:
            return
        self._close_attempted = True
        self.state = SessionState.CLOSED
        self.page = None

        if self.factory is None:
            return

        try:
            await self.factory.stop(raise_on_error=True)
        except Exception as e:
            self.teardown_error = TeardownError(str(e))
            raise self.teardown_error from e

    def __repr__(self) -> str:
        return f"BrowserSession(url={self.url}, state={self.state.value})"
