"""Login strategies for authenticated report pages.

Each supported backend has its own strategy; the login DOMs differ too much
to share one. ``Authenticator.authenticate`` picks the strategy from the
configured ``AuthMode``.
"""

import base64
import logging
from typing import Optional

from playwright.async_api import Page

from ..errors import AuthenticationError
from ..models.report import AuthConfig, AuthMode

logger = logging.getLogger(__name__)


class DashboardSelectors:
    """Known selectors of the dashboard login forms."""
    USERNAME = '#username'
    PASSWORD = '#password'
    XPACK_SUBMIT = '.kuiButton'
    SEARCHGUARD_SUBMIT = '.btn-login'
    OVERLAY_CLOSE = '.global-nav-link--close'


class Authenticator:
    """Stateless set of login strategies."""

    @staticmethod
    def typing_delay(timeout: int) -> float:
        """Per-character typing delay in milliseconds."""
        return timeout / 50

    @staticmethod
    async def login_via_dashboard_form(
        page: Page,
        user: Optional[str],
        password: Optional[str],
        backend: AuthMode = AuthMode.XPACK,
        timeout: int = 5000
    ) -> None:
        """Log in through the dashboard login form of a security backend.

        Args:
            page: Page already showing the login form
            user: Login user
            password: Login password
            backend: ``AuthMode.XPACK`` or ``AuthMode.SEARCHGUARD``
            timeout: Settle delay in milliseconds after submitting

        Raises:
            AuthenticationError: If any step of the login fails
        """
        backend = AuthMode(backend)
        delay = Authenticator.typing_delay(timeout)

        if backend == AuthMode.XPACK:
            submit_selector = DashboardSelectors.XPACK_SUBMIT
        else:
            submit_selector = DashboardSelectors.SEARCHGUARD_SUBMIT

        try:
            await page.type(DashboardSelectors.USERNAME, user or '', delay=delay)
            await page.type(DashboardSelectors.PASSWORD, password or '', delay=delay)
            await page.click(submit_selector)

            await page.wait_for_timeout(timeout)
            await page.click(DashboardSelectors.OVERLAY_CLOSE)
            await page.wait_for_timeout(timeout / 5)
        except Exception as e:
            raise AuthenticationError(backend.value, user, str(e)) from e

        logger.debug(f"Logged in via {backend.value} as {user}")

    @staticmethod
    async def login_via_custom_form(
        page: Page,
        user: Optional[str],
        password: Optional[str],
        user_selector: str,
        password_selector: str,
        submit_selector: str,
        timeout: int = 5000
    ) -> None:
        """Log in through a login form described by caller supplied selectors.

        Raises:
            AuthenticationError: If any step of the login fails
        """
        delay = Authenticator.typing_delay(timeout)

        try:
            await page.type(user_selector, user or '', delay=delay)
            await page.type(password_selector, password or '', delay=delay)
            await page.click(submit_selector)
            await page.wait_for_timeout(timeout)
        except Exception as e:
            raise AuthenticationError(AuthMode.CUSTOM.value, user, str(e)) from e

        logger.debug(f"Logged in via custom form as {user}")

    @staticmethod
    async def apply_basic_auth_header(
        page: Page,
        user: Optional[str],
        password: Optional[str],
        encoding: str = 'base64'
    ) -> Page:
        """Send ``Authorization: Basic`` with every request of the page.

        Must be applied before navigation.

        Raises:
            AuthenticationError: If the header cannot be set
        """
        try:
            if encoding != 'base64':
                raise ValueError(f"Unsupported credentials encoding: {encoding}")
            credentials = f"{user or ''}:{password or ''}".encode('utf-8')
            token = base64.b64encode(credentials).decode('ascii')
            await page.set_extra_http_headers({'Authorization': f'Basic {token}'})
        except Exception as e:
            raise AuthenticationError(AuthMode.BASIC.value, user, str(e)) from e

        logger.debug("Basic auth header applied")
        return page

    @classmethod
    async def authenticate(cls, page: Page, auth: AuthConfig, timeout: int) -> None:
        """Run the post-navigation login strategy selected by ``auth.mode``.

        Basic auth happens before navigation and ``none`` needs no login, so
        both are no-ops here.
        """
        if auth.mode in (AuthMode.XPACK, AuthMode.SEARCHGUARD):
            await cls.login_via_dashboard_form(
                page, auth.username, auth.password, auth.mode, timeout
            )
        elif auth.mode == AuthMode.CUSTOM:
            selectors = auth.custom
            await cls.login_via_custom_form(
                page,
                auth.username,
                auth.password,
                selectors.username_input_selector,
                selectors.password_input_selector,
                selectors.login_btn_selector,
                timeout,
            )
