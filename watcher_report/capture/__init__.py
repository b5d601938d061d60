"""Headless browser capture for report actions.

Main Components:
- Browser Factory: Playwright browser launch and teardown
- Authenticator: login strategies per authentication backend
- Browser Session: one tab, one report, guaranteed teardown

Usage:
    from watcher_report.capture import BrowserSession

    async with BrowserSession(config) as session:
        await session.open("https://dashboard.example.com/app/report")
        artifact = await session.capture("png")
"""

__all__ = [
    "Authenticator",
    "BrowserConfig",
    "BrowserEngineType",
    "BrowserFactory",
    "BrowserSession",
    "SessionState",
    "create_report_factory",
]

from .authenticator import Authenticator
from .browser_factory import (
    BrowserConfig,
    BrowserEngineType,
    BrowserFactory,
    create_report_factory,
)
from .browser_session import BrowserSession, SessionState
