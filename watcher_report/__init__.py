"""Watcher Report - headless browser report capture for watcher actions.

Captures an (optionally authenticated) dashboard page as an image or PDF,
mails it as an attachment and records the outcome in a history store.

Usage:
    from watcher_report import ReportOrchestrator, load_report_settings

    orchestrator = ReportOrchestrator(settings, mail_client, history_store)
    result = await orchestrator.run(task, action, "report_daily", payload)
"""

__version__ = "1.0.0"

from .config.loader import ReportSettings, load_report_settings
from .models.report import ReportAction, ReportResult, WatcherTask
from .orchestrator import ReportOrchestrator

__all__ = [
    "ReportAction",
    "ReportOrchestrator",
    "ReportResult",
    "ReportSettings",
    "WatcherTask",
    "load_report_settings",
]
