"""Exceptions raised by the report capture pipeline.

Every error carries a machine-readable ``error_code`` and a ``details``
dictionary so that the orchestrator can log and serialize failures
uniformly.
"""

from typing import Any, Dict, Optional


class ReportError(Exception):
    """Base error for report runs."""

    def __init__(
        self,
        message: str = "Report run failed",
        error_code: str = "report_failed",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to a JSON-serializable dictionary."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ReportsDisabledError(ReportError):
    """Raised when the report feature is switched off in settings."""

    def __init__(self, message: str = "Reports Disabled: Action requires Email Settings!"):
        super().__init__(message=message, error_code="reports_disabled")


class ReportConfigurationError(ReportError):
    """Raised when an action or settings cannot produce a runnable report."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="invalid_report_configuration",
            details={"field": field} if field else {}
        )


class LaunchError(ReportError):
    """Raised when the headless browser cannot be started."""

    def __init__(self, message: str = "Failed to open headless browser"):
        super().__init__(message=message, error_code="browser_launch_failed")


class NavigationError(ReportError):
    """Raised when the target page cannot be loaded."""

    def __init__(self, url: str, reason: Optional[str] = None):
        message = f"Failed to go to url: {url}"
        if reason:
            message += f", {reason}"
        super().__init__(
            message=message,
            error_code="navigation_failed",
            details={"url": url}
        )


class AuthenticationError(ReportError):
    """Raised when a login strategy fails."""

    def __init__(
        self,
        mode: str,
        user: Optional[str] = None,
        reason: Optional[str] = None
    ):
        message = f"Failed to authenticate via {mode}"
        if user:
            message += f", user: {user}"
        if reason:
            message += f", {reason}"
        super().__init__(
            message=message,
            error_code="authentication_failed",
            details={"mode": mode, "user": user}
        )
        self.mode = mode
        self.user = user


class CaptureError(ReportError):
    """Raised when a screenshot or PDF cannot be produced."""

    def __init__(self, url: Optional[str], snapshot_type: str, reason: Optional[str] = None):
        message = f"Failed to capture {snapshot_type}, url: {url}"
        if reason:
            message += f", {reason}"
        super().__init__(
            message=message,
            error_code="capture_failed",
            details={"url": url, "snapshot_type": snapshot_type}
        )


class TeardownError(ReportError):
    """Raised when the browser process cannot be closed."""

    def __init__(self, reason: Optional[str] = None):
        message = "Failed to close headless browser"
        if reason:
            message += f", {reason}"
        super().__init__(message=message, error_code="browser_teardown_failed")


class MailSendError(ReportError):
    """Raised when the report mail cannot be delivered."""

    def __init__(self, reason: str, recipients: Optional[list] = None):
        super().__init__(
            message=f"Failed to send report mail, {reason}",
            error_code="mail_send_failed",
            details={"recipients": recipients or []}
        )


class HistoryWriteError(ReportError):
    """Raised when the history store rejects a record."""

    def __init__(self, reason: str, fallback: bool = False):
        prefix = "Failed to save fallback report history" if fallback else "Failed to save report history"
        super().__init__(
            message=f"{prefix}, {reason}",
            error_code="history_write_failed",
            details={"fallback": fallback}
        )
