"""Unit tests for report data models."""

import pytest
from pydantic import ValidationError

from watcher_report.models.report import (
    AuthConfig,
    AuthMode,
    CustomSelectors,
    HistoryRecord,
    ReportAction,
    ReportConfig,
    SnapshotType,
)


class TestAuthConfig:
    """Tests for AuthConfig validation."""

    def test_defaults(self):
        auth = AuthConfig()
        assert auth.enabled is False
        assert auth.mode == AuthMode.NONE

    def test_mode_from_name(self):
        assert AuthConfig(enabled=True, mode="xpack").mode == AuthMode.XPACK

    def test_mode_from_flag_map(self):
        auth = AuthConfig(
            enabled=True,
            mode={"searchguard": True, "xpack": False, "custom": False, "basic": False},
        )
        assert auth.mode == AuthMode.SEARCHGUARD

    def test_flag_map_without_selection(self):
        auth = AuthConfig(mode={"searchguard": False, "xpack": False})
        assert auth.mode == AuthMode.NONE

    def test_flag_map_with_two_modes_rejected(self):
        with pytest.raises(ValidationError, match="Only one authentication mode"):
            AuthConfig(enabled=True, mode={"searchguard": True, "xpack": True})

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValidationError):
            AuthConfig(enabled=True, mode="kerberos")

    def test_custom_mode_requires_selectors(self):
        with pytest.raises(ValidationError, match="Custom authentication requires"):
            AuthConfig(
                enabled=True,
                mode="custom",
                custom=CustomSelectors(username_input_selector="#user", password_input_selector="#pass"),
            )

    def test_custom_mode_with_selectors(self):
        auth = AuthConfig(
            enabled=True,
            mode="custom",
            custom={
                "username_input_selector": "#user",
                "password_input_selector": "#pass",
                "login_btn_selector": ".btn-lg",
            },
        )
        assert auth.custom.is_complete

    def test_custom_mode_not_checked_when_disabled(self):
        auth = AuthConfig(enabled=False, mode="custom")
        assert auth.custom is None


class TestReportConfig:
    """Tests for ReportConfig."""

    def test_defaults(self):
        config = ReportConfig()
        assert config.active is True
        assert config.timeout == 5000
        assert config.file.screenshot.width == 1280
        assert config.file.pdf.format == "A4"
        assert config.file.pdf.landscape is True

    def test_is_immutable(self):
        config = ReportConfig()
        with pytest.raises(ValidationError):
            config.timeout = 10


class TestReportAction:
    """Tests for ReportAction parsing."""

    def test_parse_host_payload(self):
        action = ReportAction(**{
            "snapshot": {
                "url": "http://dashboard/app",
                "type": "pdf",
                "name": "nightly",
                "res": "1920x1080",
                "params": {"username": "elastic", "delay": 3000},
            },
            "subject": "Report {{payload._id}}",
            "from": "watcher@example.com",
            "to": "a@example.com, b@example.com",
            "stateless": True,
        })

        assert action.snapshot.type == SnapshotType.PDF
        assert action.snapshot.params.delay == 3000
        assert action.from_ == "watcher@example.com"
        assert action.to == ["a@example.com", "b@example.com"]
        assert action.stateless is True

    def test_recipient_list(self):
        action = ReportAction(snapshot={"url": "http://x"}, to=["a@example.com"])
        assert action.to == ["a@example.com"]

    def test_defaults(self):
        action = ReportAction(snapshot={"url": "http://x"})
        assert action.snapshot.type == SnapshotType.PNG
        assert action.stateless is False
        assert action.to == []


class TestHistoryRecord:

    def test_fallback_record(self):
        record = HistoryRecord.fallback("Daily traffic", "report_daily", '{"error": "x"}')

        assert record.title == "Daily traffic"
        assert record.action_type == "report_daily"
        assert record.level is None
        assert record.report is False
        assert record.attachment is None

    def test_created_at_is_timezone_aware(self):
        record = HistoryRecord(title="t", action_type="report", message="m")

        assert record.created_at.tzinfo is not None
        assert record.created_at.utcoffset().total_seconds() == 0
