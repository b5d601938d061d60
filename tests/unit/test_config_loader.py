"""Unit tests for settings loading and per-action config merging."""

import pytest
import yaml

from watcher_report.config.loader import (
    ConfigLoadError,
    load_report_settings,
    merge_action_overrides,
    parse_resolution,
)
from watcher_report.errors import ReportConfigurationError
from watcher_report.models.report import (
    AuthConfig,
    AuthMode,
    CustomSelectors,
    ReportAction,
    ReportConfig,
)


SETTINGS_DOCUMENT = {
    "app_name": "Sentinl",
    "report": {
        "active": True,
        "timeout": 5000,
        "authentication": {
            "enabled": True,
            "mode": {"searchguard": False, "xpack": True, "custom": False, "basic": False},
            "username": "elastic",
            "password": "changeme",
        },
        "file": {"screenshot": {"width": 1280, "height": 900}},
    },
    "smtp": {"host": "mail.example.com", "port": 25, "use_tls": False},
    "environments": {
        "development": {"report": {"timeout": 1000}},
    },
}


@pytest.fixture
def settings_file(tmp_path):
    path = tmp_path / "report.yaml"
    path.write_text(yaml.safe_dump(SETTINGS_DOCUMENT))
    return path


class TestLoadReportSettings:
    """Tests for load_report_settings."""

    def test_load_production(self, settings_file):
        settings = load_report_settings(settings_file, environment="production")

        assert settings.app_name == "Sentinl"
        assert settings.report.timeout == 5000
        assert settings.report.authentication.mode == AuthMode.XPACK
        assert settings.smtp.host == "mail.example.com"

    def test_environment_override(self, settings_file):
        settings = load_report_settings(settings_file, environment="development")

        assert settings.report.timeout == 1000
        # Untouched keys survive the deep merge
        assert settings.report.authentication.username == "elastic"

    def test_environment_from_variable(self, settings_file, monkeypatch):
        monkeypatch.setenv("WATCHER_REPORT_ENV", "development")
        assert load_report_settings(settings_file).report.timeout == 1000

    def test_explicit_overrides(self, settings_file):
        settings = load_report_settings(
            settings_file,
            environment="production",
            overrides={"report": {"active": False}},
        )
        assert settings.report.active is False
        assert settings.report.timeout == 5000

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigLoadError, match="not found"):
            load_report_settings(tmp_path / "missing.yaml")

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- one\n- two\n")
        with pytest.raises(ConfigLoadError, match="dictionary"):
            load_report_settings(path)

    def test_invalid_report_section_names_field(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.safe_dump({"report": {"authentication": {"mode": {"xpack": True, "basic": True}}}}))

        with pytest.raises(ConfigLoadError) as exc_info:
            load_report_settings(path)

        message = str(exc_info.value)
        assert "Invalid 'report' section" in message
        assert "authentication.mode" in message

    def test_invalid_smtp_section(self, tmp_path):
        path = tmp_path / "bad_smtp.yaml"
        path.write_text(yaml.safe_dump({"smtp": {"port": 25}}))

        with pytest.raises(ConfigLoadError, match=r"Invalid 'smtp' section.*host"):
            load_report_settings(path)

    def test_invalid_section_from_environment(self, tmp_path):
        document = dict(SETTINGS_DOCUMENT, environments={"staging": {"report": {"timeout": -1}}})
        path = tmp_path / "staging.yaml"
        path.write_text(yaml.safe_dump(document))

        with pytest.raises(ConfigLoadError, match=r"Invalid 'report' section.*timeout"):
            load_report_settings(path, environment="staging")

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        settings = load_report_settings(path)

        assert settings.report.timeout == 5000
        assert settings.smtp is None

    def test_environments_section_not_kept(self, settings_file):
        settings = load_report_settings(settings_file, environment="development")
        assert not hasattr(settings, "environments")


class TestParseResolution:

    def test_valid(self):
        assert parse_resolution("800x600") == (800, 600)
        assert parse_resolution("1920X1080") == (1920, 1080)

    @pytest.mark.parametrize("value", ["800", "axb", "800x600x2", "0x600", ""])
    def test_invalid(self, value):
        with pytest.raises(ReportConfigurationError):
            parse_resolution(value)


class TestMergeActionOverrides:
    """Tests for merge_action_overrides."""

    @pytest.fixture
    def custom_config(self):
        return ReportConfig(
            timeout=5000,
            authentication=AuthConfig(
                enabled=True,
                mode=AuthMode.CUSTOM,
                username="config-user",
                password="config-pass",
                custom=CustomSelectors(
                    username_input_selector="#user",
                    password_input_selector="#pass",
                    login_btn_selector=".btn-lg",
                ),
            ),
        )

    def test_resolution_and_timeout(self, report_config):
        action = ReportAction(snapshot={"url": "http://x", "res": "800x600", "params": {"delay": 2500}})

        merged = merge_action_overrides(report_config, action)

        assert merged.file.screenshot.width == 800
        assert merged.file.screenshot.height == 600
        assert merged.timeout == 2500

    def test_base_config_unchanged(self, report_config):
        action = ReportAction(snapshot={"url": "http://x", "res": "800x600", "params": {"delay": 2500}})

        merge_action_overrides(report_config, action)

        assert report_config.file.screenshot.width == 1280
        assert report_config.timeout == 5000

    def test_missing_overrides_keep_config(self, report_config):
        merged = merge_action_overrides(report_config, ReportAction(snapshot={"url": "http://x"}))

        assert merged.timeout == report_config.timeout
        assert merged.file == report_config.file

    def test_credentials_override(self, custom_config):
        action = ReportAction(snapshot={
            "url": "http://x",
            "params": {"username": "action-user", "password": "action-pass"},
        })

        merged = merge_action_overrides(custom_config, action)

        assert merged.authentication.username == "action-user"
        assert merged.authentication.password == "action-pass"

    def test_credentials_fall_back_to_config(self, custom_config):
        merged = merge_action_overrides(custom_config, ReportAction(snapshot={"url": "http://x"}))

        assert merged.authentication.username == "config-user"
        assert merged.authentication.password == "config-pass"

    def test_partial_selector_override(self, custom_config):
        action = ReportAction(snapshot={
            "url": "http://x",
            "params": {"login_btn_selector": "#submit"},
        })

        merged = merge_action_overrides(custom_config, action)

        selectors = merged.authentication.custom
        assert selectors.username_input_selector == "#user"
        assert selectors.password_input_selector == "#pass"
        assert selectors.login_btn_selector == "#submit"
        assert custom_config.authentication.custom.login_btn_selector == ".btn-lg"

    def test_selectors_ignored_outside_custom_mode(self, report_config):
        action = ReportAction(snapshot={
            "url": "http://x",
            "params": {"login_btn_selector": "#submit"},
        })

        merged = merge_action_overrides(report_config, action)

        assert merged.authentication.custom is None

    def test_invalid_resolution(self, report_config):
        action = ReportAction(snapshot={"url": "http://x", "res": "wide"})
        with pytest.raises(ReportConfigurationError):
            merge_action_overrides(report_config, action)
