"""Settings loading and per-action config merging."""

from .loader import (
    ConfigLoadError,
    DatabaseSettings,
    ReportSettings,
    load_report_settings,
    merge_action_overrides,
    parse_resolution,
)

__all__ = [
    "ConfigLoadError",
    "DatabaseSettings",
    "ReportSettings",
    "load_report_settings",
    "merge_action_overrides",
    "parse_resolution",
]
