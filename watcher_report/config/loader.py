"""Settings loader with YAML support, environment overrides and per-action merge.

Process-wide settings are read once from ``config/report.yaml``; each report
run then derives its own immutable ``ReportConfig`` by overlaying the
action's parameters with ``merge_action_overrides``.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from ..errors import ReportConfigurationError
from ..mail.client import SMTPConfig
from ..models.report import (
    AuthMode,
    CustomSelectors,
    ReportAction,
    ReportConfig,
)


logger = logging.getLogger(__name__)

ENVIRONMENT_VARIABLE = "WATCHER_REPORT_ENV"


class ConfigLoadError(Exception):
    """Exception raised when configuration loading fails."""
    pass


class DatabaseSettings(BaseModel):
    """History database settings."""

    url: Optional[str] = Field(
        default=None,
        description="SQLAlchemy async URL; falls back to WATCHER_REPORT_DB_URL"
    )
    echo: bool = Field(default=False, description="Enable SQLAlchemy logging")


class ReportSettings(BaseModel):
    """Root settings document."""

    app_name: str = Field(default="Sentinl", description="Product name used in default subjects")
    report: ReportConfig = Field(default_factory=ReportConfig)
    smtp: Optional[SMTPConfig] = Field(default=None, description="Mail transport settings")
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)


SETTINGS_SECTIONS: Dict[str, type] = {
    "report": ReportConfig,
    "smtp": SMTPConfig,
    "database": DatabaseSettings,
}


def load_report_settings(
    config_path: Optional[Union[str, Path]] = None,
    environment: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None
) -> ReportSettings:
    """Load ReportSettings from a YAML file with environment overrides.

    The ``environments.<name>`` section is deep-merged over the base
    document, then ``overrides``. Each of ``report``, ``smtp`` and
    ``database`` is validated on its own so errors name the offending
    section and field.

    Args:
        config_path: Path to YAML config file. If None, uses config/report.yaml.
        environment: Environment name for override selection. If None, uses
            WATCHER_REPORT_ENV, then "production".
        overrides: Additional configuration overrides to apply.

    Returns:
        Validated ReportSettings instance.

    Raises:
        ConfigLoadError: If the file is missing, unreadable or invalid.

    Example:
        >>> settings = load_report_settings("config/report.yaml", environment="development")
        >>> settings.report.timeout
        2000
    """
    if config_path is None:
        config_path = Path(__file__).parents[2] / "config" / "report.yaml"
    config_path = Path(config_path)

    document = _read_settings_document(config_path)
    environments = document.pop("environments", None) or {}
    environment = environment or os.getenv(ENVIRONMENT_VARIABLE, "production")

    if environment in environments:
        document = _deep_merge(document, environments[environment] or {})
        logger.info(f"Applied '{environment}' settings from {config_path}")
    elif environments:
        logger.debug(f"No '{environment}' section in {config_path}, using base settings")

    if overrides:
        document = _deep_merge(document, overrides)

    return _validate_settings(document, config_path)


def _read_settings_document(config_path: Path) -> Dict[str, Any]:
    if not config_path.exists():
        raise ConfigLoadError(f"Config file not found: {config_path}")

    try:
        with open(config_path, 'r') as f:
            document = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Failed to parse YAML config {config_path}: {e}")
    except OSError as e:
        raise ConfigLoadError(f"Failed to read config file {config_path}: {e}")

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ConfigLoadError(f"Config file {config_path} must contain a YAML dictionary")
    return document


def _validate_settings(document: Dict[str, Any], config_path: Path) -> ReportSettings:
    for section, model in SETTINGS_SECTIONS.items():
        value = document.get(section)
        if value is None:
            continue
        try:
            model.model_validate(value)
        except ValidationError as e:
            raise ConfigLoadError(
                f"Invalid '{section}' section in {config_path}: {_describe_errors(e)}"
            )

    try:
        return ReportSettings(**document)
    except ValidationError as e:
        raise ConfigLoadError(f"Invalid settings in {config_path}: {_describe_errors(e)}")


def _describe_errors(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(loc) for loc in err['loc']) or '<root>'}: {err['msg']}"
        for err in error.errors()
    )


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def parse_resolution(resolution: str) -> Tuple[int, int]:
    """Parse a ``"WxH"`` string into a (width, height) tuple.

    Raises:
        ReportConfigurationError: If the string is not two positive integers.
    """
    parts = resolution.lower().split('x')
    try:
        width, height = (int(part.strip()) for part in parts)
    except ValueError:
        raise ReportConfigurationError(
            f"Invalid resolution '{resolution}', expected 'WIDTHxHEIGHT'",
            field="snapshot.res"
        )
    if width <= 0 or height <= 0:
        raise ReportConfigurationError(
            f"Resolution must be positive, got '{resolution}'",
            field="snapshot.res"
        )
    return width, height


def merge_action_overrides(config: ReportConfig, action: ReportAction) -> ReportConfig:
    """Overlay the action's snapshot parameters onto the base report config.

    The base config is never modified. Credentials and the timeout fall back
    to the configured values when the action leaves them out; in custom mode
    each login selector falls back on its own.

    Args:
        config: Process-wide report configuration
        action: Action supplying per-run overrides

    Returns:
        New ReportConfig for this run
    """
    params = action.snapshot.params
    auth = config.authentication

    auth_update: Dict[str, Any] = {
        'username': params.username or auth.username,
        'password': params.password or auth.password,
    }

    if auth.mode == AuthMode.CUSTOM:
        current = auth.custom or CustomSelectors()
        auth_update['custom'] = CustomSelectors(
            username_input_selector=params.username_input_selector or current.username_input_selector,
            password_input_selector=params.password_input_selector or current.password_input_selector,
            login_btn_selector=params.login_btn_selector or current.login_btn_selector,
        )

    file_settings = config.file
    if action.snapshot.res:
        width, height = parse_resolution(action.snapshot.res)
        file_settings = file_settings.model_copy(update={
            'screenshot': file_settings.screenshot.model_copy(update={'width': width, 'height': height})
        })

    return config.model_copy(update={
        'timeout': params.delay or config.timeout,
        'authentication': auth.model_copy(update=auth_update),
        'file': file_settings,
    })
