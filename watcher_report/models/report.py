"""Pydantic models for report settings, actions, artifacts and history.

This module defines the data exchanged between the report orchestrator,
the browser session, the artifact packager, the mail client and the
history store.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


class SnapshotType(str, Enum):
    """Output artifact kinds."""
    PNG = "png"
    JPEG = "jpeg"
    PDF = "pdf"

    @property
    def is_document(self) -> bool:
        return self is SnapshotType.PDF


class AuthMode(str, Enum):
    """Login strategy selected for a report run."""
    NONE = "none"
    SEARCHGUARD = "searchguard"
    XPACK = "xpack"
    CUSTOM = "custom"
    BASIC = "basic"


class CustomSelectors(BaseModel):
    """CSS selectors of a custom login form."""

    model_config = ConfigDict(frozen=True)

    username_input_selector: Optional[str] = Field(
        default=None,
        description="Selector of the username input"
    )
    password_input_selector: Optional[str] = Field(
        default=None,
        description="Selector of the password input"
    )
    login_btn_selector: Optional[str] = Field(
        default=None,
        description="Selector of the submit button"
    )

    @property
    def is_complete(self) -> bool:
        return all([
            self.username_input_selector,
            self.password_input_selector,
            self.login_btn_selector,
        ])


class AuthConfig(BaseModel):
    """Authentication settings for the target page."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=False, description="Whether to log in before capture")
    mode: AuthMode = Field(default=AuthMode.NONE, description="Login strategy")
    username: Optional[str] = Field(default=None, description="Login user")
    password: Optional[str] = Field(default=None, description="Login password")
    custom: Optional[CustomSelectors] = Field(
        default=None,
        description="Form selectors, used only in custom mode"
    )

    @field_validator('mode', mode='before')
    @classmethod
    def normalize_mode(cls, v):
        """Accept the legacy ``{searchguard: bool, xpack: bool, ...}`` flag map."""
        if isinstance(v, dict):
            selected = [name for name, flag in v.items() if flag]
            if len(selected) > 1:
                raise ValueError(f"Only one authentication mode may be enabled, got: {selected}")
            return selected[0] if selected else AuthMode.NONE
        if v is None:
            return AuthMode.NONE
        return v

    @model_validator(mode='after')
    def validate_custom_selectors(self):
        if self.enabled and self.mode == AuthMode.CUSTOM:
            if not self.custom or not self.custom.is_complete:
                raise ValueError(
                    "Custom authentication requires username_input_selector, "
                    "password_input_selector and login_btn_selector"
                )
        return self


class ScreenshotSettings(BaseModel):
    """Viewport used for raster captures."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(default=1280, gt=0)
    height: int = Field(default=900, gt=0)


class PdfSettings(BaseModel):
    """Page layout used for document captures."""

    model_config = ConfigDict(frozen=True)

    format: str = Field(default="A4", description="Paper format")
    landscape: bool = Field(default=True, description="Landscape orientation")


class FileSettings(BaseModel):
    """Artifact settings."""

    model_config = ConfigDict(frozen=True)

    screenshot: ScreenshotSettings = Field(default_factory=ScreenshotSettings)
    pdf: PdfSettings = Field(default_factory=PdfSettings)


class ReportConfig(BaseModel):
    """Resolved settings for a single report run.

    Instances are immutable; per-action overrides produce a new instance
    (see ``config.loader.merge_action_overrides``).
    """

    model_config = ConfigDict(frozen=True)

    active: bool = Field(default=True, description="Feature flag for report actions")
    timeout: int = Field(
        default=5000,
        ge=0,
        description="Settle delay in milliseconds"
    )
    executable_path: Optional[str] = Field(
        default=None,
        description="Browser binary; Playwright's bundled chromium when unset"
    )
    authentication: AuthConfig = Field(default_factory=AuthConfig)
    file: FileSettings = Field(default_factory=FileSettings)


class SnapshotParams(BaseModel):
    """Per-action overrides for credentials, timing and login selectors."""

    username: Optional[str] = None
    password: Optional[str] = None
    delay: Optional[int] = Field(default=None, ge=0, description="Timeout override in milliseconds")
    username_input_selector: Optional[str] = None
    password_input_selector: Optional[str] = None
    login_btn_selector: Optional[str] = None


class SnapshotSpec(BaseModel):
    """What to capture."""

    url: str = Field(default="", description="Target page URL")
    type: SnapshotType = Field(default=SnapshotType.PNG, description="Artifact kind")
    name: Optional[str] = Field(default=None, description="Output file name without extension")
    res: Optional[str] = Field(default=None, description="Viewport resolution as 'WxH'")
    params: SnapshotParams = Field(default_factory=SnapshotParams)


class ReportAction(BaseModel):
    """Report action as supplied by the watcher."""

    model_config = ConfigDict(populate_by_name=True)

    snapshot: SnapshotSpec
    subject: Optional[str] = None
    body: Optional[str] = None
    priority: Optional[str] = None
    from_: Optional[str] = Field(default=None, alias="from")
    to: List[str] = Field(default_factory=list)
    stateless: bool = False

    @field_validator('to', mode='before')
    @classmethod
    def split_recipients(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [addr.strip() for addr in v.split(',') if addr.strip()]
        return v


class WatcherTask(BaseModel):
    """Watcher that fired the action."""

    id: str
    title: str = ""


class CapturedArtifact(BaseModel):
    """Raw bytes produced by a browser capture."""

    data: bytes
    mime_type: str
    snapshot_type: SnapshotType


class AttachmentPart(BaseModel):
    """One part of a report mail attachment."""

    data: str
    alternative: bool = False
    type: Optional[str] = None
    name: Optional[str] = None
    encoded: bool = False
    headers: Dict[str, str] = Field(default_factory=dict)

    @property
    def content_id(self) -> Optional[str]:
        return self.headers.get('Content-ID')


class HistoryRecord(BaseModel):
    """Entry written to the report history store."""

    title: str
    action_type: str
    message: str
    level: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)
    attachment: Optional[List[AttachmentPart]] = None
    report: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def fallback(cls, title: str, action_type: str, message: str) -> "HistoryRecord":
        """Reduced record written when the primary write fails."""
        return cls(title=title, action_type=action_type, message=message)


class ReportResult(BaseModel):
    """Outcome of a successful report run."""

    id: Optional[Union[int, str]] = None
    message: Optional[str] = None
