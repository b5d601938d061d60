"""Data models for report runs."""

from .report import (
    AttachmentPart,
    AuthConfig,
    AuthMode,
    CapturedArtifact,
    CustomSelectors,
    FileSettings,
    HistoryRecord,
    PdfSettings,
    ReportAction,
    ReportConfig,
    ReportResult,
    ScreenshotSettings,
    SnapshotParams,
    SnapshotSpec,
    SnapshotType,
    WatcherTask,
)

__all__ = [
    "AttachmentPart",
    "AuthConfig",
    "AuthMode",
    "CapturedArtifact",
    "CustomSelectors",
    "FileSettings",
    "HistoryRecord",
    "PdfSettings",
    "ReportAction",
    "ReportConfig",
    "ReportResult",
    "ScreenshotSettings",
    "SnapshotParams",
    "SnapshotSpec",
    "SnapshotType",
    "WatcherTask",
]
