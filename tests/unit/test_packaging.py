"""Unit tests for report file naming and attachment construction."""

import base64
import re
from datetime import datetime

import pytest

from watcher_report.models.report import CapturedArtifact, SnapshotType
from watcher_report.packaging import (
    build_attachment,
    derive_filename,
    mime_type_for,
)


FILENAME_PATTERN = re.compile(
    r"^report-[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"
    r"-\d{2}-\d{2}-\d{4}-\d{1,2}-\d{1,2}-\d{1,2}\.png$"
)


class TestDeriveFilename:
    """Tests for derive_filename."""

    def test_synthesized_name_format(self):
        assert FILENAME_PATTERN.match(derive_filename(None, "png"))

    def test_synthesized_names_are_unique(self):
        assert derive_filename(None, "png") != derive_filename(None, "png")

    def test_empty_name_is_synthesized(self):
        assert derive_filename("", SnapshotType.PDF).startswith("report-")

    def test_requested_name(self):
        assert derive_filename("nightly", "pdf") == "nightly.pdf"

    def test_timestamp_uses_unpadded_12_hour_clock(self):
        filename = derive_filename(None, "jpeg", now=datetime(2024, 3, 5, 14, 7, 9))
        assert filename.endswith("-05-03-2024-2-7-9.jpeg")

    def test_midnight_is_twelve(self):
        filename = derive_filename(None, "png", now=datetime(2024, 12, 31, 0, 0, 0))
        assert filename.endswith("-31-12-2024-12-0-0.png")

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            derive_filename("nightly", "gif")


class TestBuildAttachment:
    """Tests for build_attachment."""

    def _artifact(self, data: bytes, snapshot_type: SnapshotType) -> CapturedArtifact:
        return CapturedArtifact(
            data=data,
            mime_type=mime_type_for(snapshot_type),
            snapshot_type=snapshot_type,
        )

    def test_pdf_attachment(self):
        data = b"%PDF-1.4 document"
        parts = build_attachment("nightly.pdf", self._artifact(data, SnapshotType.PDF), "pdf")

        assert len(parts) == 2
        inline, binary = parts
        assert inline.alternative is True
        assert "attachment" in inline.data
        assert "<img" not in inline.data
        assert binary.type == "application/pdf"
        assert binary.name == "nightly.pdf"
        assert base64.b64decode(binary.data) == data

    @pytest.mark.parametrize("snapshot_type", [SnapshotType.PNG, SnapshotType.JPEG])
    def test_image_attachment(self, snapshot_type):
        data = b"\x89PNG\r\n\x1a\n\x00\x01binary"
        parts = build_attachment("shot", self._artifact(data, snapshot_type), snapshot_type)

        inline, binary = parts
        assert "<img src='cid:my-report'" in inline.data
        assert binary.type == f"image/{snapshot_type.value}"
        assert binary.encoded is True
        assert base64.b64decode(binary.data) == data

    def test_content_id_matches_inline_reference(self):
        parts = build_attachment("shot.png", self._artifact(b"img", SnapshotType.PNG))

        inline, binary = parts
        assert binary.headers == {"Content-ID": "<my-report>"}
        assert f"cid:{binary.content_id.strip('<>')}" in inline.data

    def test_snapshot_type_defaults_to_artifact_type(self):
        parts = build_attachment("doc.pdf", self._artifact(b"%PDF", SnapshotType.PDF))
        assert parts[1].type == "application/pdf"
