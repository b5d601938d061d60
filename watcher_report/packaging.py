"""Report file naming and mail attachment construction.

Pure functions: no I/O, no logging.
"""

import base64
from datetime import datetime
from typing import List, Optional, Union
from uuid import uuid4

from .models.report import AttachmentPart, CapturedArtifact, SnapshotType


REPORT_CONTENT_ID = "my-report"

IMAGE_BODY = "<html><img src='cid:my-report' width='100%'></html>"
DOCUMENT_BODY = "<html><p>Find PDF report in the attachment.</p></html>"


def _timestamp(now: datetime) -> str:
    # DD-MM-YYYY-h-m-s with a 12-hour, unpadded hour and unpadded minute/second
    hour = now.hour % 12 or 12
    return f"{now:%d-%m-%Y}-{hour}-{now.minute}-{now.second}"


def derive_filename(
    requested_name: Optional[str],
    snapshot_type: Union[SnapshotType, str] = SnapshotType.PNG,
    now: Optional[datetime] = None
) -> str:
    """Return the attachment file name for a report.

    Args:
        requested_name: Name chosen by the action, without extension
        snapshot_type: Artifact kind, used as extension
        now: Clock override for the synthesized timestamp

    Returns:
        ``<requested_name>.<ext>`` or, when no name is given,
        ``report-<uuid>-<DD-MM-YYYY-h-m-s>.<ext>``
    """
    extension = SnapshotType(snapshot_type).value
    if not requested_name:
        return f"report-{uuid4()}-{_timestamp(now or datetime.now())}.{extension}"
    return f"{requested_name}.{extension}"


def mime_type_for(snapshot_type: Union[SnapshotType, str]) -> str:
    snapshot_type = SnapshotType(snapshot_type)
    if snapshot_type.is_document:
        return "application/pdf"
    return f"image/{snapshot_type.value}"


def build_attachment(
    filename: str,
    artifact: CapturedArtifact,
    snapshot_type: Union[SnapshotType, str, None] = None
) -> List[AttachmentPart]:
    """Build the two-part mail attachment for a captured artifact.

    The first part is an inline HTML alternative referencing the binary by
    ``cid:my-report``; the second is the base64 encoded artifact carrying
    the matching ``Content-ID``.
    """
    snapshot_type = SnapshotType(snapshot_type or artifact.snapshot_type)
    body = DOCUMENT_BODY if snapshot_type.is_document else IMAGE_BODY

    return [
        AttachmentPart(
            data=body,
            alternative=True,
        ),
        AttachmentPart(
            data=base64.b64encode(artifact.data).decode('ascii'),
            type=mime_type_for(snapshot_type),
            name=filename,
            encoded=True,
            headers={'Content-ID': f'<{REPORT_CONTENT_ID}>'},
        ),
    ]
