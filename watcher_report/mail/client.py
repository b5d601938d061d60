"""Mail transport for report delivery.

This module provides the MailClient interface consumed by the report
orchestrator and an SMTP implementation that renders a report attachment
into a ``multipart/related`` message so the inline HTML part can reference
the captured image by Content-ID.
"""

import asyncio
import base64
import logging
import smtplib
from abc import ABC, abstractmethod
from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formatdate, make_msgid
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..errors import MailSendError
from ..models.report import AttachmentPart


logger = logging.getLogger(__name__)


class SMTPConfig(BaseModel):
    """SMTP server configuration."""

    # Server settings
    host: str = Field(description="SMTP server hostname")
    port: int = Field(
        default=587,
        description="SMTP server port (587 for TLS, 465 for SSL, 25 for plain)"
    )

    # Security settings
    use_tls: bool = Field(
        default=True,
        description="Use TLS encryption (STARTTLS)"
    )
    use_ssl: bool = Field(
        default=False,
        description="Use SSL encryption (implicit TLS)"
    )

    # Authentication
    username: Optional[str] = Field(
        default=None,
        description="SMTP authentication username"
    )
    password: Optional[str] = Field(
        default=None,
        description="SMTP authentication password"
    )

    timeout_seconds: float = Field(
        default=30.0,
        description="Connection timeout in seconds"
    )


class MailMessage(BaseModel):
    """Composed report mail."""

    model_config = {"populate_by_name": True}

    text: str
    from_: Optional[str] = Field(default=None, alias="from")
    to: List[str] = Field(default_factory=list)
    subject: str = ""
    attachment: List[AttachmentPart] = Field(default_factory=list)


class MailClient(ABC):
    """Interface of the mail transport used by the orchestrator."""

    @abstractmethod
    async def send(self, message: MailMessage) -> None:
        """Deliver a message.

        Raises:
            MailSendError: If the transport rejects the message
        """
        pass


class SMTPMailClient(MailClient):
    """Mail client sending through an SMTP relay."""

    def __init__(self, config: SMTPConfig, default_sender: Optional[str] = None):
        self.config = config
        self.default_sender = default_sender or config.username

    async def send(self, message: MailMessage) -> None:
        if not message.to:
            raise MailSendError("no recipients")

        msg = self.build_mime_message(message)
        logger.debug(f"Sending report mail '{message.subject}' to {', '.join(message.to)}")

        try:
            await asyncio.to_thread(self._deliver, msg, message.to)
        except smtplib.SMTPAuthenticationError as e:
            raise MailSendError(f"SMTP authentication failed: {e}", message.to) from e
        except smtplib.SMTPRecipientsRefused as e:
            raise MailSendError(f"Recipients rejected: {e}", message.to) from e
        except smtplib.SMTPException as e:
            raise MailSendError(f"SMTP error: {e}", message.to) from e
        except OSError as e:
            raise MailSendError(f"Connection error: {e}", message.to) from e

        logger.info(f"Report mail sent to {len(message.to)} recipient(s)")

    def build_mime_message(self, message: MailMessage) -> MIMEMultipart:
        """Create the MIME tree for a report mail.

        Layout::

            multipart/related
              multipart/alternative
                text/plain   (rendered body)
                text/html    (attachment parts flagged ``alternative``)
              <binary parts> (base64, Content-ID preserved)
        """
        msg = MIMEMultipart('related')
        msg['From'] = message.from_ or self.default_sender or ''
        msg['To'] = ', '.join(message.to)
        msg['Subject'] = message.subject
        msg['Date'] = formatdate(localtime=True)
        msg['Message-ID'] = make_msgid()
        msg['X-Mailer'] = 'watcher-report/1.0'

        body = MIMEMultipart('alternative')
        body.attach(MIMEText(message.text, 'plain', 'utf-8'))
        for part in message.attachment:
            if part.alternative:
                body.attach(MIMEText(part.data, 'html', 'utf-8'))
        msg.attach(body)

        for part in message.attachment:
            if not part.alternative:
                msg.attach(self._build_binary_part(part))

        return msg

    def _build_binary_part(self, part: AttachmentPart) -> MIMEBase:
        maintype, _, subtype = (part.type or 'application/octet-stream').partition('/')
        mime_part = MIMEBase(maintype, subtype or 'octet-stream', name=part.name or 'report')

        # Re-encode so the body is wrapped at 76 columns
        if part.encoded:
            mime_part.set_payload(base64.b64decode(part.data))
        else:
            mime_part.set_payload(part.data.encode('utf-8'))
        encoders.encode_base64(mime_part)

        mime_part.add_header('Content-Disposition', 'attachment', filename=part.name or 'report')
        for header, value in part.headers.items():
            mime_part[header] = value
        return mime_part

    def _deliver(self, msg: MIMEMultipart, recipients: List[str]) -> None:
        smtp_class = smtplib.SMTP_SSL if self.config.use_ssl else smtplib.SMTP

        with smtp_class(
            self.config.host,
            self.config.port,
            timeout=self.config.timeout_seconds
        ) as server:
            if self.config.use_tls and not self.config.use_ssl:
                server.starttls()

            if self.config.username and self.config.password:
                server.login(self.config.username, self.config.password)

            server.send_message(msg, to_addrs=recipients)

    def describe(self) -> Dict[str, Any]:
        """Connection summary safe for logging."""
        return {
            "smtp_host": self.config.host,
            "smtp_port": self.config.port,
            "auth_required": bool(self.config.username),
            "tls_enabled": self.config.use_tls,
            "ssl_enabled": self.config.use_ssl,
        }
