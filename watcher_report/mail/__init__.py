"""Mail transport for report delivery."""

from .client import MailClient, MailMessage, SMTPConfig, SMTPMailClient

__all__ = ["MailClient", "MailMessage", "SMTPConfig", "SMTPMailClient"]
