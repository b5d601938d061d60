"""SQLAlchemy ORM models for report history."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from .database import Base


class ReportHistory(Base):
    """One history entry per report run that is not stateless."""

    __tablename__ = "report_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # Watcher identification
    title: Mapped[str] = mapped_column(String(512), nullable=False, index=True)
    action_type: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    level: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    message: Mapped[str] = mapped_column(Text, nullable=False, default="")
    report: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    payload_json: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        JSON,
        nullable=True,
        comment="Payload snapshot stored with the entry"
    )
    attachment_json: Mapped[Optional[List[Dict[str, Any]]]] = mapped_column(
        JSON,
        nullable=True,
        comment="Mail attachment parts of a report"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=func.now(),
        index=True
    )

    __table_args__ = (
        Index("ix_report_history_title_created", "title", "created_at"),
    )

    @property
    def is_fallback(self) -> bool:
        """Fallback entries carry no level and are not flagged as reports."""
        return not self.report and self.level is None

    def __repr__(self) -> str:
        return f"<ReportHistory(id={self.id}, title='{self.title}', report={self.report})>"
