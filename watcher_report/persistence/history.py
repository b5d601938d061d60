"""History store backends for report outcomes.

The orchestrator only needs ``write(record) -> id``; listing helpers exist
for the CLI and for inspection.
"""

import itertools
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from sqlalchemy import desc, select

from ..errors import HistoryWriteError
from ..models.report import HistoryRecord
from .database import DatabaseConfig
from .models import ReportHistory

logger = logging.getLogger(__name__)


class HistoryStore(ABC):
    """Abstract base class for history storage backends."""

    @abstractmethod
    async def write(self, record: HistoryRecord) -> int:
        """Persist a record and return its identifier.

        Raises:
            HistoryWriteError: If the record cannot be stored
        """
        pass

    @abstractmethod
    async def list_recent(self, limit: int = 20, title: Optional[str] = None) -> List[HistoryRecord]:
        """Return the newest records, optionally for one watcher title."""
        pass


class SQLHistoryStore(HistoryStore):
    """History store backed by an SQLAlchemy async database."""

    def __init__(self, db_config: DatabaseConfig):
        self.db_config = db_config

    async def write(self, record: HistoryRecord) -> int:
        row = ReportHistory(
            title=record.title,
            action_type=record.action_type,
            level=record.level,
            message=record.message,
            report=record.report,
            payload_json=record.payload or None,
            attachment_json=(
                [part.model_dump() for part in record.attachment]
                if record.attachment else None
            ),
            created_at=record.created_at,
        )

        try:
            async with self.db_config.session() as session:
                session.add(row)
                await session.flush()
                row_id = row.id
        except Exception as e:
            raise HistoryWriteError(str(e)) from e

        logger.debug(f"Stored history entry {row_id} for '{record.title}'")
        return row_id

    async def list_recent(self, limit: int = 20, title: Optional[str] = None) -> List[HistoryRecord]:
        query = select(ReportHistory).order_by(desc(ReportHistory.created_at), desc(ReportHistory.id))
        if title:
            query = query.where(ReportHistory.title == title)
        query = query.limit(limit)

        async with self.db_config.session() as session:
            result = await session.execute(query)
            rows = result.scalars().all()

        return [
            HistoryRecord(
                title=row.title,
                action_type=row.action_type,
                level=row.level,
                message=row.message,
                report=row.report,
                payload=row.payload_json or {},
                attachment=row.attachment_json,
                created_at=row.created_at,
            )
            for row in rows
        ]


class InMemoryHistoryStore(HistoryStore):
    """Process-local history store, for embedding and tests."""

    def __init__(self):
        self.records: List[HistoryRecord] = []
        self._ids = itertools.count(1)

    async def write(self, record: HistoryRecord) -> int:
        self.records.append(record)
        return next(self._ids)

    async def list_recent(self, limit: int = 20, title: Optional[str] = None) -> List[HistoryRecord]:
        records = [r for r in self.records if title is None or r.title == title]
        return list(reversed(records))[:limit]
