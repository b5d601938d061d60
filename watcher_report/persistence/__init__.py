"""Report history persistence.

Exposes the HistoryStore interface used by the orchestrator, the SQLAlchemy
backed implementation and its database configuration.
"""

from .database import Base, DatabaseConfig, DEFAULT_DATABASE_URL
from .history import HistoryStore, InMemoryHistoryStore, SQLHistoryStore
from .models import ReportHistory

__all__ = [
    "Base",
    "DatabaseConfig",
    "DEFAULT_DATABASE_URL",
    "HistoryStore",
    "InMemoryHistoryStore",
    "ReportHistory",
    "SQLHistoryStore",
]
