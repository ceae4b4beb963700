"""
Storage backends for API chat history.

Each successful chat request appends exactly one record; records are never
deduplicated or updated.
"""

import asyncio
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ...shared import get_logger, get_database, get_settings
from ...shared.models import BaseModel, TimestampMixin


class HistoryRecord(BaseModel, TimestampMixin):
    """One persisted (human message, bot response) exchange."""

    record_id: str = Field(default_factory=lambda: f"hist_{uuid.uuid4().hex[:12]}")
    api_key: Optional[str] = Field(default=None, description="Caller API key")
    bot_id: str = Field(..., description="Internal bot identifier")
    human: str = Field(..., description="Incoming message as received")
    bot: str = Field(..., description="Generated answer")


class HistoryRepository(ABC):
    """Abstract append-only history store."""

    @abstractmethod
    def _append(self, record: HistoryRecord) -> None:
        """Durably store one record."""
        pass

    @abstractmethod
    def list_for_bot(self, bot_id: str, limit: int = 100) -> List[HistoryRecord]:
        """Most recent records for a bot, oldest first."""
        pass

    async def append_history(self, api_key: Optional[str], bot_id: str, human: str, bot: str) -> HistoryRecord:
        """
        Append one exchange.

        Args:
            api_key: Key the caller authenticated with
            bot_id: Internal bot identifier
            human: Incoming message
            bot: Generated answer

        Returns:
            The stored record
        """
        record = HistoryRecord(api_key=api_key, bot_id=bot_id, human=human, bot=bot)
        await asyncio.to_thread(self._append, record)
        return record


class InMemoryHistoryRepository(HistoryRepository):
    """In-memory history for development and testing."""

    def __init__(self):
        self.logger = get_logger(__name__)
        self._lock = threading.RLock()
        self._records: List[HistoryRecord] = []

    def _append(self, record: HistoryRecord) -> None:
        with self._lock:
            self._records.append(record)
            self.logger.debug(f"Stored history record {record.record_id} for bot {record.bot_id}")

    def list_for_bot(self, bot_id: str, limit: int = 100) -> List[HistoryRecord]:
        with self._lock:
            records = [r for r in self._records if r.bot_id == bot_id]
            return records[-limit:]

    @property
    def records(self) -> List[HistoryRecord]:
        with self._lock:
            return list(self._records)


class PostgresHistoryRepository(HistoryRepository):
    """History backed by the `bot_api_history` table."""

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS bot_api_history (
            id TEXT PRIMARY KEY,
            api_key TEXT,
            bot_id TEXT NOT NULL,
            human TEXT NOT NULL,
            bot TEXT NOT NULL,
            created_at TIMESTAMP NOT NULL
        );
        CREATE INDEX IF NOT EXISTS bot_api_history_bot_id_idx ON bot_api_history (bot_id);
    """

    def __init__(self, database=None):
        self.logger = get_logger(__name__)
        self.db = database or get_database()

    def ensure_schema(self) -> None:
        self.db.execute(self.SCHEMA)

    def _append(self, record: HistoryRecord) -> None:
        self.db.execute(
            "INSERT INTO bot_api_history (id, api_key, bot_id, human, bot, created_at) "
            "VALUES (%s, %s, %s, %s, %s, %s)",
            (record.record_id, record.api_key, record.bot_id, record.human, record.bot, record.created_at),
        )

    def list_for_bot(self, bot_id: str, limit: int = 100) -> List[HistoryRecord]:
        rows = self.db.fetch_all(
            "SELECT id, api_key, bot_id, human, bot, created_at FROM bot_api_history "
            "WHERE bot_id = %s ORDER BY created_at DESC LIMIT %s",
            (bot_id, limit),
        )
        records = [
            HistoryRecord(
                record_id=row["id"],
                api_key=row["api_key"],
                bot_id=row["bot_id"],
                human=row["human"],
                bot=row["bot"],
                created_at=row["created_at"] or datetime.utcnow(),
            )
            for row in rows
        ]
        return list(reversed(records))


def create_history_repository() -> HistoryRepository:
    """Build the history repository selected by settings."""
    settings = get_settings()
    if settings.storage_backend == "postgres":
        repository = PostgresHistoryRepository()
        repository.ensure_schema()
        return repository
    return InMemoryHistoryRepository()
