"""
History Store for API chat exchanges.
"""

from .repository import (
    HistoryRecord, HistoryRepository, InMemoryHistoryRepository,
    PostgresHistoryRepository, create_history_repository,
)

__all__ = [
    'HistoryRecord',
    'HistoryRepository',
    'InMemoryHistoryRepository',
    'PostgresHistoryRepository',
    'create_history_repository',
]
