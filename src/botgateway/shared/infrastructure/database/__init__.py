"""
Database infrastructure for Bot Gateway.
"""

from .connection_manager import DatabaseManager, get_database, close_database_connections

__all__ = [
    "DatabaseManager",
    "get_database",
    "close_database_connections",
]
