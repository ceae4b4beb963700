"""
PostgreSQL connection management with pooling.

This centralizes all database connection logic behind a clean interface for
the catalog and history repositories.
"""

import threading
from contextlib import contextmanager
from typing import Any, Dict, Generator, List, Optional, Sequence

import psycopg2
from psycopg2.extras import RealDictCursor
from psycopg2.pool import ThreadedConnectionPool

from ...config.settings import get_settings
from ...exceptions import DatabaseError, ConfigurationError
from ..monitoring.logger import get_logger


class DatabaseManager:
    """
    Centralized database connection manager.

    Provides a thread-safe connection pool; blocking calls are expected to be
    dispatched off the event loop by the caller.
    """

    _instance: Optional["DatabaseManager"] = None
    _lock = threading.RLock()

    def __new__(cls) -> "DatabaseManager":
        """Singleton pattern to ensure single connection manager."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the database manager (called once due to singleton)."""
        if self._initialized:
            return

        self.settings = get_settings()
        self.logger = get_logger(__name__)
        self._pool: Optional[ThreadedConnectionPool] = None
        self._initialized = True

    def get_pool(self) -> ThreadedConnectionPool:
        """
        Get or create the connection pool.

        Raises:
            ConfigurationError: If no DSN is configured
            DatabaseError: If the pool cannot be created
        """
        if self._pool is None:
            with self._lock:
                if self._pool is None:
                    self._pool = self._create_pool()
        return self._pool

    def _create_pool(self) -> ThreadedConnectionPool:
        config = self.settings.database_config
        if not config['dsn']:
            raise ConfigurationError("DATABASE_URL is required for the postgres storage backend")

        try:
            pool = ThreadedConnectionPool(
                config['min_connections'],
                config['max_connections'],
                dsn=config['dsn'],
            )
            self.logger.info("Created PostgreSQL connection pool")
            return pool
        except psycopg2.OperationalError as e:
            raise DatabaseError(f"Database service unavailable: {e}") from e

    @contextmanager
    def get_connection(self) -> Generator[Any, None, None]:
        """
        Borrow a pooled connection; commits on success, rolls back on error.

        Yields:
            psycopg2 connection
        """
        pool = self.get_pool()
        conn = pool.getconn()
        try:
            yield conn
            conn.commit()
        except psycopg2.Error as e:
            conn.rollback()
            raise DatabaseError(f"Database operation failed: {e}") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            pool.putconn(conn)

    def fetch_one(self, query: str, parameters: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
        """Run a query and return the first row as a dict, or None."""
        with self.get_connection() as conn:
            with conn.cursor(cursor_factory=RealDictCursor) as cursor:
                cursor.execute(query, parameters)
                row = cursor.fetchone()
                return dict(row) if row else None

    def fetch_all(self, query: str, parameters: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """Run a query and return every row as a dict."""
        with self.get_connection() as conn:
            with conn.cursor(cursor_factory=RealDictCursor) as cursor:
                cursor.execute(query, parameters)
                return [dict(row) for row in cursor.fetchall()]

    def execute(self, query: str, parameters: Sequence[Any] = ()) -> int:
        """Run a write statement and return the affected row count."""
        with self.get_connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute(query, parameters)
                return cursor.rowcount

    def close_all(self):
        """Close all pooled connections."""
        with self._lock:
            if self._pool is not None:
                self._pool.closeall()
                self._pool = None
                self.logger.info("Closed PostgreSQL connection pool")

    def get_connection_stats(self) -> Dict[str, Any]:
        """Get connection pool statistics."""
        return {
            'pool_created': self._pool is not None,
            'max_connections': self.settings.database_config['max_connections'],
        }


# Global instance
_db_manager = None
_db_lock = threading.Lock()


def get_database() -> DatabaseManager:
    """
    Get the global database manager instance.

    Returns:
        DatabaseManager singleton instance
    """
    global _db_manager

    if _db_manager is None:
        with _db_lock:
            if _db_manager is None:
                _db_manager = DatabaseManager()

    return _db_manager


def close_database_connections():
    """Close all database connections on application shutdown."""
    if _db_manager:
        _db_manager.close_all()
