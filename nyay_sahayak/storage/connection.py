"""
Database Connection Manager
===========================
Handles SQLite database connections with proper context management.
"""
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Generator

from nyay_sahayak.config import config
from nyay_sahayak.utils.logging import get_logger


class Database:
    """
    Thread-safe SQLite database manager.

    Each thread gets its own connection; writes go through transaction().
    """

    _instance: Optional['Database'] = None
    _lock = threading.Lock()

    def __init__(self, db_path: Path = None):
        self.db_path = Path(db_path or config.paths.storage_db_path)
        self.logger = get_logger().storage_logger
        self._local = threading.local()
        self._initialized = False

        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @classmethod
    def get_instance(cls, db_path: Path = None) -> 'Database':
        """Get singleton instance."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = cls(db_path)
            return cls._instance

    @property
    def connection(self) -> sqlite3.Connection:
        """Get thread-local connection."""
        if getattr(self._local, 'connection', None) is None:
            self._local.connection = self._create_connection()
        return self._local.connection

    def _create_connection(self) -> sqlite3.Connection:
        """Create a new database connection."""
        conn = sqlite3.connect(
            str(self.db_path),
            timeout=config.security.db_timeout
        )
        conn.row_factory = sqlite3.Row

        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")

        return conn

    def initialize(self) -> None:
        """Initialize database schema."""
        if self._initialized:
            return

        with self._lock:
            if self._initialized:
                return

            self._create_tables()
            self._initialized = True

            self.logger.info(f"Client storage initialized: {self.db_path}")

    def _create_tables(self) -> None:
        """Create database tables."""
        with self.connection:
            self.connection.execute("""
                CREATE TABLE IF NOT EXISTS client_storage (
                    namespace TEXT NOT NULL,
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (namespace, key)
                )
            """)

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """Context manager for database transactions."""
        conn = self.connection
        try:
            yield conn
            conn.commit()
        except Exception as e:
            conn.rollback()
            self.logger.error(f"Transaction rolled back: {e}")
            raise

    def execute(
        self,
        query: str,
        params: tuple = None
    ) -> sqlite3.Cursor:
        """Execute a query."""
        try:
            if params:
                return self.connection.execute(query, params)
            return self.connection.execute(query)
        except sqlite3.Error as e:
            self.logger.error(f"Database error: {e}")
            raise

    def fetchone(
        self,
        query: str,
        params: tuple = None
    ) -> Optional[sqlite3.Row]:
        """Execute query and fetch one result."""
        cursor = self.execute(query, params)
        return cursor.fetchone()

    def close(self) -> None:
        """Close thread-local connection."""
        if getattr(self._local, 'connection', None) is not None:
            self._local.connection.close()
            self._local.connection = None


# Global accessor
_database: Optional[Database] = None


def get_database() -> Database:
    """Get database singleton."""
    global _database
    if _database is None:
        _database = Database.get_instance()
        _database.initialize()
    return _database


def reset_database() -> None:
    """Reset database singleton (for testing)."""
    global _database
    if _database:
        _database.close()
    _database = None
    Database._instance = None
