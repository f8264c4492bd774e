"""
Client Storage
==============
Durable string key-value storage, one namespace per browser client.
"""
import json
from typing import Any, Optional

from nyay_sahayak.storage.connection import Database, get_database
from nyay_sahayak.utils.logging import get_logger


class ClientStorage:
    """
    Key-value storage scoped to one client namespace.

    Mirrors browser local storage: synchronous get/set/remove by string key.
    JSON helpers treat malformed values as absent.
    """

    def __init__(self, namespace: str, database: Database = None):
        self.namespace = namespace
        self.db = database or get_database()
        self.db.initialize()
        self.logger = get_logger().storage_logger

    def get(self, key: str) -> Optional[str]:
        """Get the raw value stored under key."""
        row = self.db.fetchone(
            "SELECT value FROM client_storage WHERE namespace = ? AND key = ?",
            (self.namespace, key)
        )
        return row['value'] if row else None

    def set(self, key: str, value: str) -> None:
        """Store a raw string value."""
        with self.db.transaction() as conn:
            conn.execute("""
                INSERT OR REPLACE INTO client_storage (namespace, key, value, updated_at)
                VALUES (?, ?, ?, CURRENT_TIMESTAMP)
            """, (self.namespace, key, value))

    def remove(self, key: str) -> None:
        """Remove key if present."""
        with self.db.transaction() as conn:
            conn.execute(
                "DELETE FROM client_storage WHERE namespace = ? AND key = ?",
                (self.namespace, key)
            )

    def get_json(self, key: str, default: Any = None) -> Any:
        """Get a JSON value; missing or malformed values return default."""
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            self.logger.warning(f"Malformed JSON under '{key}' ({self.namespace}): {e}")
            return default

    def set_json(self, key: str, value: Any) -> None:
        """Store a value serialized as JSON."""
        self.set(key, json.dumps(value, ensure_ascii=False))
