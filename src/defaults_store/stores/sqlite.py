"""SQLiteStore — durable, single-file storage backend using aiosqlite."""

from __future__ import annotations

import json
import logging

try:
    import aiosqlite
except ImportError as exc:
    raise ImportError(
        "SQLiteStore requires the 'aiosqlite' package. "
        "Install it with: pip install defaults-store"
    ) from exc

from defaults_store.exceptions import StoreError
from defaults_store.stores.base import RawValue, Store

logger = logging.getLogger(__name__)

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS defaults_store (
    namespace TEXT NOT NULL,
    key       TEXT NOT NULL,
    encoding  TEXT NOT NULL,
    value     BLOB NOT NULL,
    PRIMARY KEY (namespace, key)
)
"""

# bytes are stored untouched, everything else as JSON text
_ENCODING_JSON = "json"
_ENCODING_BLOB = "blob"


def _to_row(value: RawValue) -> tuple[str, str | bytes]:
    if isinstance(value, bytes):
        return _ENCODING_BLOB, value
    return _ENCODING_JSON, json.dumps(value)


def _from_row(encoding: str, value: str | bytes) -> RawValue:
    if encoding == _ENCODING_BLOB:
        return bytes(value)
    result: RawValue = json.loads(value)
    return result


class SQLiteStore(Store):
    """Persistent store backed by a single SQLite file.

    The connection belongs to the event loop that first opened it; give
    each loop its own instance.

    Parameters:
        db_path: Path to the SQLite database file.  Use ``":memory:"``
                 for an in-memory database (useful for testing).
    """

    def __init__(self, db_path: str = "defaults_store.db") -> None:
        self._db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def _connect(self) -> aiosqlite.Connection:
        if self._db is None:
            try:
                self._db = await aiosqlite.connect(self._db_path)
                await self._db.execute(_CREATE_TABLE)
                await self._db.commit()
            except aiosqlite.Error as exc:
                self._db = None
                raise StoreError("connect", str(exc)) from exc
            logger.debug("Opened settings database %s", self._db_path)
        return self._db

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    # ── Store protocol ───────────────────────────────────────

    async def get(self, namespace: str, key: str) -> RawValue | None:
        db = await self._connect()
        try:
            cursor = await db.execute(
                "SELECT encoding, value FROM defaults_store WHERE namespace = ? AND key = ?",
                (namespace, key),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise StoreError("get", str(exc)) from exc
        if row is None:
            return None
        return _from_row(row[0], row[1])

    async def set(self, namespace: str, key: str, value: RawValue) -> None:
        try:
            encoding, payload = _to_row(value)
        except (TypeError, ValueError) as exc:
            raise StoreError("set", f"unsupported value for '{namespace}:{key}': {exc}") from exc
        db = await self._connect()
        try:
            await db.execute(
                "INSERT OR REPLACE INTO defaults_store (namespace, key, encoding, value) "
                "VALUES (?, ?, ?, ?)",
                (namespace, key, encoding, payload),
            )
            await db.commit()
        except aiosqlite.Error as exc:
            raise StoreError("set", str(exc)) from exc

    async def delete(self, namespace: str, key: str) -> None:
        db = await self._connect()
        try:
            await db.execute(
                "DELETE FROM defaults_store WHERE namespace = ? AND key = ?",
                (namespace, key),
            )
            await db.commit()
        except aiosqlite.Error as exc:
            raise StoreError("delete", str(exc)) from exc

    async def exists(self, namespace: str, key: str) -> bool:
        db = await self._connect()
        try:
            cursor = await db.execute(
                "SELECT 1 FROM defaults_store WHERE namespace = ? AND key = ?",
                (namespace, key),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise StoreError("exists", str(exc)) from exc
        return row is not None
