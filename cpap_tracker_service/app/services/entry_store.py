import asyncio
import logging
import sqlite3
from typing import Iterable, List, Optional, Tuple

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from app.db.kv_store import KeyValueStore
from app.schemas.models import EntryCollection, UsageRecord

logger = logging.getLogger(__name__)

DEFAULT_ENTRIES_KEY = "cpap_entries"

_ENTRIES = TypeAdapter(List[UsageRecord])


class EntryStoreError(RuntimeError):
    pass


class CorruptStoreError(EntryStoreError):
    """The slot holds a value that is not a JSON list of {date, time} objects."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Stored value under {key!r} is corrupt: {reason}")
        self.key = key
        self.reason = reason


class StorageIOError(EntryStoreError):
    pass


class InvalidEntryError(EntryStoreError, ValueError):
    """An entry holds text that cannot be written as UTF-8 JSON, e.g. a lone surrogate."""


_BACKEND_ERRORS = (sqlite3.Error, OSError)


def encode_entries(entries: Iterable[UsageRecord]) -> str:
    records = _ENTRIES.validate_python(list(entries))
    try:
        return _ENTRIES.dump_json(records).decode("utf-8")
    except PydanticSerializationError as e:
        raise InvalidEntryError(f"Entries cannot be serialized: {e}") from e


def decode_entries(raw: Optional[str], key: str = DEFAULT_ENTRIES_KEY) -> EntryCollection:
    """Absent or blank -> []. Anything else must be a JSON list of records."""
    if raw is None or not raw.strip():
        return []
    try:
        return _ENTRIES.validate_json(raw)
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        raise CorruptStoreError(key, first.get("msg", str(e))) from e


class EntryStore:
    """
    Maps the in-memory list of usage records to one serialized slot.

    Every save is a full replace. Saves on one instance are serialized
    through an asyncio.Lock, so they reach the key-value layer in call order.
    """

    def __init__(self, kv: KeyValueStore, key: str = DEFAULT_ENTRIES_KEY):
        self.kv = kv
        self.key = key
        self._write_lock = asyncio.Lock()

    async def _read_raw(self) -> Optional[str]:
        try:
            return await self.kv.get(self.key)
        except _BACKEND_ERRORS as e:
            logger.error("Failed to read slot %r: %s", self.key, e)
            raise StorageIOError(f"Failed to read {self.key!r}: {e}") from e

    async def _write_raw(self, value: str) -> None:
        try:
            await self.kv.put(self.key, value)
        except _BACKEND_ERRORS as e:
            logger.error("Failed to write slot %r: %s", self.key, e)
            raise StorageIOError(f"Failed to write {self.key!r}: {e}") from e

    async def load(self) -> EntryCollection:
        entries = decode_entries(await self._read_raw(), self.key)
        logger.debug("Loaded %d entries from %r", len(entries), self.key)
        return entries

    async def load_or_empty(self) -> Tuple[EntryCollection, Optional[str]]:
        try:
            return await self.load(), None
        except CorruptStoreError as e:
            logger.warning("%s; falling back to an empty list", e)
            return [], str(e)

    async def save(self, entries: Iterable[UsageRecord]) -> None:
        records = list(entries)
        payload = encode_entries(records)
        async with self._write_lock:
            await self._write_raw(payload)
        logger.debug("Saved %d entries to %r", len(records), self.key)

    async def append(self, record: UsageRecord) -> EntryCollection:
        async with self._write_lock:
            updated = decode_entries(await self._read_raw(), self.key) + [record]
            await self._write_raw(encode_entries(updated))
        logger.debug("Appended entry; %r now holds %d", self.key, len(updated))
        return updated

    async def close(self) -> None:
        await self.kv.close()
