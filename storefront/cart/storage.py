"""
Durable snapshot storage for the cart.

A slot is a minimal key-value port (get/set/delete of a string).
CartPersistence serializes the cart lines to a JSON array and writes
the whole array into one slot key on every save.
"""
import json
import os
import re
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence

from storefront.db import RedisKeys, get_redis_sync
from storefront.errors import ERROR_SNAPSHOT_CORRUPTED, ERROR_SNAPSHOT_WRITE, ERROR_UNKNOWN_BACKEND
from storefront.logging import get_logger, sanitize_id_for_logging

from .models import LineItem

logger = get_logger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.\-]+$")


class SnapshotReadError(Exception):
    """The slot could not be read at all (as opposed to being empty)."""


class SnapshotSlot(Protocol):
    """Durable key-value slot."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemorySlot:
    """Dict-backed slot. Lives as long as the object does."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self.write_count = 0

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self.write_count += 1

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileSlot:
    """
    One JSON file per key inside a directory.

    Each write goes to its own temp file in the same directory and is
    moved into place with os.replace, so readers see either the old or
    the new snapshot even when several processes save at once.
    """

    def __init__(self, directory):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid slot key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        try:
            return self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f"{key}.", suffix=".tmp")
        replaced = False
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, path)
            replaced = True
        finally:
            if not replaced:
                Path(tmp_name).unlink(missing_ok=True)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class RedisSlot:
    """Upstash Redis slot; keys are stored under the cart: prefix."""

    def __init__(self, client=None, ttl: Optional[int] = None):
        self._redis = client  # Lazy initialization
        self.ttl = ttl

    @property
    def redis(self):
        """Get Redis client (lazy initialization)."""
        if self._redis is None:
            self._redis = get_redis_sync()
        return self._redis

    def get(self, key: str) -> Optional[str]:
        value = self.redis.get(RedisKeys.cart_key(key))
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def set(self, key: str, value: str) -> None:
        self.redis.set(RedisKeys.cart_key(key), value, ex=self.ttl)

    def delete(self, key: str) -> None:
        self.redis.delete(RedisKeys.cart_key(key))


class CartPersistence:
    """
    Reads and writes the cart snapshot.

    load() never raises unless asked to: a missing or unreadable snapshot
    yields an empty cart. save() never raises either; it reports failure by returning
    False so the caller can keep its in-memory state.
    """

    def __init__(self, slot: Optional[SnapshotSlot] = None, key: str = "cart"):
        self.slot = slot if slot is not None else MemorySlot()
        self.key = key

    def load(self, strict: bool = False) -> List[LineItem]:
        """
        Load the stored lines, or an empty list.

        Args:
            strict: raise SnapshotReadError when the slot itself fails
                instead of treating it as an empty cart
        """
        try:
            raw = self.slot.get(self.key)
        except Exception as e:
            logger.error(f"Failed to read cart snapshot '{self.key}': {e}")
            if strict:
                raise SnapshotReadError(str(e)) from e
            return []

        if raw is None or raw == "":
            return []

        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f"Corrupted cart snapshot '{self.key}': {e}")
            self._discard()
            return []

        if not isinstance(payload, list):
            logger.warning(
                f"Corrupted cart snapshot '{self.key}': expected a list, got {type(payload).__name__}"
            )
            self._discard()
            return []

        return self._parse_entries(payload)

    def _parse_entries(self, payload: list) -> List[LineItem]:
        items: List[LineItem] = []
        by_id: Dict[str, LineItem] = {}

        for index, entry in enumerate(payload):
            if not isinstance(entry, dict):
                logger.warning(f"Skipping cart entry #{index}: not an object")
                continue
            try:
                item = LineItem.from_dict(entry)
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(
                    f"Skipping cart entry #{index} (id={sanitize_id_for_logging(entry.get('id'))}): {e}"
                )
                continue

            existing = by_id.get(item.id)
            if existing is not None:
                # Duplicate ids only appear in hand-edited snapshots
                existing.quantity += item.quantity
                continue

            by_id[item.id] = item
            items.append(item)

        return items

    def _discard(self) -> None:
        try:
            self.slot.delete(self.key)
            logger.info(ERROR_SNAPSHOT_CORRUPTED)
        except Exception as e:
            logger.error(f"Failed to discard corrupted cart snapshot '{self.key}': {e}")

    def save(self, items: Sequence[LineItem]) -> bool:
        """Replace the stored snapshot with the given lines."""
        try:
            payload = json.dumps([item.to_dict() for item in items])
            self.slot.set(self.key, payload)
            return True
        except Exception as e:
            logger.error(f"{ERROR_SNAPSHOT_WRITE} ('{self.key}'): {e}")
            return False


def build_persistence(settings) -> CartPersistence:
    """Create CartPersistence for the configured backend."""
    backend = settings.storage_backend
    if backend == "memory":
        slot: SnapshotSlot = MemorySlot()
    elif backend == "file":
        slot = FileSlot(settings.storage_dir)
    elif backend == "redis":
        slot = RedisSlot(get_redis_sync(), ttl=settings.redis_ttl)
    else:
        raise ValueError(f"{ERROR_UNKNOWN_BACKEND}: {backend}")
    return CartPersistence(slot, key=settings.storage_key)
