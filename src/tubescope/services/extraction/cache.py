"""
TTL cache for extracted entities.

A key/value store with a per-entry absolute expiry, shared by every entity
and collection fetch. Entries live in a bounded in-memory LRU layer and,
when a directory is configured, are written through to JSON files on disk
so they survive restarts.

Values are stored in their JSON-compatible form and re-validated into the
requested type on every ``get``, so what comes back is always a fresh,
immutable model equal to what was stored.

Classes
-------
TTLCache
    The cache. Thread-safe; concurrent writers resolve last-write-wins.
"""

from __future__ import annotations

import functools
import logging
import threading
import time
from collections import OrderedDict
from pathlib import Path
from typing import Any, Callable, TypeVar
from uuid import uuid4

from pydantic import TypeAdapter, ValidationError
from pydantic_core import to_jsonable_python

from tubescope.exceptions import DecodeError
from tubescope.services.extraction.models import CacheEntry, CacheKey

logger = logging.getLogger(__name__)

T = TypeVar("T")

_DEFAULT_MAX_ENTRIES = 2048


@functools.lru_cache(maxsize=64)
def _adapter(type_: Any) -> TypeAdapter[Any]:
    return TypeAdapter(type_)


def _raw(key: CacheKey | str) -> CacheKey:
    return key if isinstance(key, CacheKey) else CacheKey(raw=key)


class TTLCache:
    """
    Time-boxed key/value cache with optional disk persistence.

    Parameters
    ----------
    directory : Path | None, optional
        Directory for the JSON files. ``None`` keeps the cache in memory only.
    max_entries : int, optional
        Size of the in-memory LRU layer (default 2048).
    clock : Callable[[], float], optional
        Source of "now" in epoch seconds (default ``time.time``). Injected
        by tests to move time deterministically.

    Examples
    --------
    >>> cache = TTLCache()
    >>> key = CacheKey(raw="channel:info:id=UC...|hl=en|gl=US")
    >>> cache.set(key, channel, ttl=3600)
    >>> cache.get(key, Channel) == channel
    True
    """

    def __init__(
        self,
        directory: Path | None = None,
        max_entries: int = _DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._directory = directory
        self._max_entries = max_entries
        self._clock = clock
        self._memory: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.RLock()

    @property
    def directory(self) -> Path | None:
        """Disk directory, or None for a memory-only cache."""
        return self._directory

    def __len__(self) -> int:
        with self._lock:
            return len(self._memory)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get(self, key: CacheKey | str, type_: type[T] | Any) -> T | None:
        """
        Return the live value stored under *key*, validated as *type_*.

        Parameters
        ----------
        key : CacheKey | str
            Cache key.
        type_ : type
            Expected type, e.g. ``Channel`` or ``list[Video]``.

        Returns
        -------
        T | None
            The value, or None on a miss. Absent, expired and corrupt
            entries are all misses; corrupt entries are also evicted.
        """
        cache_key = _raw(key)
        with self._lock:
            entry = self._lookup(cache_key)
            if entry is None:
                return None
            try:
                return self._decode(entry, type_)
            except DecodeError as e:
                logger.warning("Corrupted cache entry '%s', evicting: %s", cache_key.raw, e.message)
                self._evict(cache_key)
                return None

    def set(self, key: CacheKey | str, value: Any, ttl: float) -> None:
        """
        Store *value* under *key* for *ttl* seconds.

        Replaces any previous entry and its expiry.

        Parameters
        ----------
        key : CacheKey | str
            Cache key.
        value : Any
            A pydantic model, a list of models, or any JSON-compatible value.
        ttl : float
            Lifetime in seconds. Non-positive values store nothing.
        """
        cache_key = _raw(key)
        if ttl <= 0:
            self.invalidate(cache_key)
            return

        entry = CacheEntry(
            key=cache_key.raw,
            value=to_jsonable_python(value),
            expires_at=self._clock() + ttl,
        )
        with self._lock:
            self._remember(cache_key.raw, entry)
            self._write_disk(cache_key, entry)

    def invalidate(self, key: CacheKey | str) -> bool:
        """Remove *key*. Returns True when something was removed."""
        with self._lock:
            return self._evict(_raw(key))

    def clear(self) -> int:
        """Remove every entry. Returns the number of entries removed."""
        with self._lock:
            removed = len(self._memory)
            self._memory.clear()
            if self._directory is not None and self._directory.exists():
                on_disk = 0
                for path in self._directory.glob("*.json"):
                    path.unlink(missing_ok=True)
                    on_disk += 1
                removed = max(removed, on_disk)
            return removed

    def purge_expired(self) -> int:
        """Remove expired entries from memory and disk. Returns how many."""
        now = self._clock()
        removed: set[str] = set()
        with self._lock:
            for raw_key in [k for k, e in self._memory.items() if not e.is_valid(now)]:
                del self._memory[raw_key]
                removed.add(raw_key)
            if self._directory is not None and self._directory.exists():
                for path in self._directory.glob("*.json"):
                    entry = self._read_file(path)
                    if entry is None:
                        removed.add(path.name)
                    elif not entry.is_valid(now):
                        path.unlink(missing_ok=True)
                        removed.add(entry.key)
        return len(removed)

    # ------------------------------------------------------------------
    # Internals (callers hold the lock)
    # ------------------------------------------------------------------

    def _lookup(self, key: CacheKey) -> CacheEntry | None:
        now = self._clock()
        entry = self._memory.get(key.raw)
        if entry is None:
            entry = self._read_disk(key)
            if entry is None:
                return None
        if not entry.is_valid(now):
            logger.debug("Cache entry '%s' expired", key.raw)
            self._evict(key)
            return None
        self._remember(key.raw, entry)
        return entry

    def _remember(self, raw_key: str, entry: CacheEntry) -> None:
        self._memory[raw_key] = entry
        self._memory.move_to_end(raw_key)
        while len(self._memory) > self._max_entries:
            evicted, _ = self._memory.popitem(last=False)
            logger.debug("Evicted least recently used cache entry '%s'", evicted)

    def _decode(self, entry: CacheEntry, type_: Any) -> Any:
        try:
            return _adapter(type_).validate_python(entry.value)
        except ValidationError as e:
            raise DecodeError(
                message=f"Cached value does not match {type_!r}: {e.error_count()} errors",
                key=entry.key,
            ) from e

    def _evict(self, key: CacheKey) -> bool:
        removed = self._memory.pop(key.raw, None) is not None
        path = self._path(key)
        if path is not None and path.exists():
            path.unlink(missing_ok=True)
            removed = True
        return removed

    def _path(self, key: CacheKey) -> Path | None:
        if self._directory is None:
            return None
        return self._directory / key.hashed_filename()

    def _read_file(self, path: Path) -> CacheEntry | None:
        try:
            return CacheEntry.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError, UnicodeDecodeError) as e:
            logger.warning("Corrupted cache file %s, deleting: %s", path, e)
            path.unlink(missing_ok=True)
            return None

    def _read_disk(self, key: CacheKey) -> CacheEntry | None:
        path = self._path(key)
        if path is None or not path.exists():
            return None
        entry = self._read_file(path)
        if entry is not None and entry.key != key.raw:
            logger.warning("Cache file %s belongs to another key, deleting", path)
            path.unlink(missing_ok=True)
            return None
        return entry

    def _write_disk(self, key: CacheKey, entry: CacheEntry) -> None:
        path = self._path(key)
        if path is None:
            return
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Atomic write: temp file then rename
            tmp_path = path.with_name(f".{path.stem}.tmp.{uuid4()}")
            tmp_path.write_text(entry.model_dump_json(), encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            # The memory layer still holds the entry.
            logger.warning("Failed to write cache file %s: %s", path, e)
