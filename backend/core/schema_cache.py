"""
Time-boxed memoisation of the introspected schema.

One SchemaCache is built at startup and handed to whoever needs schema data.
Readers on a warm cache only dereference the current entry; refreshes are
single-flighted behind a lock and replace the entry wholesale.
"""
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from models.schema import SchemaDescription

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60 * 60


@dataclass(frozen=True)
class CacheEntry:
    schema: SchemaDescription
    fetched_at_millis: int


class SchemaCache:
    def __init__(
        self,
        discover: Callable[[], SchemaDescription],
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._discover = discover
        self._ttl_millis = int(ttl_seconds * 1000)
        self._clock = clock
        self._entry: Optional[CacheEntry] = None
        self._lock = threading.Lock()

    def _now_millis(self) -> int:
        return int(self._clock() * 1000)

    def _fresh(self, entry: Optional[CacheEntry]) -> bool:
        return entry is not None and (self._now_millis() - entry.fetched_at_millis) < self._ttl_millis

    def get(self, force_refresh: bool = False) -> SchemaDescription:
        """Cached snapshot while younger than the TTL; otherwise re-introspect."""
        entry = self._entry
        if not force_refresh and self._fresh(entry):
            logger.debug("Using cached schema")
            return entry.schema

        with self._lock:
            # Another caller may have refreshed while we waited
            entry = self._entry
            if not force_refresh and self._fresh(entry):
                return entry.schema
            logger.info("Refreshing schema cache…")
            schema = self._discover()
            self._entry = CacheEntry(schema=schema, fetched_at_millis=self._now_millis())
            return schema

    def invalidate(self) -> None:
        self._entry = None
        logger.info("Schema cache cleared")

    @property
    def entry(self) -> Optional[CacheEntry]:
        return self._entry
