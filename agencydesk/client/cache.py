# agencydesk/client/cache.py
"""
Explicit keyed cache of fetched records.

Keys are tuples whose first element is the entity type:
    ("agents", "list", ())             all agents
    ("agents", "list", (...))          filtered list
    ("agents", "detail", 7)            one agent
    ("policies", "by-agent", 7)        policies of agent 7
    ("commissions", "stats")           derived aggregate

Invalidation is by prefix and only marks entries stale; the next read refetches.
Reads go through tickets so that a response arriving after its view was
abandoned, or after the key was invalidated, is discarded instead of applied.
"""
from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

CacheKey = Tuple[Any, ...]
T = TypeVar("T")


def cache_key(entity: str, *parts: Any) -> CacheKey:
    return (entity, *parts)


def filter_part(filters: Optional[Dict[str, Any]]) -> Tuple[Tuple[str, Any], ...]:
    return tuple(sorted((filters or {}).items()))


@dataclass
class CacheEntry:
    data: Any
    stale: bool = False


@dataclass
class ReadTicket:
    id: int
    key: CacheKey
    superseded: bool = False


class QueryCache:
    def __init__(self) -> None:
        self._entries: Dict[CacheKey, CacheEntry] = {}
        self._inflight: Dict[int, ReadTicket] = {}
        self._ids = itertools.count(1)
        self._lock = threading.RLock()

    # ----- inspection -----

    def peek(self, key: CacheKey) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(key)

    def is_fresh(self, key: CacheKey) -> bool:
        entry = self.peek(key)
        return entry is not None and not entry.stale

    def keys(self):
        with self._lock:
            return list(self._entries)

    # ----- read protocol -----

    def begin(self, key: CacheKey) -> ReadTicket:
        with self._lock:
            ticket = ReadTicket(id=next(self._ids), key=key)
            self._inflight[ticket.id] = ticket
            return ticket

    def complete(self, ticket: ReadTicket, data: Any) -> bool:
        """Store data for the ticket's key. Returns False if the response was discarded."""
        with self._lock:
            current = self._inflight.pop(ticket.id, None)
            if current is None or current.superseded:
                logger.debug("Discarding response for %s (ticket %s)", ticket.key, ticket.id)
                return False
            # Older reads of the same key must not overwrite this result later.
            for other in self._inflight.values():
                if other.key == ticket.key and other.id < ticket.id:
                    other.superseded = True
            self._entries[ticket.key] = CacheEntry(data=data)
            return True

    def abandon(self, ticket: ReadTicket) -> None:
        """The caller no longer wants this read (e.g. dialog closed)."""
        with self._lock:
            self._inflight.pop(ticket.id, None)

    def read(self, key: CacheKey, loader: Callable[[], T]) -> T:
        entry = self.peek(key)
        if entry is not None and not entry.stale:
            return entry.data
        ticket = self.begin(key)
        try:
            data = loader()
        except Exception:
            self.abandon(ticket)
            raise
        self.complete(ticket, data)
        return data

    # ----- invalidation -----

    def invalidate(self, *prefix: Any) -> int:
        """Mark every entry under prefix stale. Returns the number of entries touched."""
        n = len(prefix)
        touched = 0
        with self._lock:
            for key, entry in self._entries.items():
                if key[:n] == prefix and not entry.stale:
                    entry.stale = True
                    touched += 1
            for ticket in self._inflight.values():
                if ticket.key[:n] == prefix:
                    ticket.superseded = True
        if touched:
            logger.debug("Invalidated %d cache entries under %s", touched, prefix)
        return touched

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._inflight.clear()
