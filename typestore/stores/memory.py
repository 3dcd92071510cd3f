from dataclasses import dataclass, field
from threading import Lock
from typing import Any, TypeVar

import structlog

from typestore.errors import Failure
from typestore.keys import compose_key, listing_prefix
from typestore.stores import Store

LOGGER = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Entry:
    tag: type
    value: Any


@dataclass
class InMemoryStore(Store):
    """Process local store keeping values as they are, tagged with their type.

    Unlike the remote store, ``add`` never overwrites, ``update`` never
    creates and ``count`` ignores its prefix.
    """

    entries: dict[str, Entry] = field(default_factory=dict)
    logger: Any = LOGGER
    _lock: Lock = field(default_factory=Lock, init=False, repr=False, compare=False)

    async def count(self, prefix: str | None = None) -> int:
        # prefix is not applied here, only the remote store filters by it
        with self._lock:
            return len(self.entries)

    async def get(self, cls: type[T], name: str, prefix: str | None = None) -> T | Failure:
        key = compose_key(name, prefix=prefix)
        if not key:
            return Failure.validation("empty key")
        with self._lock:
            entry = self.entries.get(key)
        if entry is None:
            return Failure.not_found(key)
        if entry.tag is not cls:
            self.logger.debug("memory_get_type_mismatch", key=key, stored=entry.tag.__name__, requested=getattr(cls, "__name__", str(cls)))
            return Failure.not_found(key)
        return entry.value

    async def get_all(self, cls: type[T], name: str = "", prefix: str | None = None) -> list[T]:
        scope = listing_prefix(name, prefix)
        with self._lock:
            matches = [
                (key, entry) for key, entry in self.entries.items()
                if key.startswith(scope) and entry.tag is cls
            ]
        return [entry.value for _, entry in sorted(matches, key=lambda item: item[0])]

    async def add(self, value: T, name: str, prefix: str | None = None) -> T | Failure:
        if value is None or not name or not name.strip():
            return Failure.validation("value and name are required")
        key = compose_key(name, prefix=prefix)
        with self._lock:
            if key in self.entries:
                self.logger.info("memory_add_rejected_existing", key=key)
                return Failure.validation(f"{key} already exists")
            self.entries[key] = Entry(type(value), value)
        return value

    async def delete(self, name: str, prefix: str | None = None) -> bool:
        key = compose_key(name, prefix=prefix)
        with self._lock:
            return self.entries.pop(key, None) is not None

    async def update(self, name: str, value: T, prefix: str | None = None) -> bool:
        key = compose_key(name, prefix=prefix)
        if not key or value is None:
            return False
        with self._lock:
            if key not in self.entries:
                return False
            self.entries[key] = Entry(type(value), value)
        return True
