from typing import Any, Protocol, TypeVar

import structlog

from typestore.errors import Failure, Unimplemented

LOGGER = structlog.get_logger(__name__)

T = TypeVar("T")

OPERATIONS = ("count", "get", "get_all", "add", "delete", "update")


class Store(Protocol):
    """Typed CRUD over key addressed objects.

    Every operation defaults to raising :class:`Unimplemented`; backends
    subclass this protocol and override what they support.
    """

    def _unimplemented(self, operation: str, **arguments: Any) -> Unimplemented:
        name = type(self).__name__
        LOGGER.debug("store_operation_unimplemented", store=name, operation=operation, **arguments)
        return Unimplemented(name, operation)

    async def count(self, prefix: str | None = None) -> int:
        raise self._unimplemented("count", prefix=prefix)

    async def get(self, cls: type[T], name: str, prefix: str | None = None) -> T | Failure:
        raise self._unimplemented("get", name=name, prefix=prefix)

    async def get_all(self, cls: type[T], name: str = "", prefix: str | None = None) -> list[T]:
        raise self._unimplemented("get_all", name=name, prefix=prefix)

    async def add(self, value: T, name: str, prefix: str | None = None) -> T | Failure:
        raise self._unimplemented("add", name=name, prefix=prefix)

    async def delete(self, name: str, prefix: str | None = None) -> bool:
        raise self._unimplemented("delete", name=name, prefix=prefix)

    async def update(self, name: str, value: T, prefix: str | None = None) -> bool:
        raise self._unimplemented("update", name=name, prefix=prefix)


def implements(store: Store, operation: str) -> bool:
    """Whether ``store`` provides ``operation`` rather than the unimplemented default."""
    if operation not in OPERATIONS:
        raise ValueError(f"unknown store operation {operation!r}")
    return getattr(type(store), operation) is not getattr(Store, operation)
