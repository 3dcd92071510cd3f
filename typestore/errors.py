from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Unimplemented(NotImplementedError):
    """Raised by a store that does not provide an operation."""

    def __init__(self, store: str, operation: str) -> None:
        super().__init__(f"{operation} is not implemented by {store}")
        self.store = store
        self.operation = operation


class ProbeError(Exception):
    """The existence probe answered with something other than found/not found."""

    def __init__(self, key: str, status: int) -> None:
        super().__init__(f"existence probe for {key!r} returned status {status}")
        self.key = key
        self.status = status


class FailureKind(str, Enum):
    NOT_FOUND = "not_found"
    TRANSPORT = "transport"
    VALIDATION = "validation"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class Failure:
    """Result of a ``get`` or ``add`` that produced no value.

    Falsy, so ``if result:`` reads naturally at call sites.
    """

    kind: FailureKind
    detail: str = ""

    def __bool__(self) -> bool:
        return False

    @property
    def is_not_found(self) -> bool:
        return self.kind is FailureKind.NOT_FOUND

    @classmethod
    def not_found(cls, detail: str = "") -> Failure:
        return cls(FailureKind.NOT_FOUND, detail)

    @classmethod
    def transport(cls, detail: str = "") -> Failure:
        return cls(FailureKind.TRANSPORT, detail)

    @classmethod
    def validation(cls, detail: str = "") -> Failure:
        return cls(FailureKind.VALIDATION, detail)

    @classmethod
    def unavailable(cls, detail: str = "") -> Failure:
        return cls(FailureKind.UNAVAILABLE, detail)
