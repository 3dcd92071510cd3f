from functools import lru_cache
from typing import Any, TypeVar

from pydantic import TypeAdapter
from pydantic_core import to_json

T = TypeVar("T")


@lru_cache(maxsize=256)
def _adapter(cls: Any) -> TypeAdapter[Any]:
    return TypeAdapter(cls)


def encode(value: Any) -> bytes:
    """Serialize ``value`` as pretty-printed UTF-8 JSON.

    Raises ``PydanticSerializationError`` for values JSON cannot represent.
    """
    return to_json(value, indent=2)


def decode(cls: type[T], body: bytes) -> T | None:
    """Parse ``body`` into ``cls``; raises ``pydantic.ValidationError`` on bad input."""
    if not body:
        return None
    return _adapter(cls).validate_json(body)
