from collections import deque
from typing import Generic, Iterator, TypeVar

T = TypeVar("T")


class BoundedQueue(Generic[T]):
    """FIFO buffer that drops its oldest items once ``capacity`` is exceeded.

    Not synchronized: share it between tasks or threads only behind a lock.
    """

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self._items: deque[T] = deque()

    def enqueue(self, item: T) -> None:
        self._items.append(item)
        while self._items and len(self._items) > self.capacity:
            self._items.popleft()

    @property
    def count(self) -> int:
        return len(self._items)

    @property
    def items(self) -> tuple[T, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(tuple(self._items))
