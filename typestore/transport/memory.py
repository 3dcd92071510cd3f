from collections import defaultdict
from dataclasses import dataclass, field

from typestore.bounded import BoundedQueue
from typestore.transport import ListPage, ObjectResponse, ObjectStorageClient


@dataclass
class Object:
    body: bytes


@dataclass
class Request:
    method: str
    bucket: str
    key: str


@dataclass
class InMemoryTransport(ObjectStorageClient):
    """Object service kept in process memory.

    Listings come back sorted and split into pages of ``page_size`` keys with
    an integer offset as continuation token. Keys listed in ``failing`` answer
    every request with ``failure_status``.
    """

    page_size: int = 1000
    storage: dict[str, dict[str, Object]] = field(
        default_factory=lambda: defaultdict(dict)
    )
    failing: set[str] = field(default_factory=set)
    failure_status: int = 500
    requests: BoundedQueue[Request] = field(default_factory=lambda: BoundedQueue(256))

    def _record(self, method: str, bucket: str, key: str) -> None:
        self.requests.enqueue(Request(method, bucket, key))

    async def list_page(self, bucket: str, prefix: str, continuation_token: str | None = None) -> ListPage:
        self._record("LIST", bucket, prefix)
        keys = sorted(key for key in self.storage[bucket] if key.startswith(prefix))
        start = int(continuation_token) if continuation_token else 0
        end = start + self.page_size
        truncated = end < len(keys)
        return ListPage(
            keys=keys[start:end],
            next_token=str(end) if truncated else None,
            is_truncated=truncated,
        )

    async def get(self, bucket: str, key: str) -> ObjectResponse:
        self._record("GET", bucket, key)
        if key in self.failing:
            return ObjectResponse(self.failure_status)
        obj = self.storage[bucket].get(key)
        if obj is None:
            return ObjectResponse(404)
        return ObjectResponse(200, obj.body)

    async def put(self, bucket: str, key: str, body: bytes) -> ObjectResponse:
        self._record("PUT", bucket, key)
        if key in self.failing:
            return ObjectResponse(self.failure_status)
        self.storage[bucket][key] = Object(body=body)
        return ObjectResponse(200)

    async def delete(self, bucket: str, key: str) -> ObjectResponse:
        self._record("DELETE", bucket, key)
        if key in self.failing:
            return ObjectResponse(self.failure_status)
        if self.storage[bucket].pop(key, None) is None:
            return ObjectResponse(404)
        return ObjectResponse(204)

    async def head(self, bucket: str, key: str) -> ObjectResponse:
        self._record("HEAD", bucket, key)
        if key in self.failing:
            return ObjectResponse(self.failure_status)
        if key not in self.storage[bucket]:
            return ObjectResponse(404)
        return ObjectResponse(200)
