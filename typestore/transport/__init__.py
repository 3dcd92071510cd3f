from dataclasses import dataclass, field
from typing import Protocol


@dataclass
class ListPage:
    keys: list[str] = field(default_factory=list)
    next_token: str | None = None
    is_truncated: bool = False


@dataclass
class ObjectResponse:
    status: int
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class ObjectStorageClient(Protocol):
    async def list_page(self, bucket: str, prefix: str, continuation_token: str | None = None) -> ListPage: ...

    async def get(self, bucket: str, key: str) -> ObjectResponse: ...

    async def put(self, bucket: str, key: str, body: bytes) -> ObjectResponse: ...

    async def delete(self, bucket: str, key: str) -> ObjectResponse: ...

    async def head(self, bucket: str, key: str) -> ObjectResponse: ...
