from __future__ import annotations

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import AsyncExitStack, aclosing, asynccontextmanager
from dataclasses import dataclass
from typing import Any, TypeVar

import anyio
import structlog
from botocore.exceptions import BotoCoreError
from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from typestore.codec import decode, encode
from typestore.config import Settings
from typestore.errors import Failure, ProbeError
from typestore.keys import compose_key, listing_prefix
from typestore.stores import Store
from typestore.transport import ListPage, ObjectStorageClient
from typestore.transport.s3 import S3Transport

LOGGER = structlog.get_logger(__name__)

T = TypeVar("T")


def _blank(name: str | None) -> bool:
    return name is None or not name.strip()


@dataclass
class RemoteObjectStore(Store):
    """Store backed by a bucket on an S3 compatible object service.

    Payloads are written as pretty-printed JSON and decoded into the
    requested type on read. Failures are logged and reported as ``0``,
    :class:`Failure` or ``False``; nothing but cancellation escapes an
    operation.

    ``client`` is ``None`` when the connection could not be set up, in which
    case every operation reports failure without a round trip.

    A failed ``get`` is not always ``is_not_found``: a blank name gives
    ``VALIDATION``, a store without client ``UNAVAILABLE`` and a network
    error ``TRANSPORT``. All of them are falsy.
    """

    client: ObjectStorageClient | None
    bucket: str
    max_concurrency: int = 16
    logger: Any = LOGGER

    @classmethod
    @asynccontextmanager
    async def connect(cls, settings: Settings, logger: Any = None) -> AsyncIterator[RemoteObjectStore]:
        logger = logger or LOGGER
        async with AsyncExitStack() as stack:
            client: ObjectStorageClient | None = None
            try:
                client = await stack.enter_async_context(S3Transport.connect(settings, logger=logger))
            except (BotoCoreError, ValueError) as exc:
                logger.warning("remote_store_unavailable", bucket=settings.bucket, endpoint=settings.endpoint, error=str(exc))
            else:
                logger.info("remote_store_created", bucket=settings.bucket, endpoint=settings.endpoint)
            yield cls(client, settings.bucket, settings.max_concurrency, logger)

    async def _pages(self, client: ObjectStorageClient, prefix: str) -> AsyncGenerator[ListPage, None]:
        token: str | None = None
        while True:
            page = await client.list_page(self.bucket, prefix, token)
            self.logger.debug("remote_list_page", bucket=self.bucket, prefix=prefix, keys=len(page.keys), truncated=page.is_truncated)
            yield page
            if not page.is_truncated:
                return
            if not page.next_token:
                self.logger.warning("remote_list_missing_token", bucket=self.bucket, prefix=prefix)
                return
            token = page.next_token

    async def count(self, prefix: str | None = None, timeout: float | None = None) -> int:
        """Number of objects under ``prefix``; best effort, ``0`` on any failure.

        When ``timeout`` expires the pages counted so far are returned.
        """
        if self.client is None:
            return 0
        total = 0
        try:
            with anyio.move_on_after(timeout):
                async with aclosing(self._pages(self.client, prefix or "")) as pages:
                    async for page in pages:
                        total += len(page.keys)
        except Exception as exc:
            self.logger.warning("remote_count_failed", bucket=self.bucket, prefix=prefix, error=str(exc))
            return 0
        return total

    async def _fetch(
        self,
        client: ObjectStorageClient,
        cls: type[T],
        key: str,
        slots: list[T | None],
        index: int,
        limiter: anyio.CapacityLimiter,
    ) -> None:
        async with limiter:
            try:
                response = await client.get(self.bucket, key)
                if not response.ok:
                    self.logger.warning("remote_get_all_skipped", key=key, status=response.status)
                    return
                slots[index] = decode(cls, response.body)
            except Exception as exc:
                self.logger.warning("remote_get_all_skipped", key=key, error=str(exc))

    async def get_all(
        self,
        cls: type[T],
        name: str = "",
        prefix: str | None = None,
        timeout: float | None = None,
    ) -> list[T]:
        """Decode every object listed under ``prefix``/``name``.

        Pages are walked one after the other, the objects of a page are
        fetched concurrently. An object that cannot be fetched or decoded is
        skipped, it never fails the whole call. A listing error, or
        ``timeout`` expiring, ends the walk with whatever was collected.
        """
        results: list[T] = []
        if self.client is None:
            return results
        scope = listing_prefix(name, prefix)
        limiter = anyio.CapacityLimiter(max(1, self.max_concurrency))
        try:
            with anyio.move_on_after(timeout):
                async with aclosing(self._pages(self.client, scope)) as pages:
                    async for page in pages:
                        slots: list[T | None] = [None] * len(page.keys)
                        try:
                            async with anyio.create_task_group() as tg:
                                for index, key in enumerate(page.keys):
                                    tg.start_soon(self._fetch, self.client, cls, key, slots, index, limiter)
                        finally:
                            results.extend(value for value in slots if value is not None)
        except Exception as exc:
            self.logger.warning("remote_get_all_failed", bucket=self.bucket, prefix=scope, error=str(exc))
        return results

    async def get(self, cls: type[T], name: str, prefix: str | None = None) -> T | Failure:
        if _blank(name):
            return Failure.validation("name is required")
        if self.client is None:
            return Failure.unavailable(self.bucket)
        key = compose_key(name, prefix=prefix)
        try:
            response = await self.client.get(self.bucket, key)
            if not response.ok:
                return Failure.not_found(f"{key}: status {response.status}")
            value = decode(cls, response.body)
        except ValidationError as exc:
            self.logger.warning("remote_get_decode_failed", key=key, error=str(exc))
            return Failure.not_found(f"{key}: undecodable")
        except Exception as exc:
            self.logger.warning("remote_get_failed", key=key, error=str(exc))
            return Failure.transport(str(exc))
        if value is None:
            return Failure.not_found(f"{key}: empty")
        return value

    async def add(self, value: T, name: str, prefix: str | None = None) -> T | Failure:
        """Write ``value``; the service decides whether an existing object is replaced."""
        if value is None or _blank(name):
            return Failure.validation("value and name are required")
        if self.client is None:
            return Failure.unavailable(self.bucket)
        key = compose_key(name, prefix=prefix)
        try:
            body = encode(value)
        except PydanticSerializationError as exc:
            self.logger.warning("remote_add_unserializable", key=key, error=str(exc))
            return Failure.validation(str(exc))
        try:
            response = await self.client.put(self.bucket, key, body)
        except Exception as exc:
            self.logger.warning("remote_add_failed", key=key, error=str(exc))
            return Failure.transport(str(exc))
        if not response.ok:
            self.logger.warning("remote_add_failed", key=key, status=response.status)
            return Failure.transport(f"{key}: status {response.status}")
        self.logger.info("remote_add", bucket=self.bucket, key=key)
        return value

    async def delete(self, name: str, prefix: str | None = None) -> bool:
        if _blank(name) or self.client is None:
            return False
        key = compose_key(name, prefix=prefix)
        self.logger.info("remote_delete", bucket=self.bucket, key=key)
        try:
            response = await self.client.delete(self.bucket, key)
        except Exception as exc:
            self.logger.warning("remote_delete_failed", key=key, error=str(exc))
            return False
        return response.ok

    async def _exists(self, client: ObjectStorageClient, key: str) -> bool:
        response = await client.head(self.bucket, key)
        if response.ok:
            return True
        if response.status == 404:
            return False
        # only a clean 404 counts as absent, anything else fails the probe
        raise ProbeError(key, response.status)

    async def _precreate(self, value: Any, name: str, prefix: str | None) -> None:
        await self.add(value, name, prefix)

    async def update(self, name: str, value: T, prefix: str | None = None) -> bool:
        """Write ``value``, creating the object when it does not exist yet.

        The existence probe and the final put are separate round trips, so a
        concurrent writer can slip in between them; the final put wins and
        its status alone decides the result.
        """
        if _blank(name) or value is None or self.client is None:
            return False
        key = compose_key(name, prefix=prefix)
        try:
            body = encode(value)
            exists = await self._exists(self.client, key)
            async with anyio.create_task_group() as tg:
                if not exists:
                    self.logger.info("remote_update_creating", bucket=self.bucket, key=key)
                    tg.start_soon(self._precreate, value, name, prefix)
                response = await self.client.put(self.bucket, key, body)
        except Exception as exc:
            self.logger.warning("remote_update_failed", key=key, error=str(exc))
            return False
        self.logger.info("remote_update", bucket=self.bucket, key=key, status=response.status)
        return response.ok
