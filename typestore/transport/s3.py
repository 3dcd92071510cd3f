from __future__ import annotations

import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any
from urllib.parse import unquote_plus
from xml.etree import ElementTree

import boto3
import structlog
from botocore.client import BaseClient
from botocore.config import Config
from httpx import AsyncClient

from typestore.config import Settings
from typestore.transport import ListPage, ObjectResponse, ObjectStorageClient

LOGGER = structlog.get_logger(__name__)

_XMLNS = re.compile(rb'\sxmlns="[^"]+"')


def make_signer(settings: Settings) -> BaseClient:
    """boto3 S3 client used only to presign requests, it never opens a connection."""
    return boto3.session.Session().client(
        "s3",
        endpoint_url=settings.endpoint,
        region_name=settings.region,
        aws_access_key_id=settings.access_key_id,
        aws_secret_access_key=settings.secret_access_key,
        config=Config(
            signature_version="s3v4",
            s3={"addressing_style": settings.addressing_style},
        ),
    )


def parse_list_page(content: bytes) -> ListPage:
    """Parse a ``ListBucketResult`` document from ListObjectsV2."""
    root = ElementTree.fromstring(_XMLNS.sub(b"", content, count=1))
    url_encoded = root.findtext("EncodingType") == "url"
    keys = []
    for item in root.findall("Contents"):
        key = item.findtext("Key") or ""
        keys.append(unquote_plus(key) if url_encoded else key)
    return ListPage(
        keys=keys,
        next_token=root.findtext("NextContinuationToken") or None,
        is_truncated=root.findtext("IsTruncated") == "true",
    )


@dataclass
class S3Transport(ObjectStorageClient):
    client: AsyncClient
    signer: BaseClient
    expires_in: int = 300
    logger: Any = LOGGER

    @classmethod
    @asynccontextmanager
    async def connect(cls, settings: Settings, logger: Any = None) -> AsyncIterator[S3Transport]:
        signer = make_signer(settings)
        async with AsyncClient(timeout=settings.timeout) as client:
            yield cls(client, signer, logger=logger or LOGGER)

    def _url(self, operation: str, **params: str) -> str:
        return self.signer.generate_presigned_url(
            operation, Params=params, ExpiresIn=self.expires_in
        )

    async def list_page(self, bucket: str, prefix: str, continuation_token: str | None = None) -> ListPage:
        params = {"Bucket": bucket}
        if prefix:
            params["Prefix"] = prefix
        if continuation_token:
            params["ContinuationToken"] = continuation_token
        response = await self.client.get(self._url("list_objects_v2", **params))
        response.raise_for_status()
        page = parse_list_page(response.content)
        self.logger.debug("s3_list_page", bucket=bucket, prefix=prefix, keys=len(page.keys), truncated=page.is_truncated)
        return page

    async def get(self, bucket: str, key: str) -> ObjectResponse:
        response = await self.client.get(self._url("get_object", Bucket=bucket, Key=key))
        self.logger.debug("s3_get", bucket=bucket, key=key, status=response.status_code)
        return ObjectResponse(response.status_code, response.content)

    async def put(self, bucket: str, key: str, body: bytes) -> ObjectResponse:
        response = await self.client.put(
            self._url("put_object", Bucket=bucket, Key=key),
            content=body,
            headers={"Content-Type": "application/json"},
        )
        self.logger.debug("s3_put", bucket=bucket, key=key, status=response.status_code, size=len(body))
        return ObjectResponse(response.status_code)

    async def delete(self, bucket: str, key: str) -> ObjectResponse:
        response = await self.client.delete(self._url("delete_object", Bucket=bucket, Key=key))
        self.logger.debug("s3_delete", bucket=bucket, key=key, status=response.status_code)
        return ObjectResponse(response.status_code)

    async def head(self, bucket: str, key: str) -> ObjectResponse:
        response = await self.client.head(self._url("head_object", Bucket=bucket, Key=key))
        self.logger.debug("s3_head", bucket=bucket, key=key, status=response.status_code)
        return ObjectResponse(response.status_code)
