from hashlib import md5
from typing import Annotated, AsyncIterator
from xml.etree import ElementTree

import pytest
from fastapi import APIRouter, Depends, FastAPI, Query, Request, Response
from httpx import ASGITransport, AsyncClient

from typestore.config import Settings
from typestore.transport.memory import InMemoryTransport
from typestore.transport.s3 import S3Transport, make_signer

S3_XMLNS = "http://s3.amazonaws.com/doc/2006-03-01/"

router = APIRouter()


def get_backend(request: Request) -> InMemoryTransport:
    return request.app.state.backend


Backend = Annotated[InMemoryTransport, Depends(get_backend)]


def make_app(backend: InMemoryTransport) -> FastAPI:
    """Path style S3 look-alike serving ``backend``, enough for presigned requests."""
    app = FastAPI()
    app.include_router(router)
    app.state.backend = backend
    return app


def list_bucket_result(bucket: str, prefix: str, keys: list[str], truncated: bool, token: str | None) -> bytes:
    root = ElementTree.Element("ListBucketResult", xmlns=S3_XMLNS)
    ElementTree.SubElement(root, "Name").text = bucket
    ElementTree.SubElement(root, "Prefix").text = prefix
    ElementTree.SubElement(root, "KeyCount").text = str(len(keys))
    ElementTree.SubElement(root, "IsTruncated").text = "true" if truncated else "false"
    for key in keys:
        contents = ElementTree.SubElement(root, "Contents")
        ElementTree.SubElement(contents, "Key").text = key
    if token:
        ElementTree.SubElement(root, "NextContinuationToken").text = token
    return ElementTree.tostring(root, encoding="utf-8", xml_declaration=True)


@router.get("/{bucket}")
async def list_objects(
    bucket: str,
    backend: Backend,
    prefix: str = "",
    continuation_token: Annotated[str | None, Query(alias="continuation-token")] = None,
) -> Response:
    page = await backend.list_page(bucket, prefix, continuation_token)
    body = list_bucket_result(bucket, prefix, page.keys, page.is_truncated, page.next_token)
    return Response(content=body, media_type="application/xml")


@router.get("/{bucket}/{key:path}")
async def download_object(bucket: str, key: str, backend: Backend) -> Response:
    result = await backend.get(bucket, key)
    return Response(status_code=result.status, content=result.body)


@router.put("/{bucket}/{key:path}")
async def upload_object(bucket: str, key: str, request: Request, backend: Backend) -> Response:
    body = await request.body()
    result = await backend.put(bucket, key, body)
    return Response(status_code=result.status, headers={"ETag": md5(body).hexdigest()})


@router.head("/{bucket}/{key:path}")
async def head_object(bucket: str, key: str, backend: Backend) -> Response:
    result = await backend.head(bucket, key)
    return Response(status_code=result.status)


@router.delete("/{bucket}/{key:path}")
async def delete_object(bucket: str, key: str, backend: Backend) -> Response:
    result = await backend.delete(bucket, key)
    return Response(status_code=result.status)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        bucket="bucket",
        endpoint="http://s3.test",
        access_key_id="abc",
        secret_access_key="123",
    )


@pytest.fixture
def backend() -> InMemoryTransport:
    return InMemoryTransport(page_size=2)


@pytest.fixture
async def s3(backend: InMemoryTransport, settings: Settings) -> AsyncIterator[S3Transport]:
    """S3 transport whose requests are answered in process by the fake service."""
    async with AsyncClient(transport=ASGITransport(app=make_app(backend))) as client:
        yield S3Transport(client, make_signer(settings))
