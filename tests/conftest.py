"""Pytest fixtures for zae-docstore tests."""

import asyncio
from collections.abc import Awaitable
from typing import Any
from unittest.mock import patch

import pytest
from moto import mock_aws

from zae_docstore import (
    CapacityProvisioner,
    DocstoreClient,
    DocstoreOptions,
    DocumentOptions,
    DocumentRepository,
)

ENDPOINT_URI = "https://dynamodb.us-east-1.amazonaws.com"


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mock AWS credentials for moto."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    # Unset AWS_ENDPOINT_URL to ensure moto intercepts requests
    monkeypatch.delenv("AWS_ENDPOINT_URL", raising=False)


@pytest.fixture
def mock_dynamodb(aws_credentials):
    """Mock DynamoDB for tests."""
    with mock_aws():
        yield


def _patch_aiobotocore_response():
    """
    Patch aiobotocore to work with moto's sync responses.

    Moto returns botocore.awsrequest.AWSResponse which has sync content,
    but aiobotocore expects async content. This patch wraps the response
    handling to convert sync content to async.

    See: https://github.com/aio-libs/aiobotocore/discussions/1300
    """
    from aiobotocore import endpoint

    original_convert = endpoint.convert_to_response_dict

    async def patched_convert(http_response, operation_model):
        # If content is not awaitable (moto's sync response), wrap it
        if hasattr(http_response, "_content") and not isinstance(http_response._content, Awaitable):
            fut: asyncio.Future[bytes] = asyncio.Future()
            fut.set_result(http_response.content)
            http_response._content = fut
        return await original_convert(http_response, operation_model)

    return patch.object(endpoint, "convert_to_response_dict", patched_convert)


def make_options(
    documents: list[DocumentOptions] | None = None, **overrides: Any
) -> DocstoreOptions:
    """Valid store options with a single ``notes`` collection unless overridden."""
    settings: dict[str, Any] = {
        "access_key": "testing",
        "secret_key": "testing",
        "database_name": "testdb",
        "endpoint_uri": ENDPOINT_URI,
        "documents": documents
        if documents is not None
        else [DocumentOptions(name="notes", partition_key_name="group", document_schema="Note")],
    }
    settings.update(overrides)
    return DocstoreOptions(**settings)


@pytest.fixture
async def docstore_client(mock_dynamodb):
    """A DocstoreClient talking to moto."""
    with _patch_aiobotocore_response():
        client = DocstoreClient(region="us-east-1")
        yield client
        await client.close()


async def create_repository(
    client: DocstoreClient,
    options: DocstoreOptions,
    document_schema: type,
    name: str | None = None,
) -> DocumentRepository[Any]:
    """Provision a collection's table and bind a repository to it."""
    document_options = options.document(name or options.documents[0].name)
    provisioner = CapacityProvisioner(client, options)
    await provisioner.ensure_database()
    await provisioner.ensure_collection(document_options)
    return DocumentRepository(client, document_schema, options, document_options)
