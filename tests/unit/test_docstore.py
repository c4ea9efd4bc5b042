"""Tests for the Docstore startup facade."""

import pytest

from tests.conftest import make_options
from tests.fixtures.documents import make_registry
from tests.fixtures.fake_dynamodb import FakeDynamoDB, stub_client
from zae_docstore import ConfigurationError, Docstore, DocumentOptions, DocumentRepository


class TestDocstore:
    """Tests for Docstore."""

    def test_invalid_configuration_fails_before_io(self) -> None:
        client = stub_client(FakeDynamoDB())
        with pytest.raises(ConfigurationError):
            Docstore(make_options(endpoint_uri=""), make_registry(), client=client)
        client.get.assert_not_awaited()

    def test_unregistered_schema_fails_at_construction(self) -> None:
        options = make_options(
            [DocumentOptions(name="notes", partition_key_name="group", document_schema="Missing")]
        )
        with pytest.raises(ConfigurationError):
            Docstore(options, make_registry(), client=stub_client(FakeDynamoDB()))

    def test_repository_lookup(self) -> None:
        store = Docstore(make_options(), make_registry(), client=stub_client(FakeDynamoDB()))
        assert isinstance(store.repository("notes"), DocumentRepository)
        with pytest.raises(ConfigurationError):
            store.repository("missing")

    async def test_provisions_on_enter(self) -> None:
        dynamodb = FakeDynamoDB()
        client = stub_client(dynamodb)

        async with Docstore(make_options(), make_registry(), client=client) as store:
            assert store.last_report is not None
            assert store.last_report.succeeded == ["notes"]
            assert "testdb.notes" in dynamodb.tables

        client.close.assert_awaited_once()

    async def test_provisioning_can_be_deferred(self) -> None:
        dynamodb = FakeDynamoDB()
        store = Docstore(
            make_options(),
            make_registry(),
            client=stub_client(dynamodb),
            provision_on_startup=False,
        )
        async with store:
            assert store.last_report is None
        assert dynamodb.calls == []
