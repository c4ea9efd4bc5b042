"""DynamoDB-backed document repository."""

import dataclasses
import time
from collections.abc import AsyncIterator, Sequence
from typing import Any, Generic, TypeVar

from botocore.exceptions import BotoCoreError, ClientError

from . import schema
from .client import DocstoreClient
from .config import DocstoreOptions, DocumentOptions
from .consistency import ConsistencyLevel, read_options, resolve_consistency_level
from .exceptions import (
    BackingStoreError,
    ConfigurationError,
    DeleteAllError,
    ValidationError,
)
from .models import Document, supports_expiry
from .naming import table_name
from .query import MAX_IN_OPERANDS, build_id_filter
from .serialization import deserialize_map, serialize_map, serialize_value
from .structured_logging import StructuredLogger

T = TypeVar("T", bound=Document)

logger = StructuredLogger(__name__)

STORE_ERRORS = (ClientError, BotoCoreError)


def _require(field: str, value: str | None) -> None:
    if value is None or value == "":
        raise ValidationError(field, value, f"{field} cannot be empty")


class DocumentRepository(Generic[T]):
    """
    Async repository for one collection and one document schema.

    Every operation is scoped to a partition ("group") except ``query``
    without a group, which scans the whole collection. When soft delete is
    enabled and the schema is an ExpiringDocument, ``delete`` tombstones the
    record instead of removing it and every read path hides tombstones.

    The repository holds no mutable state after construction, so one
    instance can serve concurrent callers.

    Example:
        repo = DocumentRepository(client, Note, options, options.document("notes"))
        await repo.set("tenant-a", Note(id="n1", value="hello"))
        note = await repo.get("tenant-a", "n1")
    """

    def __init__(
        self,
        client: DocstoreClient,
        document_schema: type[T],
        options: DocstoreOptions,
        document_options: DocumentOptions,
    ) -> None:
        """
        Bind a repository to a collection.

        Args:
            client: Shared store client
            document_schema: Dataclass subclass of Document stored in the collection
            options: Store-wide options (soft delete, consistency, database)
            document_options: The collection's options

        Raises:
            ConfigurationError: If the partition key field does not exist on
                the schema or is not writable
        """
        self._client = client
        self._schema = document_schema
        self.collection_name = document_options.name
        self.table_name = table_name(options.database_name, document_options.name)
        self.partition_key_name = document_options.partition_key_name
        self._default_ttl_seconds = document_options.default_ttl_seconds
        self._soft_delete_expiry = options.soft_delete_expiry_seconds

        self._field_names = self._validate_schema(document_schema, self.partition_key_name)

        self.supports_expiry = supports_expiry(document_schema)
        self.soft_delete_enabled = options.enable_soft_delete and self.supports_expiry

        self.consistency_level = resolve_consistency_level(options.consistency_level)
        if options.consistency_level and self.consistency_level is None:
            logger.warning(
                "Unrecognized consistency level, using store default",
                collection_name=self.collection_name,
                consistency_level=options.consistency_level,
            )

    @staticmethod
    def _validate_schema(document_schema: type[Document], partition_key_name: str) -> list[str]:
        """Check the schema and return the names of its init fields."""
        if not (
            isinstance(document_schema, type)
            and issubclass(document_schema, Document)
            and dataclasses.is_dataclass(document_schema)
        ):
            raise ConfigurationError(
                "document_schema",
                document_schema,
                "Document schemas must be dataclass subclasses of Document",
            )

        fields = {f.name: f for f in dataclasses.fields(document_schema)}
        name = document_schema.__name__

        if partition_key_name == schema.ID_KEY:
            raise ConfigurationError(
                "partition_key_name",
                partition_key_name,
                f"Document type {name} cannot use '{schema.ID_KEY}' as its partition key",
            )

        if partition_key_name not in fields:
            raise ConfigurationError(
                "partition_key_name",
                partition_key_name,
                f"Document type {name} does not contain a field named {partition_key_name}",
            )

        params = getattr(document_schema, "__dataclass_params__", None)
        if (params is not None and params.frozen) or not fields[partition_key_name].init:
            raise ConfigurationError(
                "partition_key_name",
                partition_key_name,
                f"Field {partition_key_name} of document type {name} is not writable",
            )

        return [f.name for f in fields.values() if f.init]

    def _now_ms(self) -> int:
        """Current time in milliseconds."""
        return int(time.time() * 1000)

    # -------------------------------------------------------------------------
    # Item helpers
    # -------------------------------------------------------------------------

    def _key(self, group: str, document_id: str) -> dict[str, Any]:
        return {
            self.partition_key_name: {"S": group},
            schema.ID_KEY: {"S": document_id},
        }

    def _to_item(self, document: T) -> dict[str, Any]:
        """Serialize a document, adding the store TTL timestamp when it expires."""
        data = dataclasses.asdict(document)

        ttl_seconds = self._default_ttl_seconds
        item_ttl = data.get("ttl") if self.supports_expiry else None
        if item_ttl is not None:
            ttl_seconds = item_ttl

        item = serialize_map(data)
        item[schema.DOCUMENT_ID_ATTR] = serialize_value(document.id)
        expires_at = schema.calculate_expires_at(self._now_ms(), ttl_seconds)
        if expires_at is not None:
            item[schema.EXPIRES_AT_ATTR] = serialize_value(expires_at)
        return item

    def _from_item(self, item: dict[str, Any]) -> T:
        data = deserialize_map(item)
        kwargs = {name: data[name] for name in self._field_names if name in data}
        return self._schema(**kwargs)

    def _is_visible(self, item: dict[str, Any], now_ms: int) -> bool:
        """False for expired items and, under soft delete, for tombstones."""
        if schema.is_expired(item, now_ms):
            return False
        if self.soft_delete_enabled and item.get("deleted", {}).get("BOOL") is True:
            return False
        return True

    def _store_error(
        self,
        error: Exception,
        operation: str,
        group: str | None = None,
        document_id: str | None = None,
        consistency: ConsistencyLevel | None = None,
    ) -> BackingStoreError:
        """Log a backing store failure with its context and wrap it."""
        logger.error(
            "Backing store call failed",
            exc_info=True,
            collection_name=self.collection_name,
            partition_key=group,
            document_key=document_id,
            operation=operation,
            consistency_level=consistency.value if consistency else None,
        )
        return BackingStoreError(
            f"Document store {operation} failed: {error}",
            error,
            operation=operation,
            collection=self.collection_name,
            group=group,
            document_id=document_id,
        )

    async def _pages(self, operation: str, **kwargs: Any) -> AsyncIterator[dict[str, Any]]:
        """Yield raw items from a Query or Scan, following LastEvaluatedKey."""
        client = await self._client.get()
        call = client.query if operation == "query" else client.scan
        last_evaluated_key: dict[str, Any] | None = None
        while True:
            if last_evaluated_key:
                kwargs["ExclusiveStartKey"] = last_evaluated_key
            page = await call(**kwargs)
            for item in page.get("Items", []):
                yield item
            last_evaluated_key = page.get("LastEvaluatedKey")
            if not last_evaluated_key:
                break

    def _partition_query(self, group: str, consistency: ConsistencyLevel | None) -> dict[str, Any]:
        return {
            "TableName": self.table_name,
            "KeyConditionExpression": "#pk = :pk",
            "ExpressionAttributeNames": {"#pk": self.partition_key_name},
            "ExpressionAttributeValues": {":pk": {"S": group}},
            **read_options(consistency),
        }

    async def _collect(
        self,
        operation: str,
        group: str,
        consistency: ConsistencyLevel | None,
        **kwargs: Any,
    ) -> list[T]:
        now_ms = self._now_ms()
        documents: dict[str, T] = {}
        try:
            async for item in self._pages("query", **kwargs):
                if self._is_visible(item, now_ms):
                    document = self._from_item(item)
                    documents.setdefault(document.id, document)
        except STORE_ERRORS as e:
            raise self._store_error(e, operation, group, consistency=consistency) from e
        return list(documents.values())

    # -------------------------------------------------------------------------
    # Read operations
    # -------------------------------------------------------------------------

    async def get(
        self,
        group: str,
        document_id: str,
        consistency: ConsistencyLevel | None = None,
    ) -> T | None:
        """
        Get a document by id.

        Args:
            group: Partition key value
            document_id: Document id
            consistency: Per-call consistency override

        Returns:
            The document, or None if it does not exist, has expired, or is
            soft-deleted

        Raises:
            ValidationError: If group or document_id is empty
            BackingStoreError: If the store call fails
        """
        _require("group", group)
        _require("id", document_id)
        level = consistency or self.consistency_level

        try:
            client = await self._client.get()
            response = await client.get_item(
                TableName=self.table_name,
                Key=self._key(group, document_id),
                **read_options(level),
            )
        except STORE_ERRORS as e:
            raise self._store_error(e, "get", group, document_id, level) from e

        item = response.get("Item")
        if not item or not self._is_visible(item, self._now_ms()):
            return None
        return self._from_item(item)

    async def get_all(
        self,
        group: str,
        consistency: ConsistencyLevel | None = None,
    ) -> list[T]:
        """Get every visible document in a partition."""
        _require("group", group)
        level = consistency or self.consistency_level
        return await self._collect("get_all", group, level, **self._partition_query(group, level))

    async def get_by_ids(
        self,
        group: str,
        ids: Sequence[str],
        consistency: ConsistencyLevel | None = None,
    ) -> list[T]:
        """
        Get the documents of a partition whose ids are in ``ids``.

        Issues a partition query with a parameterized id filter, one query
        per MAX_IN_OPERANDS distinct ids. Ids that do not exist are omitted;
        each document is returned at most once. An empty ``ids`` returns the
        whole partition.

        Raises:
            ValidationError: If group is empty
            BackingStoreError: If the store call fails
        """
        _require("group", group)
        level = consistency or self.consistency_level
        unique_ids = list(dict.fromkeys(ids or []))

        if not unique_ids:
            return await self._collect(
                "get_by_ids", group, level, **self._partition_query(group, level)
            )

        documents: dict[str, T] = {}
        for start in range(0, len(unique_ids), MAX_IN_OPERANDS):
            id_filter = build_id_filter(unique_ids[start : start + MAX_IN_OPERANDS])
            filter_kwargs = id_filter.as_kwargs()

            kwargs = self._partition_query(group, level)
            kwargs["FilterExpression"] = filter_kwargs["FilterExpression"]
            kwargs["ExpressionAttributeNames"].update(filter_kwargs["ExpressionAttributeNames"])
            kwargs["ExpressionAttributeValues"].update(filter_kwargs["ExpressionAttributeValues"])

            for document in await self._collect("get_by_ids", group, level, **kwargs):
                documents.setdefault(document.id, document)
        return list(documents.values())

    async def query(
        self,
        group: str | None = None,
        max_count: int | None = None,
        consistency: ConsistencyLevel | None = None,
    ) -> AsyncIterator[T]:
        """
        Lazily iterate visible documents.

        Without a group the whole collection is scanned, which reads every
        partition and costs accordingly.

        Args:
            group: Partition key value, or None for a cross-partition scan
            max_count: Stop after this many documents (None for no limit)
            consistency: Per-call consistency override

        Raises:
            ValidationError: If group is empty (rather than None) or
                max_count is negative
            BackingStoreError: If the store call fails
        """
        if group is not None:
            _require("group", group)
        if max_count is not None and max_count < 0:
            raise ValidationError("max_count", max_count, "max_count cannot be negative")
        if max_count == 0:
            return

        level = consistency or self.consistency_level
        if group is not None:
            operation = "query"
            kwargs = self._partition_query(group, level)
        else:
            operation = "scan"
            kwargs = {"TableName": self.table_name, **read_options(level)}

        now_ms = self._now_ms()
        count = 0
        try:
            async for item in self._pages(operation, **kwargs):
                if not self._is_visible(item, now_ms):
                    continue
                yield self._from_item(item)
                count += 1
                if max_count is not None and count >= max_count:
                    return
        except STORE_ERRORS as e:
            raise self._store_error(e, operation, group, consistency=level) from e

    # -------------------------------------------------------------------------
    # Write operations
    # -------------------------------------------------------------------------

    async def set(self, group: str, document: T) -> T:
        """
        Create or fully replace a document.

        There is no version check: concurrent writers to the same id
        overwrite each other (last write wins). An empty partition key field
        on the document is filled in with ``group``.

        Returns:
            The stored document

        Raises:
            ValidationError: If group or the document id is empty, or the
                document's partition key differs from group
            BackingStoreError: If the store call fails
        """
        _require("group", group)
        if document is None:
            raise ValidationError("document", document, "document cannot be None")
        _require("id", document.id)

        current = getattr(document, self.partition_key_name)
        if current is None or current == "":
            setattr(document, self.partition_key_name, group)
        elif current != group:
            raise ValidationError(
                self.partition_key_name,
                current,
                f"Document partition key does not match group '{group}'",
            )

        await self._put(group, document, "set")
        return document

    async def _put(self, group: str, document: T, operation: str) -> None:
        try:
            client = await self._client.get()
            await client.put_item(TableName=self.table_name, Item=self._to_item(document))
        except STORE_ERRORS as e:
            raise self._store_error(
                e, operation, group, document.id, self.consistency_level
            ) from e

    async def delete(self, group: str, document_id: str) -> None:
        """
        Delete a document.

        Under soft delete (expiring schemas only) the document is reloaded
        and re-upserted with ``deleted = True`` and the configured expiry
        instead. Deleting a missing document is not an error.

        Raises:
            ValidationError: If group or document_id is empty
            BackingStoreError: If the store call fails
        """
        _require("group", group)
        _require("id", document_id)

        if self.soft_delete_enabled:
            await self._soft_delete(group, document_id)
        else:
            await self._hard_delete(group, document_id)

    async def _soft_delete(self, group: str, document_id: str) -> None:
        document = await self.get(group, document_id)
        if document is None:
            return

        document.deleted = True  # type: ignore[attr-defined]
        document.ttl = self._soft_delete_expiry  # type: ignore[attr-defined]
        await self._put(group, document, "delete")

    async def _hard_delete(self, group: str, document_id: str) -> None:
        try:
            client = await self._client.get()
            response = await client.delete_item(
                TableName=self.table_name,
                Key=self._key(group, document_id),
                ReturnValues="ALL_OLD",
            )
        except STORE_ERRORS as e:
            raise self._store_error(
                e, "delete", group, document_id, self.consistency_level
            ) from e

        if not response.get("Attributes"):
            logger.debug(
                "Document not found",
                collection_name=self.collection_name,
                partition_key=group,
                document_key=document_id,
                operation="delete",
            )

    async def delete_all(self, group: str) -> None:
        """
        Delete every visible document in a partition, one at a time.

        Not atomic: if a delete fails, documents already deleted stay
        deleted and the rest are left untouched.

        Raises:
            ValidationError: If group is empty
            BackingStoreError: If listing the partition fails
            DeleteAllError: If a delete fails partway through
        """
        documents = await self.get_all(group)
        ids = [document.id for document in documents]

        for index, document_id in enumerate(ids):
            try:
                await self.delete(group, document_id)
            except BackingStoreError as e:
                raise DeleteAllError(
                    e.cause or e,
                    collection=self.collection_name,
                    group=group,
                    deleted_ids=ids[:index],
                    failed_id=document_id,
                    remaining_ids=ids[index + 1 :],
                ) from e
