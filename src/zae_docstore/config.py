"""Configuration models for zae-docstore."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlparse

from .exceptions import ConfigurationError
from .naming import table_name, validate_database_name, validate_name
from .schema import NO_EXPIRY, ttl_days_to_seconds

DEFAULT_SOFT_DELETE_EXPIRY_SECONDS = 20
DEFAULT_MAX_RETRY_WAIT_SECONDS = 30

# camelCase configuration keys accepted alongside their snake_case names
_STORE_KEYS = {
    "accessKey": "access_key",
    "secretKey": "secret_key",
    "databaseName": "database_name",
    "endpointUri": "endpoint_uri",
    "consistencyLevel": "consistency_level",
    "directConnection": "direct_connection",
    "bulkExecutionEnabled": "bulk_execution_enabled",
    "enableSoftDelete": "enable_soft_delete",
    "softDeleteExpirySeconds": "soft_delete_expiry_seconds",
    "maxRetryWaitSeconds": "max_retry_wait_seconds",
}

_DOCUMENT_KEYS = {
    "timeToLiveDays": "time_to_live_days",
    "partitionKeyName": "partition_key_name",
    "documentSchema": "document_schema",
    "offeredThroughput": "offered_throughput",
    "setThroughputOnStartup": "set_throughput_on_startup",
    "enableAutoScale": "enable_auto_scale",
}


def _normalize_keys(data: dict[str, Any], aliases: dict[str, str]) -> dict[str, Any]:
    return {aliases.get(key, key): value for key, value in data.items()}


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class DocumentOptions:
    """
    Configuration for one collection.

    Attributes:
        name: Logical collection name
        partition_key_name: Schema field holding the partition key
        document_schema: Registered schema name (see SchemaRegistry)
        time_to_live_days: Default expiry for records, or -1 for none
        offered_throughput: Target throughput (manual units or autoscale max)
        set_throughput_on_startup: Reconcile throughput when provisioning
        enable_auto_scale: Use autoscale instead of manual throughput
    """

    name: str
    partition_key_name: str
    document_schema: str
    time_to_live_days: int = NO_EXPIRY
    offered_throughput: int = 0
    set_throughput_on_startup: bool = True
    enable_auto_scale: bool = False

    @property
    def default_ttl_seconds(self) -> int | None:
        """Default record expiry in seconds, None when records never expire by default."""
        return ttl_days_to_seconds(self.time_to_live_days)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DocumentOptions:
        d = _normalize_keys(data, _DOCUMENT_KEYS)
        return cls(
            name=d.get("name", ""),
            partition_key_name=d.get("partition_key_name", ""),
            document_schema=d.get("document_schema", ""),
            time_to_live_days=int(d.get("time_to_live_days", NO_EXPIRY)),
            offered_throughput=int(d.get("offered_throughput", 0)),
            set_throughput_on_startup=bool(d.get("set_throughput_on_startup", True)),
            enable_auto_scale=bool(d.get("enable_auto_scale", False)),
        )

    def validate(self) -> None:
        """
        Validate this collection's settings.

        Raises:
            ConfigurationError: If a setting is missing or out of range
        """
        validate_name("documents.name", self.name)
        if not self.partition_key_name:
            raise ConfigurationError(
                "documents.partition_key_name",
                self.partition_key_name,
                f"Collection {self.name} is missing its partition key name",
            )
        if not self.document_schema:
            raise ConfigurationError(
                "documents.document_schema",
                self.document_schema,
                f"Collection {self.name} is missing its document schema",
            )
        if self.time_to_live_days != NO_EXPIRY and self.time_to_live_days <= 0:
            raise ConfigurationError(
                "documents.time_to_live_days",
                self.time_to_live_days,
                f"Must be a positive number of days or {NO_EXPIRY} for no expiry",
            )
        if self.offered_throughput < 0:
            raise ConfigurationError(
                "documents.offered_throughput",
                self.offered_throughput,
                "Must not be negative",
            )


@dataclass
class DocstoreOptions:
    """
    Configuration for the document store.

    Attributes:
        access_key: Access key id used to sign requests
        secret_key: Secret access key paired with access_key
        database_name: Logical database (catalog table) name
        endpoint_uri: Absolute URI of the store endpoint
        region: Region name used for request signing
        consistency_level: Default consistency token (see ConsistencyLevel)
        direct_connection: Keep long-lived TCP connections to the endpoint
        bulk_execution_enabled: Allow a larger connection pool for bulk work
        enable_soft_delete: Tombstone expiring documents instead of deleting them
        soft_delete_expiry_seconds: ttl applied to tombstoned documents
        max_retry_wait_seconds: Upper bound on a single request's wait
        documents: Collections to serve and provision
    """

    access_key: str = ""
    secret_key: str = ""
    database_name: str = ""
    endpoint_uri: str = ""
    region: str = "us-east-1"
    consistency_level: str = ""
    direct_connection: bool = False
    bulk_execution_enabled: bool = False
    enable_soft_delete: bool = False
    soft_delete_expiry_seconds: int = DEFAULT_SOFT_DELETE_EXPIRY_SECONDS
    max_retry_wait_seconds: int = DEFAULT_MAX_RETRY_WAIT_SECONDS
    documents: list[DocumentOptions] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DocstoreOptions:
        """Build options from a configuration mapping (camelCase or snake_case keys)."""
        d = _normalize_keys(data, _STORE_KEYS)
        return cls(
            access_key=d.get("access_key") or "",
            secret_key=d.get("secret_key") or "",
            database_name=d.get("database_name") or "",
            endpoint_uri=d.get("endpoint_uri") or "",
            region=d.get("region") or "us-east-1",
            consistency_level=d.get("consistency_level") or "",
            direct_connection=bool(d.get("direct_connection", False)),
            bulk_execution_enabled=bool(d.get("bulk_execution_enabled", False)),
            enable_soft_delete=bool(d.get("enable_soft_delete", False)),
            soft_delete_expiry_seconds=int(
                d.get("soft_delete_expiry_seconds", DEFAULT_SOFT_DELETE_EXPIRY_SECONDS)
            ),
            max_retry_wait_seconds=int(
                d.get("max_retry_wait_seconds", DEFAULT_MAX_RETRY_WAIT_SECONDS)
            ),
            documents=[DocumentOptions.from_dict(doc) for doc in d.get("documents") or []],
        )

    @classmethod
    def from_yaml(cls, yaml_str: str) -> DocstoreOptions:
        """
        Build options from a YAML document.

        The settings may sit at the top level or under a ``docstore`` key.
        """
        import yaml

        data = yaml.safe_load(yaml_str) or {}
        if not isinstance(data, dict):
            raise ConfigurationError("config", data, "Expected a mapping at the top level")
        if "docstore" in data:
            data = data["docstore"] or {}
        return cls.from_dict(data)

    @classmethod
    def from_environment(cls, documents: list[DocumentOptions] | None = None) -> DocstoreOptions:
        """Create DocstoreOptions from DOCSTORE_* environment variables."""
        return cls(
            access_key=os.environ.get("DOCSTORE_ACCESS_KEY", ""),
            secret_key=os.environ.get("DOCSTORE_SECRET_KEY", ""),
            database_name=os.environ.get("DOCSTORE_DATABASE_NAME", ""),
            endpoint_uri=os.environ.get("DOCSTORE_ENDPOINT_URI", ""),
            region=os.environ.get("DOCSTORE_REGION", "us-east-1"),
            consistency_level=os.environ.get("DOCSTORE_CONSISTENCY_LEVEL", ""),
            direct_connection=_env_bool(os.environ.get("DOCSTORE_DIRECT_CONNECTION", "false")),
            bulk_execution_enabled=_env_bool(
                os.environ.get("DOCSTORE_BULK_EXECUTION_ENABLED", "false")
            ),
            enable_soft_delete=_env_bool(os.environ.get("DOCSTORE_ENABLE_SOFT_DELETE", "false")),
            soft_delete_expiry_seconds=int(
                os.environ.get(
                    "DOCSTORE_SOFT_DELETE_EXPIRY_SECONDS", str(DEFAULT_SOFT_DELETE_EXPIRY_SECONDS)
                )
            ),
            max_retry_wait_seconds=int(
                os.environ.get(
                    "DOCSTORE_MAX_RETRY_WAIT_SECONDS", str(DEFAULT_MAX_RETRY_WAIT_SECONDS)
                )
            ),
            documents=documents or [],
        )

    def validate(self) -> None:
        """
        Fail fast on configuration that cannot work.

        Raises:
            ConfigurationError: If the endpoint URI is missing or not absolute,
                the database name or credentials are missing, or no
                documents are configured
        """
        if not self.endpoint_uri or not self.endpoint_uri.strip():
            raise ConfigurationError(
                "endpoint_uri",
                self.endpoint_uri,
                "The endpoint URI is missing from the configuration",
            )

        parsed = urlparse(self.endpoint_uri)
        if not parsed.scheme or not parsed.netloc:
            raise ConfigurationError(
                "endpoint_uri",
                self.endpoint_uri,
                "The endpoint URI must be a properly formatted absolute URI",
            )

        if not self.database_name or not self.database_name.strip():
            raise ConfigurationError(
                "database_name",
                self.database_name,
                "The database name is missing from the configuration",
            )
        validate_database_name(self.database_name)

        if not self.access_key or not self.access_key.strip():
            raise ConfigurationError(
                "access_key",
                "",
                "The access key is missing from the configuration",
            )
        if not self.secret_key or not self.secret_key.strip():
            raise ConfigurationError(
                "secret_key",
                "",
                "The secret key is missing from the configuration",
            )

        if not self.documents:
            raise ConfigurationError(
                "documents",
                self.documents,
                "The documents collection is missing or empty",
            )

        if self.soft_delete_expiry_seconds <= 0:
            raise ConfigurationError(
                "soft_delete_expiry_seconds",
                self.soft_delete_expiry_seconds,
                "Must be a positive number of seconds",
            )
        if self.max_retry_wait_seconds <= 0:
            raise ConfigurationError(
                "max_retry_wait_seconds",
                self.max_retry_wait_seconds,
                "Must be a positive number of seconds",
            )

        seen: set[str] = set()
        for document in self.documents:
            document.validate()
            if document.name in seen:
                raise ConfigurationError(
                    "documents.name", document.name, "Collection names must be unique"
                )
            seen.add(document.name)
            table_name(self.database_name, document.name)

    def document(self, name: str) -> DocumentOptions:
        """Look up a collection's options by name."""
        for document in self.documents:
            if document.name == name:
                return document
        raise ConfigurationError("documents.name", name, f"No collection named {name}")
