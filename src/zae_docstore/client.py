"""Shared async DynamoDB client for repositories and the provisioner."""

import asyncio
from typing import Any

import aioboto3  # type: ignore[import-untyped]
from botocore.config import Config

from .config import DocstoreOptions

# Fixed retry count layered under every call (standard mode uses capped exponential backoff)
MAX_RETRY_ATTEMPTS = 3

DEFAULT_POOL_CONNECTIONS = 10
BULK_POOL_CONNECTIONS = 50


def build_client_config(
    max_retry_wait_seconds: int,
    direct_connection: bool = False,
    bulk_execution_enabled: bool = False,
) -> Config:
    """Build the botocore client Config for the store."""
    return Config(
        retries={"mode": "standard", "max_attempts": MAX_RETRY_ATTEMPTS},
        connect_timeout=max_retry_wait_seconds,
        read_timeout=max_retry_wait_seconds,
        tcp_keepalive=direct_connection,
        max_pool_connections=(
            BULK_POOL_CONNECTIONS if bulk_execution_enabled else DEFAULT_POOL_CONNECTIONS
        ),
    )


class DocstoreClient:
    """
    Lazily opened aioboto3 DynamoDB client.

    One instance is shared by every repository and the provisioner; the
    underlying client is safe for concurrent use.
    """

    def __init__(
        self,
        region: str | None = None,
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        config: Config | None = None,
    ) -> None:
        self.region = region
        self.endpoint_url = endpoint_url
        self._access_key = access_key
        self._secret_key = secret_key
        self._config = config
        self._session: aioboto3.Session | None = None
        self._client: Any = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_options(cls, options: DocstoreOptions) -> "DocstoreClient":
        """Create a client from validated store options."""
        return cls(
            region=options.region,
            endpoint_url=options.endpoint_uri,
            access_key=options.access_key,
            secret_key=options.secret_key,
            config=build_client_config(
                options.max_retry_wait_seconds,
                direct_connection=options.direct_connection,
                bulk_execution_enabled=options.bulk_execution_enabled,
            ),
        )

    async def get(self) -> Any:
        """Get or create the DynamoDB client (opened at most once)."""
        if self._client is not None:
            return self._client

        async with self._lock:
            if self._client is None:
                self._client = await self._open()
        return self._client

    async def _open(self) -> Any:
        if self._session is None:
            session_kwargs: dict[str, Any] = {}
            if self._access_key and self._secret_key:
                session_kwargs["aws_access_key_id"] = self._access_key
                session_kwargs["aws_secret_access_key"] = self._secret_key
            self._session = aioboto3.Session(**session_kwargs)

        kwargs: dict[str, Any] = {}
        if self.region:
            kwargs["region_name"] = self.region
        if self.endpoint_url:
            kwargs["endpoint_url"] = self.endpoint_url
        if self._config is not None:
            kwargs["config"] = self._config

        return await self._session.client("dynamodb", **kwargs).__aenter__()

    async def close(self) -> None:
        """Close the DynamoDB client."""
        if self._client is not None:
            await self._client.__aexit__(None, None, None)
            self._client = None
            self._session = None

    async def __aenter__(self) -> "DocstoreClient":
        await self.get()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
