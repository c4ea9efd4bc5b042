"""Startup facade: validate, provision, and serve repositories."""

import asyncio
from typing import Any

from .client import DocstoreClient
from .config import DocstoreOptions
from .exceptions import ConfigurationError
from .provisioner import CapacityProvisioner, ProvisionReport
from .registry import SchemaRegistry, build_repositories
from .repository import DocumentRepository


class Docstore:
    """
    Owns the store client, the provisioner and one repository per collection.

    Configuration is validated and every repository is built before any
    call reaches the store. Entering the context manager then runs the
    provisioning pass and waits for it to finish.

    Example:
        async with Docstore(options, registry) as store:
            notes = store.repository("notes")
            await notes.set("tenant-a", Note(id="n1", value="hello"))
    """

    def __init__(
        self,
        options: DocstoreOptions,
        registry: SchemaRegistry,
        client: DocstoreClient | None = None,
        provision_on_startup: bool = True,
    ) -> None:
        options.validate()
        self.options = options
        self.provision_on_startup = provision_on_startup
        self._client = client or DocstoreClient.from_options(options)
        self._provisioner = CapacityProvisioner(self._client, options)
        self._repositories = build_repositories(self._client, options, registry)
        self.last_report: ProvisionReport | None = None

    @property
    def client(self) -> DocstoreClient:
        return self._client

    @property
    def provisioner(self) -> CapacityProvisioner:
        return self._provisioner

    def repository(self, name: str) -> DocumentRepository[Any]:
        """
        Get the repository for a configured collection.

        Raises:
            ConfigurationError: If no collection has that name
        """
        repository = self._repositories.get(name)
        if repository is None:
            raise ConfigurationError("documents.name", name, f"No collection named {name}")
        return repository

    async def provision(self, stop_event: asyncio.Event | None = None) -> ProvisionReport:
        """Run one provisioning pass and keep its report."""
        self.last_report = await self._provisioner.provision(stop_event)
        return self.last_report

    async def close(self) -> None:
        await self._client.close()

    async def __aenter__(self) -> "Docstore":
        if self.provision_on_startup:
            await self.provision()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
