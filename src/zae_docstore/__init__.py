"""
zae-docstore: Partitioned document repositories backed by DynamoDB.

This library provides:
- Generic async CRUD and batch lookups scoped to a partition ("group")
- Optional soft delete (tombstone plus expiry) for expiring schemas
- Per-call consistency selection
- Parameterized id-membership filters
- Idempotent, fault-isolated startup provisioning of collections and throughput

Example:
    from dataclasses import dataclass
    from pathlib import Path

    from zae_docstore import Docstore, DocstoreOptions, ExpiringDocument, SchemaRegistry

    registry = SchemaRegistry()

    @registry.register("Note")
    @dataclass
    class Note(ExpiringDocument):
        group: str = ""
        value: str | None = None

    options = DocstoreOptions.from_yaml(Path("docstore.yaml").read_text())

    async with Docstore(options, registry) as store:
        notes = store.repository("notes")
        await notes.set("tenant-a", Note(id="n1", value="hello"))
        note = await notes.get("tenant-a", "n1")
"""

from .client import DocstoreClient
from .config import DocstoreOptions, DocumentOptions
from .consistency import ConsistencyLevel, resolve_consistency_level
from .docstore import Docstore
from .exceptions import (
    BackingStoreError,
    ConfigurationError,
    DeleteAllError,
    DocstoreError,
    SetupError,
    ValidationError,
)
from .models import (
    Document,
    ExpiringDocument,
    ThroughputMode,
    ThroughputSettings,
)
from .provisioner import CapacityProvisioner, ProvisionReport
from .query import IdFilter, build_id_filter
from .registry import SchemaRegistry, build_repositories
from .repository import DocumentRepository

__version__ = "0.1.0"

__all__ = [
    # Facade
    "Docstore",
    "DocstoreClient",
    # Configuration
    "DocstoreOptions",
    "DocumentOptions",
    "ConsistencyLevel",
    "resolve_consistency_level",
    # Models
    "Document",
    "ExpiringDocument",
    "ThroughputMode",
    "ThroughputSettings",
    # Repositories
    "DocumentRepository",
    "SchemaRegistry",
    "build_repositories",
    "IdFilter",
    "build_id_filter",
    # Provisioning
    "CapacityProvisioner",
    "ProvisionReport",
    # Exceptions
    "DocstoreError",
    "ValidationError",
    "ConfigurationError",
    "BackingStoreError",
    "DeleteAllError",
    "SetupError",
]
