"""Explicit registration of document schemas by name.

Configuration refers to schemas by name (``documents[].document_schema``).
Applications register each schema once at startup, and repositories are
built from the registry, one per configured collection.

Example:
    registry = SchemaRegistry()

    @registry.register("Note")
    @dataclass
    class Note(ExpiringDocument):
        group: str = ""
        value: str | None = None

    repositories = build_repositories(client, options, registry)
    notes = repositories["notes"]
"""

from collections.abc import Callable, Iterator
from typing import Any, TypeVar, overload

from .client import DocstoreClient
from .config import DocstoreOptions
from .exceptions import ConfigurationError
from .models import Document
from .repository import DocumentRepository

D = TypeVar("D", bound=type[Document])


class SchemaRegistry:
    """Mapping of schema name to Document subclass."""

    def __init__(self) -> None:
        self._schemas: dict[str, type[Document]] = {}

    @overload
    def register(self, name: str) -> Callable[[D], D]: ...

    @overload
    def register(self, name: str, schema: D) -> D: ...

    def register(self, name: str, schema: Any = None) -> Any:
        """
        Register a schema under ``name``.

        Usable directly (``registry.register("Note", Note)``) or as a class
        decorator (``@registry.register("Note")``).

        Raises:
            ConfigurationError: If the name is empty, already taken by another
                schema, or the class is not a Document subclass
        """
        if schema is None:

            def decorator(cls: D) -> D:
                self._add(name, cls)
                return cls

            return decorator

        self._add(name, schema)
        return schema

    def _add(self, name: str, schema: Any) -> None:
        if not name:
            raise ConfigurationError("document_schema", name, "Schema name cannot be empty")
        if not (isinstance(schema, type) and issubclass(schema, Document)):
            raise ConfigurationError(
                "document_schema",
                name,
                f"{schema!r} is not a Document subclass",
            )
        existing = self._schemas.get(name)
        if existing is not None and existing is not schema:
            raise ConfigurationError(
                "document_schema",
                name,
                f"Schema name already registered to {existing.__name__}",
            )
        self._schemas[name] = schema

    def resolve(self, name: str) -> type[Document]:
        """
        Look up a schema by name.

        Raises:
            ConfigurationError: If no schema is registered under ``name``
        """
        schema = self._schemas.get(name)
        if schema is None:
            raise ConfigurationError(
                "document_schema",
                name,
                f"Invalid document configuration, the schema {name} is not registered",
            )
        return schema

    def __contains__(self, name: object) -> bool:
        return name in self._schemas

    def __iter__(self) -> Iterator[str]:
        return iter(self._schemas)

    def __len__(self) -> int:
        return len(self._schemas)


def build_repositories(
    client: DocstoreClient,
    options: DocstoreOptions,
    registry: SchemaRegistry,
) -> dict[str, DocumentRepository[Any]]:
    """
    Build one repository per configured collection.

    Returns:
        Repositories keyed by collection name

    Raises:
        ConfigurationError: If a collection names an unregistered schema or
            a schema lacks its partition key field
    """
    repositories: dict[str, DocumentRepository[Any]] = {}
    for document_options in options.documents:
        document_schema = registry.resolve(document_options.document_schema)
        repositories[document_options.name] = DocumentRepository(
            client, document_schema, options, document_options
        )
    return repositories
