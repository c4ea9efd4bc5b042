"""Exceptions for zae-docstore."""

from typing import Any

# ---------------------------------------------------------------------------
# Base Exception
# ---------------------------------------------------------------------------


class DocstoreError(Exception):
    """
    Base exception for all zae-docstore errors.

    All exceptions raised by this library inherit from this class,
    allowing callers to catch all library-specific errors with a single
    except clause.
    """

    pass


# ---------------------------------------------------------------------------
# Validation Exceptions
# ---------------------------------------------------------------------------


class ValidationError(DocstoreError):
    """
    Raised when a required argument or setting is missing or malformed.

    Validation always happens before any call to the backing store.

    Attributes:
        field: Name of the offending argument or setting
        value: The rejected value
        reason: Human readable explanation
    """

    def __init__(self, field: str, value: Any, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class ConfigurationError(ValidationError):
    """
    Raised when startup configuration or a document schema is unusable.

    Examples are a missing endpoint URI, an empty documents list, or a
    schema that does not declare the configured partition key field.
    """

    pass


# ---------------------------------------------------------------------------
# Backing Store Exceptions
# ---------------------------------------------------------------------------


class BackingStoreError(DocstoreError):
    """
    Raised when the document store fails for a reason other than "not found".

    This covers throttling, network failures and internal store errors.
    The original botocore exception is available as ``cause`` and as
    ``__cause__``.

    Attributes:
        operation: Repository operation that failed (e.g. "get", "set")
        collection: Collection (table) being accessed
        group: Partition key value, if applicable
        document_id: Document id, if applicable
        cause: The underlying exception
    """

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        *,
        operation: str | None = None,
        collection: str | None = None,
        group: str | None = None,
        document_id: str | None = None,
    ) -> None:
        self.cause = cause
        self.operation = operation
        self.collection = collection
        self.group = group
        self.document_id = document_id
        super().__init__(self._format_message(message))

    def _format_message(self, message: str) -> str:
        parts = [message]
        context = []
        if self.operation:
            context.append(f"operation={self.operation}")
        if self.collection:
            context.append(f"collection={self.collection}")
        if self.group:
            context.append(f"group={self.group}")
        if self.document_id:
            context.append(f"id={self.document_id}")
        if context:
            parts.append(f"[{', '.join(context)}]")
        return " ".join(parts)


class DeleteAllError(BackingStoreError):
    """
    Raised when ``delete_all`` stops partway through a group.

    Documents deleted before the failure stay deleted; nothing is rolled back.

    Attributes:
        deleted_ids: Ids deleted before the failure
        failed_id: Id whose deletion failed
        remaining_ids: Ids that were never attempted
    """

    def __init__(
        self,
        cause: Exception,
        *,
        collection: str,
        group: str,
        deleted_ids: list[str],
        failed_id: str,
        remaining_ids: list[str],
    ) -> None:
        self.deleted_ids = deleted_ids
        self.failed_id = failed_id
        self.remaining_ids = remaining_ids
        super().__init__(
            f"Deleted {len(deleted_ids)} document(s) before failing on '{failed_id}', "
            f"{len(remaining_ids)} not attempted",
            cause,
            operation="delete_all",
            collection=collection,
            group=group,
            document_id=failed_id,
        )


# ---------------------------------------------------------------------------
# Provisioning Exceptions
# ---------------------------------------------------------------------------


class SetupError(DocstoreError):
    """
    Raised when provisioning a single collection fails.

    The provisioner catches this (and any other error) per collection, logs
    it at critical severity and carries on with the sibling collections.
    """

    def __init__(self, collection: str, reason: str) -> None:
        self.collection = collection
        self.reason = reason
        super().__init__(f"Setup of collection {collection} failed: {reason}")
