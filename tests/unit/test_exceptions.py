"""Tests for exception types."""

from zae_docstore import (
    BackingStoreError,
    ConfigurationError,
    DeleteAllError,
    DocstoreError,
    SetupError,
    ValidationError,
)


class TestExceptions:
    """Tests for exception messages and hierarchy."""

    def test_hierarchy(self) -> None:
        assert issubclass(ConfigurationError, ValidationError)
        assert issubclass(ValidationError, DocstoreError)
        assert issubclass(DeleteAllError, BackingStoreError)
        assert issubclass(SetupError, DocstoreError)

    def test_validation_error(self) -> None:
        error = ValidationError("group", "", "group cannot be empty")
        assert str(error) == "Invalid group: group cannot be empty"
        assert error.field == "group"

    def test_backing_store_error_context(self) -> None:
        cause = RuntimeError("boom")
        error = BackingStoreError(
            "Document store get failed",
            cause,
            operation="get",
            collection="notes",
            group="tenant-a",
            document_id="n1",
        )
        assert str(error) == (
            "Document store get failed [operation=get, collection=notes, group=tenant-a, id=n1]"
        )
        assert error.cause is cause

    def test_backing_store_error_without_context(self) -> None:
        assert str(BackingStoreError("failed")) == "failed"

    def test_delete_all_error(self) -> None:
        error = DeleteAllError(
            RuntimeError("boom"),
            collection="notes",
            group="tenant-a",
            deleted_ids=["a"],
            failed_id="b",
            remaining_ids=["c", "d"],
        )
        assert error.operation == "delete_all"
        assert "Deleted 1 document(s) before failing on 'b', 2 not attempted" in str(error)

    def test_setup_error(self) -> None:
        error = SetupError("notes", "throttled")
        assert str(error) == "Setup of collection notes failed: throttled"
        assert error.collection == "notes"
