"""Error Hierarchy: verifies codes, categories and the structured envelope."""

from itemdb.core.errors import (
    DecodeError, DuplicateIdentifierError, ErrorCategory, ErrorContext,
    ErrorSeverity, ItemDBError, StorageError, StorageReadError, StorageWriteError,
)


def test_storage_errors_share_base():
    assert issubclass(StorageWriteError, StorageError)
    assert issubclass(StorageReadError, StorageError)
    assert issubclass(StorageError, ItemDBError)


def test_storage_write_error_is_critical():
    err = StorageWriteError("disk full")
    assert err.code == "STORAGE_WRITE_ERROR"
    assert err.category == ErrorCategory.STORAGE
    assert err.severity == ErrorSeverity.CRITICAL
    assert err.operation == "set"
    assert not err.recoverable
    assert "disk full" in str(err)


def test_duplicate_identifier_fills_context():
    err = DuplicateIdentifierError("x", "todos")
    assert err.context.collection == "todos"
    assert err.context.item_id == "x"
    assert err.recoverable


def test_to_dict_envelope():
    err = DecodeError("bad", ErrorContext(collection="todos", operation="load"))
    envelope = err.to_dict()["error"]
    assert envelope["code"] == "DECODE_ERROR"
    assert envelope["category"] == "decode"
    assert envelope["context"]["collection"] == "todos"
    assert envelope["context"]["operation"] == "load"
