"""Record Codec: encodes an ordered record sequence to JSON bytes and back.

Invariants:
    - Encoded form is always a JSON array at top level (never a bare object or scalar)
    - decode(encode(items)) == items for every JSON-representable record shape
    - Order of records and of keys inside each record is preserved
    - Any slot content that is not a valid array of records raises DecodeError

Design Decisions:
    - pydantic TypeAdapter over json.dumps: the same codec serves plain dict
      records and pydantic model records without per-type branches
"""

from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from itemdb.core.domain_types import JsonRecord
from itemdb.core.errors import DecodeError, ErrorContext

T = TypeVar("T")

EMPTY_SEQUENCE = b"[]"


class RecordCodec(Generic[T]):
    """Typed JSON codec for one collection's record type."""

    def __init__(self, record_type: Any = JsonRecord):
        self.record_type = record_type
        self._adapter: TypeAdapter[list[T]] = TypeAdapter(list[record_type])

    def encode(self, items: Sequence[T]) -> bytes:
        """Serialize records to a UTF-8 JSON array."""
        return self._adapter.dump_json(list(items))

    def decode(self, raw: bytes | str, collection: str | None = None) -> list[T]:
        """Parse a JSON array into records. Raises DecodeError on malformed input."""
        try:
            return self._adapter.validate_json(raw)
        except ValidationError as e:
            first = e.errors()[0] if e.error_count() else {}
            raise DecodeError(
                f"{e.error_count()} validation error(s), first: {first.get('msg', 'unknown')}",
                ErrorContext(
                    collection=collection,
                    operation="load",
                    debug_info={"errors": e.error_count(), "type": first.get("type")},
                ),
            ) from e
