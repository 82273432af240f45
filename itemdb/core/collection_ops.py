"""Collection Ops: pure sequence transformations behind every CRUD operation.

Invariants:
    - Inputs are never mutated; every function returns a new tuple and index
    - Index maps each identifier to the position of its FIRST occurrence
    - insert never places a second record with an existing identifier
    - update/remove with an unknown identifier return matched=False and
      leave the sequence unchanged (no-op, not an error)
    - remove never deletes a nonexistent position

Design Decisions:
    - Identifier index kept alongside the sequence: O(1) lookup, explicit uniqueness
    - First-occurrence semantics preserved for legacy slots that already
      contain duplicate identifiers (scan order decides)
    - Identifier generation injected as a callable: core stays deterministic in tests
"""

import copy
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from itemdb.core.domain_types import ID_FIELD, ItemId
from itemdb.core.errors import (
    DuplicateIdentifierError, ErrorContext, InvalidRecordError,
)


@dataclass(frozen=True)
class SequenceChange:
    """Result of one transformation: next sequence, its index, and match info."""
    items: tuple
    index: dict[str, int] = field(default_factory=dict)
    item_id: ItemId | None = None
    matched: bool = True


# -- Identifier access ---------------------------------------------------------

def get_item_id(record: Any) -> ItemId | None:
    """Read the identifier of a dict or model record. Empty counts as missing."""
    if isinstance(record, Mapping):
        value = record.get(ID_FIELD)
    else:
        value = getattr(record, ID_FIELD, None)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise InvalidRecordError(
            f"Identifier must be a string, got {type(value).__name__}",
            ErrorContext(debug_info={"value": repr(value)}),
        )
    return ItemId(value)


def with_item_id(record: Any, item_id: str) -> Any:
    """Return a copy of record carrying item_id."""
    if isinstance(record, Mapping):
        return {**record, ID_FIELD: item_id}
    if isinstance(record, BaseModel):
        return record.model_copy(update={ID_FIELD: item_id})
    raise InvalidRecordError(
        f"Records must be JSON objects or pydantic models, got {type(record).__name__}",
    )


def build_index(items: Sequence) -> dict[str, int]:
    """Map identifiers to first-occurrence positions."""
    index: dict[str, int] = {}
    for position, record in enumerate(items):
        item_id = get_item_id(record)
        if item_id is not None and item_id not in index:
            index[item_id] = position
    return index


def _prepare(
    record: Any, generate_id: Callable[[], str],
) -> tuple[Any, ItemId]:
    """Deep-copy record and ensure it carries an identifier."""
    item_id = get_item_id(record)
    if item_id is None:
        new_id = generate_id()
        if not new_id:
            raise InvalidRecordError("Identifier generator returned an empty value")
        item_id = ItemId(new_id)
        return with_item_id(copy.deepcopy(record), item_id), item_id
    if not isinstance(record, (Mapping, BaseModel)):
        raise InvalidRecordError(
            f"Records must be JSON objects or pydantic models, got {type(record).__name__}",
        )
    return copy.deepcopy(record), item_id


# -- Transformations -----------------------------------------------------------

def apply_insert(
    items: tuple,
    index: dict[str, int],
    record: Any,
    generate_id: Callable[[], str],
    collection: str,
) -> SequenceChange:
    """Append record, assigning an identifier iff none was supplied."""
    prepared, item_id = _prepare(record, generate_id)
    if item_id in index:
        raise DuplicateIdentifierError(item_id, collection)
    next_index = dict(index)
    next_index[item_id] = len(items)
    return SequenceChange((*items, prepared), next_index, item_id)


def apply_update(
    items: tuple, index: dict[str, int], record: Any, collection: str,
) -> SequenceChange:
    """Replace the first record sharing record's identifier, keeping its position."""
    item_id = get_item_id(record)
    if item_id is None:
        raise InvalidRecordError(
            "update() requires a record carrying an identifier",
            ErrorContext(collection=collection, operation="update"),
        )
    position = index.get(item_id)
    if position is None:
        return SequenceChange(items, index, item_id, matched=False)
    replacement = _prepare(record, _never)[0]
    next_items = (*items[:position], replacement, *items[position + 1:])
    return SequenceChange(next_items, index, item_id)


def apply_remove(
    items: tuple, index: dict[str, int], item_id: str,
) -> SequenceChange:
    """Delete the first record with item_id; later records shift down by one."""
    position = index.get(item_id)
    if position is None:
        return SequenceChange(items, index, ItemId(item_id), matched=False)
    next_items = items[:position] + items[position + 1:]
    return SequenceChange(next_items, build_index(next_items), ItemId(item_id))


def apply_overwrite(
    records: Sequence, generate_id: Callable[[], str], collection: str,
) -> SequenceChange:
    """Adopt records as the whole sequence in caller order; ids must be unique."""
    prepared: list = []
    index: dict[str, int] = {}
    for record in records:
        item, item_id = _prepare(record, generate_id)
        if item_id in index:
            raise DuplicateIdentifierError(item_id, collection)
        index[item_id] = len(prepared)
        prepared.append(item)
    return SequenceChange(tuple(prepared), index)


def _never() -> str:
    # update() only reaches _prepare with an identifier already present
    raise AssertionError("identifier generation is not used by update")
