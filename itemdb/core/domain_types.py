"""Domain Types: rich types that replace bare primitives across the codebase.

Invariants:
    - ItemId wraps str: an item identifier is never an empty string
    - ID_FIELD is the single field name used to address records
    - All valid states encoded as Enums: no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: compare equal to their values, so settings parsed from env
      ("global", "collection") map directly
"""

from enum import Enum
from typing import Any, NewType


# ─── Identity Types ──────────────────────────────────────────────

ItemId = NewType("ItemId", str)

ID_FIELD = "id"

# Default record shape: a JSON object
JsonRecord = dict[str, Any]


# ─── Enums ───────────────────────────────────────────────────────

class ClearScope(str, Enum):
    """How much of the engine namespace clear() and overwrite() erase."""
    GLOBAL = "global"          # every slot in the engine (historical behavior)
    COLLECTION = "collection"  # only the calling collection's slot


class StorageBackend(str, Enum):
    """Key-value engines selectable from settings."""
    MEMORY = "memory"
    SQLALCHEMY = "sqlalchemy"


class Operation(str, Enum):
    """Collection operations: used in logs and error context."""
    LOAD = "load"
    INSERT = "insert"
    UPDATE = "update"
    REMOVE = "remove"
    CLEAR = "clear"
    OVERWRITE = "overwrite"
