"""Identifier generation: random UUID4 strings for records inserted without an id."""

import uuid

from itemdb.core.domain_types import ItemId


def new_item_id() -> ItemId:
    return ItemId(str(uuid.uuid4()))
