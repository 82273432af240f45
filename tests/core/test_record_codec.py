"""Record Codec: tests for encoding/decoding ordered record sequences.

Invariants:
    - decode(encode(items)) == items, order and values preserved
    - Encoded form is a JSON array at top level
    - Non-array or malformed slot content raises DecodeError

Design Decisions:
    - Pure tests (no IO, no engine): the codec is a core concern
"""

import json

import pytest
from pydantic import BaseModel

from itemdb.core.errors import DecodeError
from itemdb.core.record_codec import EMPTY_SEQUENCE, RecordCodec


class Note(BaseModel):
    id: str | None = None
    title: str
    tags: list[str] = []


def test_roundtrip_preserves_order_and_values():
    codec = RecordCodec()
    items = [
        {"id": "b", "text": "second", "nested": {"n": 1, "xs": [1, 2.5, None]}},
        {"id": "a", "text": "first", "done": True},
    ]
    assert codec.decode(codec.encode(items)) == items


def test_roundtrip_unicode_text():
    codec = RecordCodec()
    items = [{"id": "1", "text": "café ☕ 日本"}]
    assert codec.decode(codec.encode(items)) == items


def test_encode_produces_json_array():
    codec = RecordCodec()
    payload = codec.encode([{"id": "x"}])
    assert isinstance(json.loads(payload), list)


def test_encode_empty_sequence_matches_constant():
    assert RecordCodec().encode([]) == EMPTY_SEQUENCE


def test_decode_accepts_str_input():
    assert RecordCodec().decode('[{"id": "x", "v": 1}]') == [{"id": "x", "v": 1}]


def test_decode_rejects_top_level_object():
    with pytest.raises(DecodeError) as exc:
        RecordCodec().decode(b'{"id": "x"}', collection="todos")
    assert exc.value.code == "DECODE_ERROR"
    assert exc.value.context.collection == "todos"


def test_decode_rejects_scalar_items():
    with pytest.raises(DecodeError):
        RecordCodec().decode(b"[1, 2, 3]")


def test_decode_rejects_malformed_json():
    with pytest.raises(DecodeError):
        RecordCodec().decode(b"[{")


def test_model_records_roundtrip():
    codec = RecordCodec(Note)
    items = [Note(id="n1", title="hello", tags=["a"]), Note(id="n2", title="bye")]
    assert codec.decode(codec.encode(items)) == items


def test_model_records_reject_missing_required_field():
    with pytest.raises(DecodeError):
        RecordCodec(Note).decode(b'[{"id": "n1"}]')
