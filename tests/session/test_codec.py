# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for AttributeCodec — pickle + base64 with a registered-type allowlist."""

from __future__ import annotations

import base64
import enum
import pickle
import threading
import uuid
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

import pytest

from flysession.kernel.exceptions import AttributeCodecError, DeserializationError, SerializationError
from flysession.session.codec import AttributeCodec


@dataclass
class Cart:
    owner: str
    items: list[str]


class Theme(enum.Enum):
    LIGHT = "light"
    DARK = "dark"


class Unregistered:
    def __init__(self, value: int) -> None:
        self.value = value


class FrozenCart:
    """Registered, but refuses to be snapshotted."""

    def __getstate__(self):
        raise ValueError("cannot snapshot cart")


class TestRoundTrip:
    @pytest.mark.parametrize(
        "value",
        [
            "blue",
            "",
            42,
            -3.5,
            True,
            b"\x00\xff",
            [1, "two", 3.0],
            (1, 2),
            {"nested": {"list": [1, 2, {"deep": True}]}},
            {1, 2, 3},
            frozenset({"a"}),
            complex(1, 2),
            bytearray(b"abc"),
        ],
    )
    def test_builtin_values(self, codec: AttributeCodec, value):
        assert codec.decode(codec.encode(value)) == value

    def test_temporal_and_numeric_defaults(self, codec: AttributeCodec):
        value = {
            "when": datetime(2026, 10, 19, 12, 30, tzinfo=UTC),
            "day": date(2026, 1, 1),
            "span": timedelta(minutes=30),
            "price": Decimal("19.99"),
            "ref": uuid.UUID("12345678-1234-5678-1234-567812345678"),
        }
        assert codec.decode(codec.encode(value)) == value

    def test_registered_application_types(self):
        codec = AttributeCodec(types=[Cart])
        codec.register(Theme)
        value = {"cart": Cart("alice", ["apple"]), "theme": Theme.DARK}
        decoded = codec.decode(codec.encode(value))
        assert decoded == value
        assert decoded["theme"] is Theme.DARK

    def test_encoded_text_is_ascii_base64(self, codec: AttributeCodec):
        encoded = codec.encode({"k": "v"})
        assert isinstance(encoded, str)
        assert base64.b64decode(encoded, validate=True)

    def test_decode_accepts_bytes(self, codec: AttributeCodec):
        assert codec.decode(codec.encode("x").encode("ascii")) == "x"


class TestEncodeFailures:
    def test_unregistered_class_is_rejected(self, codec: AttributeCodec):
        with pytest.raises(SerializationError) as exc_info:
            codec.encode(Unregistered(1))
        assert "Unregistered" in exc_info.value.context["type"]

    def test_unregistered_class_nested_in_container_is_rejected(self, codec: AttributeCodec):
        with pytest.raises(SerializationError):
            codec.encode({"ok": 1, "bad": [Unregistered(2)]})

    def test_unpicklable_objects_are_rejected(self, codec: AttributeCodec):
        with pytest.raises(SerializationError):
            codec.encode(threading.Lock())
        with pytest.raises(SerializationError):
            codec.encode(lambda: None)

    def test_class_objects_are_rejected(self, codec: AttributeCodec):
        with pytest.raises(SerializationError):
            codec.encode(Unregistered)

    def test_registered_type_failing_to_pickle_is_rejected(self):
        codec = AttributeCodec([FrozenCart])
        with pytest.raises(SerializationError) as exc_info:
            codec.encode(FrozenCart())
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert exc_info.value.context["type"].endswith("FrozenCart")

    def test_error_is_a_codec_error(self):
        assert issubclass(SerializationError, AttributeCodecError)


class TestDecodeFailures:
    def test_malformed_base64(self, codec: AttributeCodec):
        with pytest.raises(DeserializationError):
            codec.decode("not base64 !!")

    def test_corrupted_payload(self, codec: AttributeCodec):
        garbage = base64.b64encode(b"definitely not a pickle").decode()
        with pytest.raises(DeserializationError):
            codec.decode(garbage)

    def test_truncated_payload(self, codec: AttributeCodec):
        payload = base64.b64decode(codec.encode({"a": [1, 2, 3]}))
        with pytest.raises(DeserializationError):
            codec.decode(base64.b64encode(payload[:-4]).decode())

    def test_unknown_type_is_rejected(self):
        writer = AttributeCodec(types=[Cart])
        reader = AttributeCodec()
        with pytest.raises(DeserializationError):
            reader.decode(writer.encode(Cart("bob", [])))

    def test_foreign_pickle_cannot_resolve_arbitrary_callables(self, codec: AttributeCodec):
        hostile = base64.b64encode(pickle.dumps(Unregistered(3))).decode()
        with pytest.raises(DeserializationError):
            codec.decode(hostile)


class TestRegistry:
    def test_register_requires_classes(self, codec: AttributeCodec):
        with pytest.raises(TypeError):
            codec.register("Cart")  # type: ignore[arg-type]

    def test_registered_types_reflect_registration(self, codec: AttributeCodec):
        assert Cart not in codec.registered_types
        codec.register(Cart)
        assert Cart in codec.registered_types
