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
"""AttributeCodec — converts session attribute values to base64 text and back.

Values are pickled and the bytes base64-encoded so they fit in a Redis hash
field. Only registered types may appear anywhere in a value's object graph:
the pickler refuses to write unregistered objects and the unpickler refuses
to resolve unregistered classes, so a tampered store entry cannot make the
application import or call arbitrary code.
"""

from __future__ import annotations

import base64
import datetime
import decimal
import io
import pickle
import uuid
from collections.abc import Iterable
from typing import Any

from flysession.kernel.exceptions import DeserializationError, SerializationError

# Written with dedicated pickle opcodes; reading them back needs no class lookup.
_ATOMIC_TYPES: frozenset[type] = frozenset(
    {type(None), bool, int, float, str, bytes, list, tuple, dict, set, frozenset}
)

DEFAULT_TYPES: tuple[type, ...] = (
    complex,
    bytearray,
    datetime.date,
    datetime.time,
    datetime.datetime,
    datetime.timedelta,
    datetime.timezone,
    decimal.Decimal,
    uuid.UUID,
    uuid.SafeUUID,
)


def _qualified_name(cls: type) -> tuple[str, str]:
    return cls.__module__, cls.__qualname__


class _RestrictedPickler(pickle.Pickler):
    def __init__(self, file: io.BytesIO, allowed: frozenset[type]) -> None:
        super().__init__(file, protocol=pickle.HIGHEST_PROTOCOL)
        self._allowed = allowed

    def reducer_override(self, obj: Any) -> Any:
        if isinstance(obj, type):
            if obj in self._allowed:
                return NotImplemented
            raise pickle.PicklingError(f"class '{obj.__module__}.{obj.__qualname__}' is not registered")
        cls = type(obj)
        if cls in _ATOMIC_TYPES or cls in self._allowed:
            return NotImplemented
        raise pickle.PicklingError(f"type '{cls.__module__}.{cls.__qualname__}' is not registered")


class _RestrictedUnpickler(pickle.Unpickler):
    def __init__(self, file: io.BytesIO, allowed: dict[tuple[str, str], type]) -> None:
        super().__init__(file)
        self._allowed = allowed

    def find_class(self, module: str, name: str) -> Any:
        cls = self._allowed.get((module, name))
        if cls is None:
            raise pickle.UnpicklingError(f"type '{module}.{name}' is not registered")
        return cls


class AttributeCodec:
    """Reversible conversion between an attribute value and text-safe payload.

    Args:
        types: Additional application classes allowed in attribute values,
            on top of :data:`DEFAULT_TYPES` and the builtin containers.
    """

    def __init__(self, types: Iterable[type] = ()) -> None:
        self._types: set[type] = set(DEFAULT_TYPES)
        self._types.update(types)

    @property
    def registered_types(self) -> frozenset[type]:
        return frozenset(self._types)

    def register(self, *types: type) -> None:
        """Allow instances of *types* in stored attribute values."""
        for cls in types:
            if not isinstance(cls, type):
                raise TypeError(f"register() expects classes, got {cls!r}")
            self._types.add(cls)

    def encode(self, value: Any) -> str:
        """Pickle *value* and return the payload as base64 text.

        Raises:
            SerializationError: if the value (or anything it references) is
                not of a registered type or cannot be pickled.
        """
        buffer = io.BytesIO()
        try:
            _RestrictedPickler(buffer, frozenset(self._types)).dump(value)
        except Exception as exc:
            # __reduce__ and __getstate__ of registered classes may raise anything.
            raise SerializationError(
                f"Cannot serialize value of type '{type(value).__qualname__}': {exc}",
                code="SESSION_CODEC_ENCODE",
                context={"type": f"{type(value).__module__}.{type(value).__qualname__}"},
            ) from exc
        return base64.b64encode(buffer.getvalue()).decode("ascii")

    def decode(self, text: str | bytes) -> Any:
        """Reverse :meth:`encode`.

        Raises:
            DeserializationError: on malformed base64, a corrupted payload, or
                a reference to an unregistered type.
        """
        try:
            payload = base64.b64decode(text, validate=True)
        except ValueError as exc:
            raise DeserializationError(
                f"Malformed attribute payload: {exc}", code="SESSION_CODEC_BASE64"
            ) from exc

        allowed = {_qualified_name(cls): cls for cls in self._types}
        try:
            return _RestrictedUnpickler(io.BytesIO(payload), allowed).load()
        except Exception as exc:
            # Corrupt pickles surface as a wide range of builtin errors.
            raise DeserializationError(
                f"Corrupted attribute payload: {exc}", code="SESSION_CODEC_DECODE"
            ) from exc
