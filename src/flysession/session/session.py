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
"""HttpSession — server-side session backed by a remote store."""

from __future__ import annotations

import time
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from flysession.kernel.exceptions import IllegalUseError

if TYPE_CHECKING:
    from flysession.session.ports.outbound import SessionStore


def _now_millis() -> int:
    return time.time_ns() // 1_000_000


class HttpSession:
    """A session whose attributes live in the remote store between requests.

    Attribute access is synchronous and purely in memory; the ``dirty`` flag
    records that the attributes differ from what was last persisted.
    Operations with a remote side effect (TTL changes, invalidation,
    request association) are coroutines that go through the store.

    Attributes:
        id: The unique session identifier, also the store key suffix.
        is_new: ``True`` until the session is first re-associated with a
            request after creation; sessions loaded from the store are never new.
    """

    def __init__(
        self,
        session_id: str,
        store: SessionStore,
        max_inactive_interval: int,
        *,
        is_new: bool = True,
    ) -> None:
        self._id = session_id
        self._store = store
        self._max_inactive_interval = max_inactive_interval
        self._attributes: dict[str, Any] = {}
        self._is_new = is_new
        self._is_valid = True
        self._dirty = False

        self._creation_time = _now_millis()
        self._last_accessed_time = self._creation_time

    def __repr__(self) -> str:
        return (
            f"HttpSession(id={self._id!r}, new={self._is_new}, valid={self._is_valid}, "
            f"dirty={self._dirty}, attributes={len(self._attributes)})"
        )

    @property
    def id(self) -> str:
        return self._id

    @property
    def creation_time(self) -> int:
        """Epoch milliseconds at which this object was created or reconstructed."""
        return self._creation_time

    @property
    def last_accessed_time(self) -> int:
        return self._last_accessed_time

    @property
    def max_inactive_interval(self) -> int:
        """Time-to-live of the remote entry, in seconds."""
        return self._max_inactive_interval

    @property
    def is_new(self) -> bool:
        return self._is_new

    @property
    def is_valid(self) -> bool:
        return self._is_valid

    @property
    def dirty(self) -> bool:
        return self._dirty

    # -- attributes ---------------------------------------------------------

    def get_attribute(self, name: str) -> Any | None:
        """Return the attribute value, or ``None`` if absent."""
        self._touch_local()
        return self._attributes.get(name)

    def set_attribute(self, name: str, value: Any) -> None:
        """Set an attribute. A ``None`` value removes the attribute."""
        if value is None:
            self.remove_attribute(name)
            return
        self._check_valid("set_attribute")
        self._attributes[name] = value
        self._dirty = True
        self._touch_local()

    def remove_attribute(self, name: str) -> None:
        """Remove an attribute if present; the session is marked dirty either way."""
        self._check_valid("remove_attribute")
        self._attributes.pop(name, None)
        self._dirty = True
        self._touch_local()

    def get_attribute_names(self) -> list[str]:
        self._touch_local()
        return list(self._attributes)

    def get_attributes(self) -> dict[str, Any]:
        """Return a snapshot of all attributes without touching the session."""
        return dict(self._attributes)

    # -- store support ------------------------------------------------------

    def load_attributes(self, attributes: Mapping[str, Any]) -> None:
        """Replace all attributes with decoded store content, leaving ``dirty`` unchanged."""
        self._attributes.clear()
        self._attributes.update(attributes)
        self._is_new = False

    def mark_clean(self) -> None:
        """Record that the current attributes have been persisted."""
        self._dirty = False

    # -- remote side effects ------------------------------------------------

    async def set_max_inactive_interval(self, interval: int) -> None:
        """Change the TTL and push it to the remote entry immediately."""
        self._check_valid("set_max_inactive_interval")
        if interval < 1:
            raise ValueError(f"max_inactive_interval must be at least 1 second, got {interval}")
        self._max_inactive_interval = interval
        await self._store.refresh_expiration(self)

    async def associate(self) -> None:
        """Re-associate a loaded session with the current request."""
        self._is_new = False
        await self.touch()

    async def touch(self) -> None:
        """Update the last-accessed time and extend the remote TTL."""
        self._touch_local()
        if self._is_valid:
            await self._store.refresh_expiration(self)

    async def invalidate(self) -> None:
        """Terminate the session: clear attributes and delete the remote entry.

        Idempotent. The session filter answers an invalidated session with an
        expiring invalidation cookie.
        """
        if not self._is_valid:
            return
        self._is_valid = False
        self._attributes.clear()
        self._dirty = False
        await self._store.delete(self)

    # -- internals ----------------------------------------------------------

    def _touch_local(self) -> None:
        self._last_accessed_time = max(_now_millis(), self._last_accessed_time)

    def _check_valid(self, operation: str) -> None:
        if not self._is_valid:
            raise IllegalUseError(
                f"{operation}() called on invalidated session",
                code="SESSION_INVALIDATED",
                context={"session_id": self._id},
            )
