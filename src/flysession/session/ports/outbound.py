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
"""Session store protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from flysession.session.session import HttpSession


@runtime_checkable
class SessionStore(Protocol):
    """The sole bridge between :class:`HttpSession` objects and the remote store.

    Implementations never let a store outage escape ``load``, ``save``,
    ``refresh_expiration`` or ``delete``: failures are logged and the call
    degrades to a no-op (``None`` / ``False``).
    """

    @property
    def default_ttl(self) -> int: ...

    async def load(self, session_id: str) -> HttpSession | None: ...

    async def save(self, session: HttpSession) -> bool: ...

    async def refresh_expiration(self, session: HttpSession) -> bool: ...

    async def delete(self, session: HttpSession) -> bool: ...

    async def ping(self) -> None: ...
