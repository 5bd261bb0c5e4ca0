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
"""WebFilter port — the contract between the filter chain and request filters.

Requests and responses are typed as ``Any`` here; the Starlette types only
appear in :mod:`flysession.web.adapters.starlette`.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

CallNext = Callable[[Any], Awaitable[Any]]
"""Invokes the rest of the chain with a (possibly wrapped) request, returning the response."""


@runtime_checkable
class WebFilter(Protocol):
    """A request filter such as :class:`~flysession.session.filter.SessionFilter`.

    A filter may hand a different request object to ``call_next`` (the
    session filter passes a ``SessionRequest``) and may modify the response
    it gets back, for example to attach ``Set-Cookie`` headers.
    """

    async def do_filter(self, request: Any, call_next: CallNext) -> Any: ...

    def should_not_filter(self, request: Any) -> bool:
        """``True`` when the chain should bypass this filter for *request*."""
        ...
