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
"""Request-side access to the session resolved by :class:`SessionFilter`."""

from __future__ import annotations

from typing import Any

from starlette.requests import Request

from flysession.kernel.exceptions import IllegalUseError
from flysession.session.session import HttpSession


async def get_session(request: Any, create: bool = True) -> HttpSession | None:
    """Return the session bound to *request* by the session filter.

    Every call touches the session and extends its remote TTL.

    Args:
        request: Any Starlette request sharing the filtered request's scope.
        create: With no bound session (e.g. an excluded path), ``True`` raises
            and ``False`` returns ``None`` without side effects.

    Raises:
        IllegalUseError: if no session is bound and *create* is ``True``;
            sessions are only ever created by the session filter.
    """
    session: HttpSession | None = getattr(request.state, "session", None)
    if session is None:
        if create:
            raise IllegalUseError(
                "Creation of a new session must be handled by SessionFilter",
                code="SESSION_CREATE_OUTSIDE_FILTER",
                context={"path": request.url.path},
            )
        return None
    await session.touch()
    return session


class SessionRequest(Request):
    """Starlette request wrapper whose :meth:`get_session` resolves to the filter's session.

    The session is stored on the shared ASGI scope state, so route handlers
    receiving their own ``Request`` can reach it through :func:`get_session`.
    """

    def __init__(self, request: Request, session: HttpSession | None) -> None:
        super().__init__(request.scope, request.receive)
        if session is not None:
            self.state.session = session

    async def get_session(self, create: bool = True) -> HttpSession | None:
        return await get_session(self, create)
