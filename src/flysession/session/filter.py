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
"""SessionFilter — loads, injects and persists Redis-backed sessions via cookies."""

from __future__ import annotations

import base64
import logging
import uuid
from collections.abc import Iterable
from typing import Any

import structlog

from flysession.session.ports.outbound import SessionStore
from flysession.session.request import SessionRequest
from flysession.session.session import HttpSession
from flysession.web.filters import OncePerRequestFilter
from flysession.web.ports.filter import CallNext

_logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "FLYSESSION"
INVALIDATION_COOKIE_NAME = "FLYSESSION_INVALIDATED"
_DEFAULT_TTL = 1800  # 30 minutes


def generate_session_id() -> str:
    """Random, URL-safe session identifier (unpadded base64 of a UUID4 string)."""
    raw = str(uuid.uuid4()).encode("ascii")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


class SessionFilter(OncePerRequestFilter):
    """Manages server-side sessions via a configurable cookie.

    For each request: read the session cookie, load the session from the
    store or create (and immediately save) a new one, hand a
    :class:`SessionRequest` down the chain, and save the session afterwards
    if it is dirty -- also when the chain raises or is cancelled. The session
    id is bound to structlog's context variables while the chain runs.
    """

    def __init__(
        self,
        store: SessionStore,
        cookie_name: str = SESSION_COOKIE_NAME,
        invalidation_cookie_name: str = INVALIDATION_COOKIE_NAME,
        ttl: int = _DEFAULT_TTL,
        *,
        url_patterns: Iterable[str] | None = None,
        exclude_patterns: Iterable[str] | None = None,
    ) -> None:
        super().__init__(url_patterns=url_patterns, exclude_patterns=exclude_patterns)
        self._store = store
        self._cookie_name = cookie_name
        self._invalidation_cookie_name = invalidation_cookie_name
        self._ttl = ttl

    async def do_filter(self, request: Any, call_next: CallNext) -> Any:
        session, issue_cookie = await self._load_or_create_session(request)
        ttl_at_start = session.max_inactive_interval

        with structlog.contextvars.bound_contextvars(session_id=session.id):
            try:
                response = await call_next(SessionRequest(request, session))
            finally:
                await self._persist_session(session)

        if not session.is_valid:
            response.set_cookie(
                key=self._invalidation_cookie_name,
                value="",
                max_age=0,
                path="/",
                httponly=True,
            )
        elif issue_cookie or session.max_inactive_interval != ttl_at_start:
            response.set_cookie(
                key=self._cookie_name,
                value=session.id,
                max_age=session.max_inactive_interval,
                path="/",
                httponly=True,
                samesite="lax",
            )

        return response

    async def _load_or_create_session(self, request: Any) -> tuple[HttpSession, bool]:
        """Resolve the request's session; the flag says whether to (re)issue the cookie."""
        session_id = self._session_id_from_cookie(request)

        if session_id:
            session = await self._store.load(session_id)
            if session is not None:
                await session.associate()
                _logger.debug("Loaded existing session '%s'", session_id)
                return session, session.max_inactive_interval != self._ttl

        session = HttpSession(generate_session_id(), self._store, self._ttl)
        await self._store.save(session)
        _logger.debug("Created new session '%s'", session.id)
        return session, True

    async def _persist_session(self, session: HttpSession) -> None:
        """Save the session if it changed during the request."""
        if session.is_valid and session.dirty:
            if await self._store.save(session):
                _logger.debug("Saved session '%s'", session.id)

    def _session_id_from_cookie(self, request: Any) -> str | None:
        """First cookie whose name equals the session cookie name, in header order."""
        for header in request.headers.getlist("cookie"):
            for chunk in header.split(";"):
                name, sep, value = chunk.partition("=")
                if sep and name.strip() == self._cookie_name:
                    return value.strip().strip('"') or None
        return None
