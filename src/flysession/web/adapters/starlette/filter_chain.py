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
"""WebFilterChainMiddleware — runs WebFilters (the session filter first) as pure ASGI middleware."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any, cast

from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from flysession.web.ports.filter import CallNext, WebFilter


class _CapturedResponse:
    """Collects the downstream ``http.response.*`` messages into one :class:`Response`."""

    def __init__(self) -> None:
        self.status_code = 200
        self.raw_headers: list[tuple[bytes, bytes]] = []
        self.body = bytearray()

    async def send(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self.status_code = message["status"]
            self.raw_headers = list(message.get("headers", []))
        elif message["type"] == "http.response.body":
            self.body.extend(message.get("body", b""))
        elif message["type"] == "http.response.pathsend":
            # ASGI pathsend extension: the server would stream the file itself.
            path = message.get("path", "")
            if path:
                self.body.extend(Path(path).read_bytes())

    def to_response(self) -> Response:
        response = Response(content=bytes(self.body), status_code=self.status_code)
        # Content-Length is already among the captured headers.
        response.raw_headers[:] = self.raw_headers
        return response


class WebFilterChainMiddleware:
    """Pure ASGI middleware executing an ordered chain of :class:`WebFilter` instances.

    Filters whose ``should_not_filter()`` returns ``True`` for a request are
    bypassed. The chain is assembled once; the route handlers receive the
    scope of whichever request the innermost filter passed on, which is how
    the session filter's :class:`~flysession.session.request.SessionRequest`
    reaches them. Responses are buffered so filters can set cookies after
    the handler has run.
    """

    def __init__(self, app: ASGIApp, filters: Sequence[WebFilter] = ()) -> None:
        self.app = app
        self._filters = list(filters)
        chain: CallNext = self._dispatch
        for web_filter in reversed(self._filters):
            chain = _wrap(web_filter, chain)
        self._chain = chain

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response = cast(Response, await self._chain(Request(scope, receive, send)))
        await response(scope, receive, send)

    async def _dispatch(self, request: Request) -> Response:
        captured = _CapturedResponse()
        await self.app(request.scope, request.receive, captured.send)
        return captured.to_response()


def _wrap(web_filter: WebFilter, next_call: CallNext) -> CallNext:
    async def _inner(request: Any) -> Any:
        if web_filter.should_not_filter(request):
            return await next_call(request)
        return await web_filter.do_filter(request, next_call)

    return _inner
