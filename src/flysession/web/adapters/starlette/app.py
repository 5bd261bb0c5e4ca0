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
"""Starlette application factory with server-side sessions."""

from __future__ import annotations

from collections.abc import Sequence

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.routing import BaseRoute

from flysession.core.config import Config
from flysession.logging.port import LoggingPort
from flysession.logging.structlog_adapter import StructlogAdapter
from flysession.session.codec import AttributeCodec
from flysession.session.configuration import SessionConfiguration
from flysession.web.adapters.starlette.filter_chain import WebFilterChainMiddleware
from flysession.web.ports.filter import WebFilter


def create_app(
    config: Config,
    routes: Sequence[BaseRoute] = (),
    *,
    filters: Sequence[WebFilter] = (),
    codec: AttributeCodec | None = None,
    logging_port: LoggingPort | None = None,
    debug: bool = False,
) -> Starlette:
    """Create a Starlette application whose requests carry a Redis-backed session.

    Configures logging, binds the session configuration (raising
    :class:`~flysession.kernel.exceptions.ConfigurationError` on invalid
    settings), and installs the filter chain with the session filter first,
    followed by *filters*. The Redis pool is opened and closed by the
    application lifespan.
    """
    (logging_port or StructlogAdapter()).configure(config)

    sessions = SessionConfiguration(config, codec=codec)
    chain: list[WebFilter] = [sessions.session_filter(), *filters]

    return Starlette(
        debug=debug,
        routes=list(routes),
        middleware=[Middleware(WebFilterChainMiddleware, filters=chain)],
        lifespan=sessions.lifespan,
    )
