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
"""SessionConfiguration — builds the session subsystem from configuration."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from redis.asyncio import Redis

from flysession.config.properties.session import SessionProperties
from flysession.core.config import Config
from flysession.kernel.exceptions import StoreConnectivityError
from flysession.kernel.lifecycle import Lifecycle
from flysession.session.adapters.redis import (
    FailureRecorder,
    RedisSessionStore,
    create_connection_pool,
    log_unserializable,
)
from flysession.session.codec import AttributeCodec
from flysession.session.filter import SessionFilter

_logger = logging.getLogger(__name__)


class SessionConfiguration:
    """Wires pool, store and filter from the ``flysession`` config section.

    Binding happens in the constructor, so invalid settings raise
    :class:`~flysession.kernel.exceptions.ConfigurationError` before the
    application starts. The pool is created on first use and its lifetime
    is scoped by :meth:`lifespan`.
    """

    def __init__(
        self,
        config: Config,
        *,
        codec: AttributeCodec | None = None,
        failure_recorder: FailureRecorder = log_unserializable,
    ) -> None:
        self._properties = config.bind(SessionProperties)
        self._codec = codec if codec is not None else AttributeCodec()
        self._failure_recorder = failure_recorder
        self._store: RedisSessionStore | None = None
        self._filter: SessionFilter | None = None

    @property
    def properties(self) -> SessionProperties:
        return self._properties

    def session_store(self) -> RedisSessionStore:
        if self._store is None:
            redis_props = self._properties.redis
            client = Redis(connection_pool=create_connection_pool(redis_props))
            self._store = RedisSessionStore(
                client,
                self._codec,
                default_ttl=self._properties.ttl,
                failure_recorder=self._failure_recorder,
                ping_on_start=redis_props.ping_on_startup,
            )
        return self._store

    def session_filter(self) -> SessionFilter:
        if self._filter is None:
            self._filter = SessionFilter(
                store=self.session_store(),
                cookie_name=self._properties.cookie_name,
                invalidation_cookie_name=self._properties.invalidation_cookie_name,
                ttl=self._properties.ttl,
                exclude_patterns=self._properties.exclude_patterns,
            )
        return self._filter

    @asynccontextmanager
    async def lifespan(self, app: Any) -> AsyncIterator[None]:
        """Starlette lifespan: verify the store on startup, close the pool on shutdown."""
        store: Lifecycle = self.session_store()
        redis_props = self._properties.redis
        try:
            await store.start()
        except StoreConnectivityError:
            _logger.error("Cannot connect to session store at %s:%s", redis_props.host, redis_props.port)
            raise
        _logger.info("Session store ready at %s:%s", redis_props.host, redis_props.port)
        try:
            yield
        finally:
            await store.stop()
            _logger.info("Closed session store connection pool")
