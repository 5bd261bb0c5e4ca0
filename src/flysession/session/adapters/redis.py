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
"""Redis-backed session store.

Each session is one Redis hash at ``session:<id>``: field names are
attribute names, field values are :class:`AttributeCodec` payloads, and the
key carries the session TTL.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable, Mapping
from contextlib import asynccontextmanager
from typing import Any

from redis.asyncio import BlockingConnectionPool
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from flysession.config.properties.session import RedisProperties
from flysession.kernel.exceptions import (
    DeserializationError,
    SerializationError,
    StoreCommandError,
    StoreConnectivityError,
)
from flysession.session.codec import AttributeCodec
from flysession.session.session import HttpSession

_logger = logging.getLogger(__name__)

_KEY_PREFIX = "session:"

DEFAULT_TTL = 1800  # 30 minutes

FailureRecorder = Callable[[str, Any], None]


def log_unserializable(name: str, value: Any) -> None:
    """Default failure recorder: log the class of a value that could not be stored."""
    cls = type(value)
    _logger.info(
        "Unserializable session attribute '%s': class %s.%s",
        name,
        cls.__module__,
        cls.__qualname__,
    )


def create_connection_pool(properties: RedisProperties) -> BlockingConnectionPool:
    """Build the bounded connection pool shared by every session store call.

    Acquirers block for up to ``pool_timeout`` seconds once ``max_pool_size``
    connections are checked out.
    """
    return BlockingConnectionPool(
        host=properties.host,
        port=properties.port,
        username=properties.username,
        password=properties.password,
        db=properties.database,
        max_connections=properties.max_pool_size,
        timeout=properties.pool_timeout,
        decode_responses=True,
    )


class RedisSessionStore:
    """Session store backed by ``redis.asyncio``.

    Every public operation checks a connection out of the pool for exactly
    one round-trip and returns it on every exit path. Store outages are
    logged and turned into no-ops; no operation is retried.
    """

    def __init__(
        self,
        client: Any,
        codec: AttributeCodec | None = None,
        *,
        default_ttl: int = DEFAULT_TTL,
        failure_recorder: FailureRecorder = log_unserializable,
        ping_on_start: bool = True,
    ) -> None:
        self._client = client
        self._codec = codec if codec is not None else AttributeCodec()
        self._default_ttl = default_ttl
        self._failure_recorder = failure_recorder
        self._ping_on_start = ping_on_start

    @property
    def default_ttl(self) -> int:
        return self._default_ttl

    @property
    def codec(self) -> AttributeCodec:
        return self._codec

    def _key(self, session_id: str) -> str:
        return f"{_KEY_PREFIX}{session_id}"

    @asynccontextmanager
    async def _pipeline(self, *, transaction: bool = False) -> AsyncIterator[Any]:
        """Scoped pooled connection; the pipeline releases it on context exit."""
        try:
            async with self._client.pipeline(transaction=transaction) as pipe:
                yield pipe
        except (RedisConnectionError, RedisTimeoutError) as exc:
            raise StoreConnectivityError(
                f"Session store unreachable: {exc}", code="SESSION_STORE_UNREACHABLE"
            ) from exc
        except RedisError as exc:
            raise StoreCommandError(f"Session store command failed: {exc}", code="SESSION_STORE_COMMAND") from exc

    # -- lifecycle ----------------------------------------------------------

    async def start(self) -> None:
        """Verify connectivity when configured to; raises on failure."""
        if self._ping_on_start:
            await self.ping()

    async def stop(self) -> None:
        """Close the client and disconnect every pooled connection."""
        try:
            await self._client.aclose(close_connection_pool=True)
        except RedisError as exc:
            _logger.warning("Error closing session store connection pool: %s", exc)

    async def ping(self) -> None:
        """Round-trip a PING; raises :class:`StoreConnectivityError` when unreachable."""
        async with self._pipeline() as pipe:
            pipe.ping()
            await pipe.execute()

    # -- session operations -------------------------------------------------

    async def load(self, session_id: str) -> HttpSession | None:
        """Reconstruct a session, or return ``None`` if the key is missing or empty."""
        try:
            async with self._pipeline() as pipe:
                pipe.hgetall(self._key(session_id))
                (data,) = await pipe.execute()
        except (StoreConnectivityError, StoreCommandError) as exc:
            _logger.error("Error loading session '%s' from store: %s", session_id, exc)
            return None

        if not data:
            _logger.debug("Session '%s' not found in store", session_id)
            return None

        session = HttpSession(session_id, self, self._default_ttl, is_new=False)
        session.load_attributes(self._decode_fields(session_id, data))
        return session

    async def save(self, session: HttpSession) -> bool:
        """Write the session's attributes and (re)set its TTL.

        A dirty session replaces the whole hash so removed attributes
        disappear. The TTL is set even when no field could be written.
        ``dirty`` is cleared only when the transaction succeeds.
        """
        if not session.is_valid:
            return False

        key = self._key(session.id)
        fields = self._encode_fields(session)
        try:
            async with self._pipeline(transaction=True) as pipe:
                if session.dirty:
                    pipe.delete(key)
                if fields:
                    pipe.hset(key, mapping=fields)
                pipe.expire(key, session.max_inactive_interval)
                await pipe.execute()
        except (StoreConnectivityError, StoreCommandError) as exc:
            _logger.error("Error saving session '%s' to store: %s", session.id, exc)
            return False

        session.mark_clean()
        return True

    async def refresh_expiration(self, session: HttpSession) -> bool:
        """Set the key's TTL to the session's current ``max_inactive_interval``."""
        try:
            async with self._pipeline() as pipe:
                pipe.expire(self._key(session.id), session.max_inactive_interval)
                (applied,) = await pipe.execute()
        except (StoreConnectivityError, StoreCommandError) as exc:
            _logger.error("Error updating expiration of session '%s': %s", session.id, exc)
            return False
        return bool(applied)

    async def delete(self, session: HttpSession) -> bool:
        """Remove the session's key entirely."""
        try:
            async with self._pipeline() as pipe:
                pipe.delete(self._key(session.id))
                (removed,) = await pipe.execute()
        except (StoreConnectivityError, StoreCommandError) as exc:
            _logger.error("Error deleting session '%s' from store: %s", session.id, exc)
            return False
        return bool(removed)

    # -- codec --------------------------------------------------------------

    def _encode_fields(self, session: HttpSession) -> dict[str, str]:
        fields: dict[str, str] = {}
        for name, value in session.get_attributes().items():
            try:
                fields[name] = self._codec.encode(value)
            except SerializationError as exc:
                self._failure_recorder(name, value)
                _logger.warning(
                    "Error serializing attribute '%s' of session '%s' (type %s): %s",
                    name,
                    session.id,
                    type(value).__qualname__,
                    exc,
                )
        return fields

    def _decode_fields(self, session_id: str, data: Mapping[str, str]) -> dict[str, Any]:
        attributes: dict[str, Any] = {}
        for name, encoded in data.items():
            try:
                attributes[name] = self._codec.decode(encoded)
            except DeserializationError as exc:
                _logger.warning(
                    "Error deserializing attribute '%s' of session '%s': %s; problematic encoded value: [%s]",
                    name,
                    session_id,
                    exc,
                    encoded,
                )
        return attributes
