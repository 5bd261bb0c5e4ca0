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
"""Shared fixtures: an in-memory stand-in for the ``redis.asyncio`` pipeline API."""

from __future__ import annotations

from typing import Any

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from flysession.session.adapters.redis import RedisSessionStore
from flysession.session.codec import AttributeCodec


class FakePipeline:
    """Queues commands like ``redis.asyncio.client.Pipeline`` and applies them on execute()."""

    def __init__(self, redis: FakeRedis, transaction: bool) -> None:
        self._redis = redis
        self.transaction = transaction
        self._commands: list[tuple[Any, ...]] = []

    async def __aenter__(self) -> FakePipeline:
        self._redis.checked_out += 1
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self._commands.clear()
        self._redis.checked_out -= 1

    def hgetall(self, key: str) -> FakePipeline:
        self._commands.append(("hgetall", key))
        return self

    def hset(self, key: str, mapping: dict[str, str]) -> FakePipeline:
        self._commands.append(("hset", key, dict(mapping)))
        return self

    def expire(self, key: str, seconds: int) -> FakePipeline:
        self._commands.append(("expire", key, seconds))
        return self

    def delete(self, key: str) -> FakePipeline:
        self._commands.append(("delete", key))
        return self

    def ping(self) -> FakePipeline:
        self._commands.append(("ping",))
        return self

    async def execute(self) -> list[Any]:
        if self._redis.down:
            raise RedisConnectionError("Error 111 connecting to localhost:6379. Connection refused.")
        commands, self._commands = self._commands, []
        self._redis.executed.append((self.transaction, commands))
        return [self._redis.apply(command) for command in commands]


class FakeRedis:
    """Minimal in-memory hash store matching the redis.asyncio.Redis pipeline interface."""

    def __init__(self) -> None:
        self.hashes: dict[str, dict[str, str]] = {}
        self.ttls: dict[str, int] = {}
        self.executed: list[tuple[bool, list[tuple[Any, ...]]]] = []
        self.down = False
        self.closed = False
        self.checked_out = 0

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        return FakePipeline(self, transaction)

    async def aclose(self, close_connection_pool: bool | None = None) -> None:
        self.closed = True

    def commands(self, name: str) -> list[tuple[Any, ...]]:
        """All executed commands with the given name, in order."""
        return [cmd for _, batch in self.executed for cmd in batch if cmd[0] == name]

    def apply(self, command: tuple[Any, ...]) -> Any:
        name, *args = command
        if name == "hgetall":
            return dict(self.hashes.get(args[0], {}))
        if name == "hset":
            key, mapping = args
            target = self.hashes.setdefault(key, {})
            added = sum(1 for field in mapping if field not in target)
            target.update(mapping)
            return added
        if name == "expire":
            key, seconds = args
            if key not in self.hashes:
                return False
            self.ttls[key] = seconds
            return True
        if name == "delete":
            existed = self.hashes.pop(args[0], None) is not None
            self.ttls.pop(args[0], None)
            return int(existed)
        if name == "ping":
            return True
        raise AssertionError(f"unexpected command {command!r}")


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def codec() -> AttributeCodec:
    return AttributeCodec()


@pytest.fixture
def store(fake_redis: FakeRedis, codec: AttributeCodec) -> RedisSessionStore:
    return RedisSessionStore(fake_redis, codec, default_ttl=1800)
