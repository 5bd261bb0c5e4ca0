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
"""Session subsystem configuration properties."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from flysession.core.config import config_properties


def _kebab(name: str) -> str:
    return name.replace("_", "-")


class RedisProperties(BaseModel):
    """Connection settings for the session store (flysession.redis.*)."""

    model_config = ConfigDict(alias_generator=_kebab, populate_by_name=True)

    host: str = Field(min_length=1)
    port: int = Field(default=6379, ge=1, le=65535)
    username: str | None = None
    password: str | None = None
    database: int = Field(default=0, ge=0)
    max_pool_size: int = Field(default=128, ge=1)
    pool_timeout: float = Field(default=20.0, gt=0)
    ping_on_startup: bool = True


@config_properties(prefix="flysession")
class SessionProperties(BaseModel):
    """Configuration for the session filter (flysession.*)."""

    model_config = ConfigDict(alias_generator=_kebab, populate_by_name=True)

    redis: RedisProperties
    ttl: int = Field(default=1800, ge=1)
    cookie_name: str = "FLYSESSION"
    invalidation_cookie_name: str = "FLYSESSION_INVALIDATED"
    exclude_patterns: list[str] = Field(default_factory=list)
