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
"""Lifecycle protocol for components that own connection pools.

The session wiring calls start() from the application lifespan before the
first request is served and stop() once the server is shutting down.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Lifecycle(Protocol):
    """Standard lifecycle for resources that own external connections."""

    async def start(self) -> None:
        """Initialize connections and validate connectivity.

        If the store cannot be reached, raise -- application startup fails
        instead of individual requests.
        """
        ...

    async def stop(self) -> None:
        """Release connections and clean up resources.

        Best-effort cleanup -- exceptions are logged, not propagated.
        """
        ...
