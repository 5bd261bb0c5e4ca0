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
"""flysession — Redis-backed HTTP sessions for Starlette applications.

Quick start::

    from flysession import Config, create_app, get_session

    async def index(request):
        session = await get_session(request)
        session.set_attribute("visits", (session.get_attribute("visits") or 0) + 1)
        ...

    app = create_app(Config.from_file("config/flysession.yaml"), routes=[Route("/", index)])
"""

from flysession.core.config import Config
from flysession.kernel.exceptions import (
    ConfigurationError,
    DeserializationError,
    FlySessionException,
    IllegalUseError,
    SerializationError,
    StoreConnectivityError,
)
from flysession.session import (
    AttributeCodec,
    HttpSession,
    SessionFilter,
    SessionRequest,
    SessionStore,
    get_session,
)
from flysession.web.adapters.starlette.app import create_app

__version__ = "0.1.0"

__all__ = [
    "AttributeCodec",
    "Config",
    "ConfigurationError",
    "DeserializationError",
    "FlySessionException",
    "HttpSession",
    "IllegalUseError",
    "SerializationError",
    "SessionFilter",
    "SessionRequest",
    "SessionStore",
    "StoreConnectivityError",
    "create_app",
    "get_session",
    "__version__",
]
