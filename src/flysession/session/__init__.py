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
"""flysession session — Redis-backed server-side sessions.

Import the concrete store from the adapter package::

    from flysession.session.adapters.redis import RedisSessionStore
"""

from flysession.session.codec import AttributeCodec
from flysession.session.filter import SessionFilter
from flysession.session.ports.outbound import SessionStore
from flysession.session.request import SessionRequest, get_session
from flysession.session.session import HttpSession

__all__ = [
    "AttributeCodec",
    "HttpSession",
    "SessionFilter",
    "SessionRequest",
    "SessionStore",
    "get_session",
]
