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
"""Tests for the Lifecycle protocol."""

from flysession.kernel.lifecycle import Lifecycle
from flysession.session.adapters.redis import RedisSessionStore


class TestLifecycle:
    def test_redis_store_is_lifecycle(self, fake_redis):
        assert isinstance(RedisSessionStore(fake_redis), Lifecycle)

    def test_plain_object_is_not_lifecycle(self):
        assert not isinstance(object(), Lifecycle)
