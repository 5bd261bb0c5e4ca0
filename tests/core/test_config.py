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
"""Tests for Config — dot access, env overrides, placeholders, files and binding."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import BaseModel

from flysession.config.properties.session import SessionProperties
from flysession.core.config import Config, config_properties
from flysession.kernel.exceptions import ConfigurationError


class TestConfigAccess:
    def test_get_nested_value(self):
        config = Config({"flysession": {"redis": {"port": 6380}}})
        assert config.get("flysession.redis.port") == 6380

    def test_get_with_default(self):
        assert Config({}).get("flysession.ttl", 1800) == 1800

    def test_env_var_override(self, monkeypatch):
        monkeypatch.setenv("FLYSESSION_REDIS_HOST", "env-host")
        config = Config({"flysession": {"redis": {"host": "file-host"}}})
        assert config.get("flysession.redis.host") == "env-host"

    def test_placeholder_from_env(self, monkeypatch):
        monkeypatch.setenv("REDIS_PASSWORD", "s3cret")
        config = Config({"flysession": {"redis": {"password": "${REDIS_PASSWORD}"}}})
        assert config.get("flysession.redis.password") == "s3cret"

    def test_placeholder_default(self):
        config = Config({"flysession": {"redis": {"host": "${REDIS_HOST_UNSET_FOR_TEST:localhost}"}}})
        assert config.get("flysession.redis.host") == "localhost"

    def test_placeholder_from_other_key(self):
        config = Config({"defaults": {"host": "cache.internal"}, "flysession": {"redis": {"host": "${defaults.host}"}}})
        assert config.get("flysession.redis.host") == "cache.internal"

    def test_unresolvable_placeholder(self):
        config = Config({"flysession": {"redis": {"host": "${NO_SUCH_VARIABLE_FOR_TEST}"}}})
        with pytest.raises(ConfigurationError):
            config.get("flysession.redis.host")

    def test_circular_placeholder(self):
        config = Config({"a": "${b}", "b": "${a}"})
        with pytest.raises(ConfigurationError):
            config.get("a")

    def test_get_section_resolves_nested(self, monkeypatch):
        monkeypatch.setenv("FLYSESSION_REDIS_PORT", "6390")
        config = Config({"flysession": {"ttl": 60, "redis": {"host": "h", "port": 6379}}})
        assert config.get_section("flysession") == {"ttl": 60, "redis": {"host": "h", "port": "6390"}}

    def test_get_section_missing(self):
        assert Config({}).get_section("flysession.redis") == {}


class TestConfigFiles:
    def test_load_from_yaml_file(self, tmp_path: Path):
        config_file = tmp_path / "flysession.yaml"
        config_file.write_text("flysession:\n  ttl: 600\n  redis:\n    host: redis.local\n")
        config = Config.from_file(config_file)
        assert config.get("flysession.ttl") == 600
        assert config.loaded_sources == [str(config_file)]

    def test_load_from_toml_file(self, tmp_path: Path):
        config_file = tmp_path / "flysession.toml"
        config_file.write_text('[flysession]\ncookie-name = "SID"\n\n[flysession.redis]\nhost = "redis.local"\n')
        config = Config.from_file(config_file)
        assert config.get("flysession.cookie-name") == "SID"
        assert config.get("flysession.redis.host") == "redis.local"

    def test_profile_overlay(self, tmp_path: Path):
        base = tmp_path / "flysession.yaml"
        base.write_text("flysession:\n  ttl: 1800\n  redis:\n    host: localhost\n    port: 6379\n")
        (tmp_path / "flysession-prod.yaml").write_text("flysession:\n  redis:\n    host: redis.prod\n")

        config = Config.from_file(base, active_profiles=["prod", "missing"])
        assert config.get("flysession.redis.host") == "redis.prod"
        assert config.get("flysession.redis.port") == 6379
        assert len(config.loaded_sources) == 2

    def test_missing_file_is_empty(self, tmp_path: Path):
        config = Config.from_file(tmp_path / "absent.yaml")
        assert config.to_dict() == {}
        assert config.loaded_sources == []


class TestBinding:
    def test_bind_session_properties(self):
        config = Config({"flysession": {"redis": {"host": "h", "max-pool-size": 8}, "exclude-patterns": ["/static/*"]}})
        props = config.bind(SessionProperties)
        assert props.redis.max_pool_size == 8
        assert props.redis.port == 6379
        assert props.ttl == 1800
        assert props.exclude_patterns == ["/static/*"]

    def test_bind_env_for_absent_fields(self, monkeypatch):
        monkeypatch.setenv("FLYSESSION_REDIS_HOST", "from-env")
        monkeypatch.setenv("FLYSESSION_TTL", "120")
        props = Config({}).bind(SessionProperties)
        assert props.redis.host == "from-env"
        assert props.ttl == 120

    def test_bind_validation_error(self):
        config = Config({"flysession": {"redis": {"host": "h"}, "ttl": 0}})
        with pytest.raises(ConfigurationError) as exc_info:
            config.bind(SessionProperties)
        assert exc_info.value.code == "CONFIG_INVALID"
        assert exc_info.value.context == {"prefix": "flysession"}

    def test_bind_undecorated_class(self):
        class Plain(BaseModel):
            value: int = 1

        with pytest.raises(ConfigurationError):
            Config({}).bind(Plain)

    def test_bind_custom_prefix(self):
        @config_properties(prefix="app.cache")
        class CacheProperties(BaseModel):
            size: int = 10

        assert Config({"app": {"cache": {"size": 42}}}).bind(CacheProperties).size == 42
