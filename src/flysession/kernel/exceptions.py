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
"""Unified exception hierarchy for flysession.

All library exceptions inherit from FlySessionException, so callers can
catch a single base class or a specific subclass.

Categories:
- BusinessException: programming-contract violations by the caller
- InfrastructureException: Redis connectivity and startup configuration
- AttributeCodecError: a single session attribute cannot cross the store boundary
"""

from __future__ import annotations

# =============================================================================
# Base Exception
# =============================================================================


class FlySessionException(Exception):
    """Base exception for all flysession errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "SESSION_STORE_001").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Business Exceptions
# =============================================================================


class BusinessException(FlySessionException):
    """Contract violations raised back to the caller."""


class IllegalUseError(BusinessException):
    """An operation was attempted through a path that must not perform it.

    Raised when handler code asks for a session to be created (only the
    session filter creates sessions) or mutates an invalidated session.
    """


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(FlySessionException):
    """Infrastructure failures: Redis, connection pool, configuration."""


class StoreConnectivityError(InfrastructureException):
    """The session store is unreachable or did not answer in time."""


class StoreCommandError(InfrastructureException):
    """The session store rejected a command (e.g. the key holds a non-hash value)."""


class ConfigurationError(InfrastructureException):
    """Missing or invalid store connection parameters at startup."""


# =============================================================================
# Codec Exceptions
# =============================================================================


class AttributeCodecError(FlySessionException):
    """A session attribute could not be converted to or from its stored form."""


class SerializationError(AttributeCodecError):
    """An attribute value cannot be encoded for the store."""


class DeserializationError(AttributeCodecError):
    """A stored attribute payload cannot be decoded."""
