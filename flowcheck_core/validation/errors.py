# Copyright (C) 2025 Ivan Bondarenko
#
# This file is part of FlowCheck Engine.
#
# FlowCheck Engine is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# FlowCheck Engine is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with FlowCheck Engine. If not, see <https://www.gnu.org/licenses/>.

# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (c) 2024-2025 FlowCheck Contributors
"""
Validation Errors

Two families live here:

- FailureKind: data failures. They are never raised out of the engine;
  a step catches them at its boundary and folds them into the sticky
  ValidationResult.
- FlowCheckError subclasses: lookup errors raised by the EntityStore (and
  caught by the engine) and MisuseError, the only error that propagates
  out of validate()/execute().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FailureKind(str, Enum):
    ENTITY_NOT_FOUND = "entity_not_found"
    ENTITY_TYPE_MISMATCH = "entity_type_mismatch"
    NULL_ENTITY = "null_entity"
    USER_CHECK_FAILED = "user_check_failed"
    USER_CHECK_THREW = "user_check_threw"


class FlowCheckError(Exception):
    """Base class for errors raised by FlowCheck."""


class EntityNotFound(FlowCheckError, KeyError):
    """
    Raised when an entity name is absent from the store.

    Covers names that were never registered as well as names whose producing
    step has not run yet or was short-circuited away.
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Entity '{name}' does not exist")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return self.args[0]


class EntityTypeMismatch(FlowCheckError, TypeError):
    """Raised when a stored value is not an instance of the type a handle declares."""

    def __init__(self, name: str, expected: type, actual: type):
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Entity '{name}' is {actual.__name__}, expected {getattr(expected, '__name__', expected)}"
        )


@dataclass
class MisuseError(FlowCheckError):
    """
    Raised when a validator is programmed incorrectly.

    This is a programmer error, not a validation failure: building onto an
    executed validator, constructing a handle without a name, or calling
    validate() re-entrantly from inside one of its own steps.

    Attributes:
        operation: Builder/engine operation that was misused
        reason: What went wrong
        details: Additional context for debugging
    """

    operation: str
    reason: str
    details: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(f"Invalid use of '{self.operation}': {self.reason}")

    def to_trace_dict(self) -> dict[str, Any]:
        """Convert to dictionary for trace logging."""
        return {
            "error": "misuse",
            "operation": self.operation,
            "reason": self.reason,
            "details": self.details,
        }
