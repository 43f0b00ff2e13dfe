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
Validation Module

Fluent entity validation with first-failure short-circuiting.

This module provides:
- FlowValidator: Builder that records entity productions and checks, and runs them once
- ValidationFlow: Success/failure/finally callbacks around a validator run
- ValidationResult: Immutable "valid, or first error" outcome
- EntityRef: Typed handle used to read entities back
- EntityStore: Thread-safe map of produced entities

Example:
    from flowcheck_core.validation import FlowValidator

    validator = FlowValidator()
    a = validator.add(lambda: 5, "a")
    b = validator.add(lambda: 10, "b")
    validator.check_cross(a, b, lambda x, y: x < y, "a must be less than b")

    result = await validator.start_flow().on_failure(report).execute()
"""

from flowcheck_core.validation.errors import (
    EntityNotFound,
    EntityTypeMismatch,
    FailureKind,
    FlowCheckError,
    MisuseError,
)
from flowcheck_core.validation.execution_state import (
    StepExecutionState,
    ValidationExecutionState,
)
from flowcheck_core.validation.flow import ValidationFlow
from flowcheck_core.validation.refs import EntityRef
from flowcheck_core.validation.result import ValidationResult
from flowcheck_core.validation.steps import Step, StepKind
from flowcheck_core.validation.store import EntityStore
from flowcheck_core.validation.validator import FlowValidator, ValidatorState


__all__ = [
    # Engine
    "FlowValidator",
    "ValidatorState",
    "ValidationFlow",
    # Data
    "ValidationResult",
    "EntityRef",
    "EntityStore",
    "Step",
    "StepKind",
    "StepExecutionState",
    "ValidationExecutionState",
    # Errors
    "FailureKind",
    "FlowCheckError",
    "EntityNotFound",
    "EntityTypeMismatch",
    "MisuseError",
]
