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

"""
FlowCheck Core Engine
=====================

Fluent, short-circuiting entity validation for sync and async code.
"""

__version__ = "1.0.0"

from flowcheck_core.config import FlowCheckConfig, ValidationMessages
from flowcheck_core.runtime_config import FlowCheckRuntimeConfig
from flowcheck_core.validation import (
    EntityNotFound,
    EntityRef,
    EntityStore,
    EntityTypeMismatch,
    FailureKind,
    FlowValidator,
    MisuseError,
    ValidationFlow,
    ValidationResult,
    ValidatorState,
)

__all__ = [
    "FlowCheckConfig",
    "ValidationMessages",
    "FlowCheckRuntimeConfig",
    "EntityNotFound",
    "EntityRef",
    "EntityStore",
    "EntityTypeMismatch",
    "FailureKind",
    "FlowValidator",
    "MisuseError",
    "ValidationFlow",
    "ValidationResult",
    "ValidatorState",
]
