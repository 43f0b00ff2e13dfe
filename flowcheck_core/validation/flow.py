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
Validation Flow

Success/failure/finally callbacks around one FlowValidator run.

Usage:
    result = await (
        validator.start_flow()
        .on_success(lambda entities: save(entities.get("order")))
        .on_failure(lambda result, entities: notify(result.error_message))
        .finally_(lambda result: audit(result))
        .execute()
    )
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Awaitable, Callable

from flowcheck_core.utils.trace import Trace
from flowcheck_core.validation.result import ValidationResult
from flowcheck_core.validation.store import EntityStore

if TYPE_CHECKING:
    from flowcheck_core.validation.validator import FlowValidator

logger = logging.getLogger(__name__)

SuccessCallback = Callable[[EntityStore], Awaitable[None]]
FailureCallback = Callable[[ValidationResult, EntityStore], Awaitable[None]]
FinallyCallback = Callable[[ValidationResult], Awaitable[None]]


class ValidationFlow:
    """
    Runs a validator, then exactly one of on_success/on_failure, then finally.

    Each setter may be called again to replace the previous callback.
    Sync setters wrap the callable so that all callbacks are awaited
    uniformly by execute().
    """

    def __init__(self, validator: FlowValidator) -> None:
        self._validator = validator
        self._on_success: SuccessCallback | None = None
        self._on_failure: FailureCallback | None = None
        self._finally: FinallyCallback | None = None

    @property
    def validator(self) -> FlowValidator:
        return self._validator

    def on_success(self, action: Callable[[EntityStore], None]) -> ValidationFlow:
        async def _call(entities: EntityStore) -> None:
            action(entities)

        self._on_success = _call
        return self

    def on_success_async(self, action: SuccessCallback) -> ValidationFlow:
        self._on_success = action
        return self

    def on_failure(self, action: Callable[[ValidationResult, EntityStore], None]) -> ValidationFlow:
        """Failure callbacks also receive the entity store, so partial results stay reachable."""

        async def _call(result: ValidationResult, entities: EntityStore) -> None:
            action(result, entities)

        self._on_failure = _call
        return self

    def on_failure_async(self, action: FailureCallback) -> ValidationFlow:
        self._on_failure = action
        return self

    def finally_(self, action: Callable[[ValidationResult], None]) -> ValidationFlow:
        async def _call(result: ValidationResult) -> None:
            action(result)

        self._finally = _call
        return self

    def finally_async(self, action: FinallyCallback) -> ValidationFlow:
        self._finally = action
        return self

    async def execute(self) -> ValidationResult:
        """
        Validate, dispatch the outcome callback, then always run finally.

        An exception raised by on_success/on_failure propagates to the caller
        once the finally callback has completed.

        Returns:
            The validator's ValidationResult
        """
        result = await self._validator.validate()
        entities = self._validator.get_entities()

        try:
            if result.is_valid and self._on_success is not None:
                await self._on_success(entities)
            elif not result.is_valid and self._on_failure is not None:
                await self._on_failure(result, entities)
        except Exception as e:
            callback = "on_success" if result.is_valid else "on_failure"
            logger.exception("[ValidationFlow] %s callback failed: %s", callback, e)
            Trace.event(
                "flow.callback_error",
                {"is_valid": result.is_valid, "error": str(e), "error_type": type(e).__name__},
            )
            raise
        finally:
            if self._finally is not None:
                await self._finally(result)

        return result

    def execute_sync(self) -> ValidationResult:
        """Run execute() to completion from synchronous code."""
        return asyncio.run(self.execute())
