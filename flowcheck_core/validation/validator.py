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
Flow Validator

Builder and execution engine for entity validation runs.

Design Principles:
- Builder calls only record deferred steps; nothing runs until validate()
- Steps run strictly in declaration order, one at a time
- The first failure wins and short-circuits every later step
- Data failures never raise: they are folded into the ValidationResult
- Only MisuseError (a programming mistake) propagates

Usage:
    from flowcheck_core.validation import FlowValidator

    validator = FlowValidator()
    user = validator.add(lambda: load_user(user_id), "user")
    balance = validator.add_async(lambda: fetch_balance(user_id), "balance", type_=int)
    validator.check(user, lambda u: (u.active, "user is inactive"))
    validator.check_cross(balance, price, lambda b, p: b >= p, "insufficient balance")

    result = await validator.validate()
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
import uuid
from enum import Enum
from typing import Any, Awaitable, Callable, TypeVar

from flowcheck_core.config import FlowCheckConfig
from flowcheck_core.runtime_config import FlowCheckRuntimeConfig
from flowcheck_core.utils.trace import Trace
from flowcheck_core.validation.checks import CheckHelpersMixin
from flowcheck_core.validation.constants import SKIP_REASON_SHORT_CIRCUIT
from flowcheck_core.validation.errors import (
    EntityNotFound,
    EntityTypeMismatch,
    FailureKind,
    MisuseError,
)
from flowcheck_core.validation.flow import ValidationFlow
from flowcheck_core.validation.execution_state import (
    StepExecutionState,
    ValidationExecutionState,
)
from flowcheck_core.validation.refs import EntityRef
from flowcheck_core.validation.result import ValidationResult
from flowcheck_core.validation.steps import Step, StepKind
from flowcheck_core.validation.store import EntityStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ValidatorState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"


class FlowValidator(CheckHelpersMixin):
    """
    Ordered list of deferred entity productions and checks.

    Producers (add, add_async, then_add, then_add_async) return an EntityRef
    immediately; checks return the validator so calls can be chained.
    validate() runs the steps once and caches the result.

    Attributes:
        config: Message catalogue and synthetic name prefixes
    """

    def __init__(
        self,
        config: FlowCheckConfig | None = None,
        *,
        runtime: FlowCheckRuntimeConfig | None = None,
    ) -> None:
        self.config = config or FlowCheckConfig()
        self._messages = self.config.messages
        self._runtime = runtime or FlowCheckRuntimeConfig.load_from_env()
        # FLOWCHECK_DEBUG implies per-step logging
        self._log_steps = self._runtime.features.log_step_events or self._runtime.debug.engine_debug
        self._store = EntityStore()
        self._result = ValidationResult(success_text=self._messages.success)
        self._steps: list[Step] = []
        self._state = ValidatorState.IDLE
        self._execution_state = ValidationExecutionState()

    # ─────────────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────────────

    @property
    def state(self) -> ValidatorState:
        return self._state

    @property
    def executed(self) -> bool:
        return self._state is ValidatorState.DONE

    @property
    def has_error(self) -> bool:
        return not self._result.is_valid

    @property
    def result(self) -> ValidationResult:
        return self._result

    @property
    def entities(self) -> EntityStore:
        return self._store

    def get_entities(self) -> EntityStore:
        return self._store

    @property
    def step_count(self) -> int:
        return len(self._steps)

    @property
    def execution_state(self) -> ValidationExecutionState:
        return self._execution_state

    def get_value(self, ref: EntityRef[T]) -> T:
        """
        Read an entity produced by this validator.

        Raises:
            EntityNotFound: entity absent (never produced, or short-circuited away)
            EntityTypeMismatch: value does not match ref.type_
        """
        return ref.get(self._store)

    def get_value_or_default(self, ref: EntityRef[T], default: T | None = None) -> T | None:
        try:
            return ref.get(self._store)
        except (EntityNotFound, EntityTypeMismatch):
            return default

    def start_flow(self) -> ValidationFlow:
        """Wrap this validator in a ValidationFlow for success/failure/finally callbacks."""
        return ValidationFlow(self)

    # ─────────────────────────────────────────────────────────────────────
    # Builder
    # ─────────────────────────────────────────────────────────────────────

    def add(
        self,
        producer: Callable[[], T],
        name: str | None = None,
        *,
        type_: Any = None,
        nullable: bool = False,
    ) -> EntityRef[T]:
        """Register a synchronous producer; its value is stored under name."""
        return self._add_produce(
            operation="add",
            kind=StepKind.SYNC_PRODUCE,
            fn=producer,
            name=name,
            prefix=self.config.add_name_prefix,
            failure_prefix=self._messages.add_failed_prefix,
            pass_store=False,
            type_=type_,
            nullable=nullable,
        )

    def add_async(
        self,
        producer: Callable[[], Awaitable[T]],
        name: str | None = None,
        *,
        type_: Any = None,
        nullable: bool = False,
    ) -> EntityRef[T]:
        """Register an asynchronous producer; its awaited value is stored under name."""
        return self._add_produce(
            operation="add_async",
            kind=StepKind.ASYNC_PRODUCE,
            fn=producer,
            name=name,
            prefix=self.config.add_async_name_prefix,
            failure_prefix=self._messages.add_async_failed_prefix,
            pass_store=False,
            type_=type_,
            nullable=nullable,
        )

    def then_add(
        self,
        factory: Callable[[EntityStore], T],
        name: str | None = None,
        *,
        type_: Any = None,
        nullable: bool = False,
    ) -> EntityRef[T]:
        """Register a factory that reads earlier entities from the store."""
        return self._add_produce(
            operation="then_add",
            kind=StepKind.SYNC_PRODUCE,
            fn=factory,
            name=name,
            prefix=self.config.then_add_name_prefix,
            failure_prefix=self._messages.then_add_failed_prefix,
            pass_store=True,
            type_=type_,
            nullable=nullable,
        )

    def then_add_async(
        self,
        factory: Callable[[EntityStore], Awaitable[T]],
        name: str | None = None,
        *,
        type_: Any = None,
        nullable: bool = False,
    ) -> EntityRef[T]:
        """Asynchronous variant of then_add."""
        return self._add_produce(
            operation="then_add_async",
            kind=StepKind.ASYNC_PRODUCE,
            fn=factory,
            name=name,
            prefix=self.config.then_add_async_name_prefix,
            failure_prefix=self._messages.then_add_async_failed_prefix,
            pass_store=True,
            type_=type_,
            nullable=nullable,
        )

    def check(self, ref: EntityRef[T], predicate: Callable[[T], tuple[bool, str]]) -> FlowValidator:
        """
        Register a check on one entity.

        predicate receives the entity value and returns (is_valid, error_message);
        on is_valid == False the message is reported under ref.name.
        """
        return self._add_check("check", StepKind.SYNC_CHECK, ref, predicate, self._messages.check_error_prefix)

    def check_async(
        self,
        ref: EntityRef[T],
        predicate: Callable[[T], Awaitable[tuple[bool, str]]],
    ) -> FlowValidator:
        """Asynchronous variant of check."""
        return self._add_check(
            "check_async", StepKind.ASYNC_CHECK, ref, predicate, self._messages.check_async_error_prefix
        )

    def _ensure_buildable(self, operation: str) -> None:
        if self._state is not ValidatorState.IDLE:
            logger.warning("[FlowValidator] %s() called on a validator in state '%s'", operation, self._state.value)
            raise MisuseError(
                operation=operation,
                reason=(
                    "validator has already been executed"
                    if self._state is ValidatorState.DONE
                    else "steps cannot be added while the validator is running"
                ),
                details={"state": self._state.value},
            )

    def _add_produce(
        self,
        *,
        operation: str,
        kind: StepKind,
        fn: Callable[..., Any],
        name: str | None,
        prefix: str,
        failure_prefix: str,
        pass_store: bool,
        type_: Any,
        nullable: bool,
    ) -> EntityRef[Any]:
        self._ensure_buildable(operation)
        if self.has_error:
            return EntityRef.detached(type_)

        if name is None:
            name = f"{prefix}_{uuid.uuid4().hex}"
        ref: EntityRef[Any] = EntityRef(name, type_)

        self._steps.append(
            Step(
                kind=kind,
                entity=ref.name,
                fn=fn,
                failure_prefix=failure_prefix,
                index=len(self._steps),
                label=operation,
                pass_store=pass_store,
                nullable=nullable,
            )
        )
        return ref

    def _add_check(
        self,
        operation: str,
        kind: StepKind,
        ref: EntityRef[Any],
        predicate: Callable[..., Any],
        failure_prefix: str,
    ) -> FlowValidator:
        self._ensure_buildable(operation)
        if self.has_error:
            return self

        self._steps.append(
            Step(
                kind=kind,
                entity=ref.name,
                fn=predicate,
                failure_prefix=failure_prefix,
                index=len(self._steps),
                label=operation,
                ref=ref,
            )
        )
        return self

    # ─────────────────────────────────────────────────────────────────────
    # Execution
    # ─────────────────────────────────────────────────────────────────────

    async def validate(self) -> ValidationResult:
        """
        Run every step in order, stopping at the first failure.

        The first call runs the steps; later calls return the cached result
        without running anything.

        Raises:
            MisuseError: validate() re-entered from one of its own steps, or
                a previous run was interrupted (e.g. cancelled) mid-step
        """
        if self._state is ValidatorState.DONE:
            return self._result
        if self._state is ValidatorState.RUNNING:
            raise MisuseError(
                operation="validate",
                reason="validator is already running or its previous run was interrupted",
            )

        self._state = ValidatorState.RUNNING
        exec_state = self._execution_state
        exec_state.started_at = time.time()
        exec_state.steps = [
            StepExecutionState(index=s.index, name=s.name, kind=s.kind.value) for s in self._steps
        ]

        Trace.event("validator.start", {"step_count": len(self._steps), "steps": [s.name for s in self._steps]})

        for step, step_state in zip(self._steps, exec_state.steps):
            if self.has_error:
                step_state.mark_skipped(reason=SKIP_REASON_SHORT_CIRCUIT)
                continue

            step_state.mark_running(timestamp=time.time())
            if self._log_steps:
                logger.debug("[FlowValidator] Running step %d '%s'", step.index, step.name)

            await self._run_step(step)

            if self.has_error:
                step_state.mark_failed(timestamp=time.time(), error=self._result.error_message or "")
            else:
                step_state.mark_succeeded(timestamp=time.time())

        skipped = [s.name for s, st in zip(self._steps, exec_state.steps) if st.skip_reason]
        if skipped:
            Trace.event("validator.short_circuit", {"skipped": skipped})

        exec_state.completed_at = time.time()
        self._state = ValidatorState.DONE

        logger.debug("[FlowValidator] Completed: %s (%s)", self._result, exec_state.to_summary())
        Trace.event("validator.end", {"result": self._result.to_dict(), "summary": exec_state.to_summary()})
        return self._result

    def validate_sync(self) -> ValidationResult:
        """Run validate() to completion from synchronous code."""
        return asyncio.run(self.validate())

    async def _run_step(self, step: Step) -> None:
        if step.kind.is_produce:
            await self._run_produce(step)
        else:
            await self._run_check(step)

    async def _run_produce(self, step: Step) -> None:
        try:
            value = step.fn(self._store) if step.pass_store else step.fn()
            if step.kind.is_async and inspect.isawaitable(value):
                value = await value
        except MisuseError:
            raise
        except Exception as e:
            self._fail(step, f"{step.failure_prefix}: {e}", FailureKind.USER_CHECK_THREW, error=e)
            return

        if value is None and not step.nullable:
            self._fail(step, self._messages.null_entity, FailureKind.NULL_ENTITY)
            return

        self._store.set(step.entity, value)

    async def _run_check(self, step: Step) -> None:
        if step.ref is None:
            raise MisuseError(operation=step.label, reason="check step has no entity reference")
        try:
            value = step.ref.get(self._store)
            outcome = step.fn(value)
            if step.kind.is_async:
                outcome = await outcome
            is_valid, error_message = outcome
        except EntityNotFound as e:
            self._fail(step, self._messages.entity_not_resolved, FailureKind.ENTITY_NOT_FOUND, error=e)
        except EntityTypeMismatch as e:
            self._fail(step, self._messages.entity_type_error, FailureKind.ENTITY_TYPE_MISMATCH, error=e)
        except MisuseError:
            raise
        except Exception as e:
            self._fail(step, f"{step.failure_prefix}: {e}", FailureKind.USER_CHECK_THREW, error=e)
        else:
            if not is_valid:
                self._fail(step, error_message, FailureKind.USER_CHECK_FAILED)

    def _fail(
        self,
        step: Step,
        error_message: str,
        kind: FailureKind,
        *,
        error: Exception | None = None,
    ) -> None:
        self._result = self._result.with_error(step.entity, error_message, kind)
        logger.debug(
            "[FlowValidator] Step %d '%s' failed (%s): %s",
            step.index,
            step.name,
            kind.value,
            error_message,
        )
        Trace.event(
            "validator.step_failed",
            {
                "step": step.name,
                "index": step.index,
                "entity": step.entity,
                "kind": kind.value,
                "error_message": error_message,
                "error_type": type(error).__name__ if error is not None else None,
            },
        )

    def __repr__(self) -> str:
        return f"FlowValidator(state={self._state.value}, steps={[s.name for s in self._steps]})"
