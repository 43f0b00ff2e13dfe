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
Validation Steps

A validator accumulates an ordered list of deferred steps. Each step is a
small frozen record describing *what* to run; FlowValidator interprets it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from flowcheck_core.validation.refs import EntityRef


class StepKind(str, Enum):
    SYNC_PRODUCE = "sync_produce"
    ASYNC_PRODUCE = "async_produce"
    SYNC_CHECK = "sync_check"
    ASYNC_CHECK = "async_check"

    @property
    def is_produce(self) -> bool:
        return self in (StepKind.SYNC_PRODUCE, StepKind.ASYNC_PRODUCE)

    @property
    def is_async(self) -> bool:
        return self in (StepKind.ASYNC_PRODUCE, StepKind.ASYNC_CHECK)


@dataclass(frozen=True)
class Step:
    """
    One deferred unit of validator work.

    Attributes:
        kind: Which of the four step shapes this is
        entity: Name failures are reported under (the produced or checked entity)
        fn: Producer, factory or predicate
        ref: Checked ref (checks only)
        pass_store: Call fn with the EntityStore (then_add / then_add_async)
        nullable: Accept None from a producer
        failure_prefix: Message prefix used when fn raises
        index: Position in the step list
        label: Builder operation that declared the step, for logs and traces
    """

    kind: StepKind
    entity: str
    fn: Callable[..., Any]
    failure_prefix: str
    index: int
    label: str
    ref: EntityRef[Any] | None = None
    pass_store: bool = False
    nullable: bool = False

    @property
    def name(self) -> str:
        return f"{self.label}:{self.entity}"
