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
"""Step-level execution state for validator runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from flowcheck_core.validation.constants import (
    STEP_STATUS_FAILED,
    STEP_STATUS_PENDING,
    STEP_STATUS_RUNNING,
    STEP_STATUS_SKIPPED,
    STEP_STATUS_SUCCEEDED,
)


@dataclass
class StepExecutionState:
    """Execution status and timing for a single validator step."""

    index: int
    name: str
    kind: str
    status: str = STEP_STATUS_PENDING
    started_at: float | None = None
    completed_at: float | None = None
    error: str | None = None
    skip_reason: str | None = None

    def mark_running(self, *, timestamp: float) -> None:
        self.status = STEP_STATUS_RUNNING
        self.started_at = timestamp

    def mark_succeeded(self, *, timestamp: float) -> None:
        self.status = STEP_STATUS_SUCCEEDED
        self.completed_at = timestamp

    def mark_failed(self, *, timestamp: float, error: str) -> None:
        self.status = STEP_STATUS_FAILED
        self.completed_at = timestamp
        self.error = error

    def mark_skipped(self, *, reason: str | None = None) -> None:
        self.status = STEP_STATUS_SKIPPED
        self.skip_reason = reason

    def to_dict(self) -> dict[str, Any]:
        duration = None
        if self.started_at is not None and self.completed_at is not None:
            duration = self.completed_at - self.started_at
        return {
            "index": self.index,
            "name": self.name,
            "kind": self.kind,
            "status": self.status,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "duration_s": duration,
            "error": self.error,
            "skip_reason": self.skip_reason,
        }


@dataclass
class ValidationExecutionState:
    """Execution state and timing for one validator run."""

    steps: list[StepExecutionState] = field(default_factory=list)
    started_at: float | None = None
    completed_at: float | None = None

    def count(self, status: str) -> int:
        return sum(1 for s in self.steps if s.status == status)

    def to_dict(self) -> dict[str, Any]:
        duration = None
        if self.started_at is not None and self.completed_at is not None:
            duration = self.completed_at - self.started_at
        return {
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "duration_s": duration,
            "steps": [state.to_dict() for state in self.steps],
        }

    def to_summary(self) -> dict[str, Any]:
        """Return a lightweight summary for logs or UI."""
        duration = None
        if self.started_at is not None and self.completed_at is not None:
            duration = self.completed_at - self.started_at
        return {
            "step_count": len(self.steps),
            "succeeded": self.count(STEP_STATUS_SUCCEEDED),
            "failed": self.count(STEP_STATUS_FAILED),
            "skipped": self.count(STEP_STATUS_SKIPPED),
            "duration_s": duration,
        }
