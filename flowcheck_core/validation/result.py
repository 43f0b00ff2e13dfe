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
Validation Result

Immutable "valid, or first error" outcome of a validator run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from flowcheck_core.validation.errors import FailureKind


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of a validator run.

    A result is either valid (no entity, no message) or carries the first
    failure reported during the run. with_error() is the only way to derive
    a failed result and it never replaces an existing failure.

    Attributes:
        is_valid: False once any step has failed
        entity: Name of the failing entity (for cross checks, the primary one)
        error_message: Message reported by the failing step
        kind: Taxonomy class of the failure
    """

    is_valid: bool = True
    entity: str | None = None
    error_message: str | None = None
    kind: FailureKind | None = None
    success_text: str = field(default="Validation succeeded", compare=False, repr=False)

    def with_error(
        self,
        entity: str,
        error_message: str,
        kind: FailureKind = FailureKind.USER_CHECK_FAILED,
    ) -> ValidationResult:
        """
        Return a failed result for (entity, error_message).

        First failure wins: a failed receiver is returned unchanged.
        """
        if not self.is_valid:
            return self
        return ValidationResult(
            is_valid=False,
            entity=entity,
            error_message=error_message,
            kind=kind,
            success_text=self.success_text,
        )

    @property
    def has_error(self) -> bool:
        return not self.is_valid

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "entity": self.entity,
            "error_message": self.error_message,
            "kind": self.kind.value if self.kind else None,
        }

    def __bool__(self) -> bool:
        return self.is_valid

    def __str__(self) -> str:
        return self.success_text if self.is_valid else f"[{self.entity}]: {self.error_message}"
