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
Convenience Checks

Null/empty/pattern checks and cross-entity checks. Every helper here is an
ordinary check()/check_async() with a prepared predicate; none of them
touches the step list directly.
"""

from __future__ import annotations

import re
from collections.abc import Sized
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Sequence

from flowcheck_core.validation.errors import EntityNotFound, EntityTypeMismatch, MisuseError

if TYPE_CHECKING:
    from flowcheck_core.config import FlowCheckConfig
    from flowcheck_core.validation.refs import EntityRef
    from flowcheck_core.validation.validator import FlowValidator


def _has_items(value: Any) -> bool:
    # Only sized values qualify; iterating a stored iterator would consume it.
    return isinstance(value, Sized) and len(value) > 0


class CheckHelpersMixin:
    """Check helpers mixed into FlowValidator."""

    config: FlowCheckConfig

    if TYPE_CHECKING:

        def check(self, ref: EntityRef[Any], predicate: Callable[[Any], tuple[bool, str]]) -> FlowValidator: ...

        def check_async(
            self, ref: EntityRef[Any], predicate: Callable[[Any], Awaitable[tuple[bool, str]]]
        ) -> FlowValidator: ...

        def get_value(self, ref: EntityRef[Any]) -> Any: ...

    # ─────────────────────────────────────────────────────────────────────
    # Single-entity checks
    # ─────────────────────────────────────────────────────────────────────

    def check_not_none(self, ref: EntityRef[Any], error_message: str | None = None) -> FlowValidator:
        """Fail when the entity is None (only possible for entities added with nullable=True)."""
        message = error_message or self.config.messages.not_none
        return self.check(ref, lambda value: (value is not None, message))

    def check_not_empty(self, ref: EntityRef[Any], error_message: str | None = None) -> FlowValidator:
        """Fail unless the entity is a sized collection with len() > 0; bare iterators are rejected."""
        message = error_message or self.config.messages.not_empty_collection
        return self.check(ref, lambda value: (_has_items(value), message))

    def check_not_none_or_empty(self, ref: EntityRef[Any], error_message: str | None = None) -> FlowValidator:
        """Fail when the entity is None or the empty string."""
        message = error_message or self.config.messages.not_empty_string
        return self.check(ref, lambda value: (value is not None and value != "", message))

    def check_matches(
        self,
        ref: EntityRef[Any],
        pattern: str | re.Pattern[str],
        error_message: str,
    ) -> FlowValidator:
        """
        Fail unless the entity is a string matching pattern.

        Uses re.search, so the pattern may match anywhere; anchor it with ^...$
        to require a full match.
        """
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        return self.check(
            ref,
            lambda value: (isinstance(value, str) and regex.search(value) is not None, error_message),
        )

    # ─────────────────────────────────────────────────────────────────────
    # Cross-entity checks
    # ─────────────────────────────────────────────────────────────────────

    def check_cross(
        self,
        ref1: EntityRef[Any],
        ref2: EntityRef[Any],
        condition: Callable[[Any, Any], bool],
        error_message: str,
    ) -> FlowValidator:
        """
        Check a condition over two entities; failures are reported under ref1.

        Example:
            validator.check_cross(start, end, lambda s, e: s < e, "start must precede end")
        """
        return self._check_cross_sync(ref1, (ref2,), condition, error_message)

    def check_cross3(
        self,
        ref1: EntityRef[Any],
        ref2: EntityRef[Any],
        ref3: EntityRef[Any],
        condition: Callable[[Any, Any, Any], bool],
        error_message: str,
    ) -> FlowValidator:
        """Three-entity variant of check_cross."""
        return self._check_cross_sync(ref1, (ref2, ref3), condition, error_message)

    def check_cross_async(
        self,
        ref1: EntityRef[Any],
        ref2: EntityRef[Any],
        condition: Callable[[Any, Any], Awaitable[bool]],
        error_message: str,
    ) -> FlowValidator:
        """Asynchronous variant of check_cross."""
        return self._check_cross_async(ref1, (ref2,), condition, error_message)

    def check_cross3_async(
        self,
        ref1: EntityRef[Any],
        ref2: EntityRef[Any],
        ref3: EntityRef[Any],
        condition: Callable[[Any, Any, Any], Awaitable[bool]],
        error_message: str,
    ) -> FlowValidator:
        """Asynchronous variant of check_cross3."""
        return self._check_cross_async(ref1, (ref2, ref3), condition, error_message)

    def _resolve_dependents(self, refs: Sequence[EntityRef[Any]]) -> tuple[list[Any] | None, str | None]:
        messages = self.config.messages
        try:
            return [self.get_value(ref) for ref in refs], None
        except EntityNotFound:
            return None, messages.dependent_not_resolved
        except EntityTypeMismatch:
            return None, messages.dependent_type_error

    def _check_cross_sync(
        self,
        primary: EntityRef[Any],
        dependents: Sequence[EntityRef[Any]],
        condition: Callable[..., bool],
        error_message: str,
    ) -> FlowValidator:
        def predicate(value: Any) -> tuple[bool, str]:
            others, lookup_error = self._resolve_dependents(dependents)
            if lookup_error is not None:
                return False, lookup_error
            return bool(condition(value, *others)), error_message

        return self.check(primary, predicate)

    def _check_cross_async(
        self,
        primary: EntityRef[Any],
        dependents: Sequence[EntityRef[Any]],
        condition: Callable[..., Awaitable[bool]],
        error_message: str,
    ) -> FlowValidator:
        async def predicate(value: Any) -> tuple[bool, str]:
            others, lookup_error = self._resolve_dependents(dependents)
            if lookup_error is not None:
                return False, lookup_error
            try:
                is_valid = bool(await condition(value, *others))
            except MisuseError:
                raise
            except Exception as e:
                return False, f"{self.config.messages.check_async_error_prefix}: {e}"
            return is_valid, "" if is_valid else error_message

        return self.check_async(primary, predicate)
