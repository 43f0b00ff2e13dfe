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
Unit tests for cross-entity checks.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from flowcheck_core.validation import EntityRef, FailureKind


class TestCheckCross:
    @pytest.mark.asyncio
    async def test_condition_holds(self, validator):
        a = validator.add(lambda: 5, "a")
        b = validator.add(lambda: 10, "b")
        validator.check_cross(a, b, lambda x, y: x < y, "a must be less than b")

        result = await validator.validate()

        assert result.is_valid is True

    @pytest.mark.asyncio
    async def test_condition_fails_under_first_ref(self, validator):
        a = validator.add(lambda: 10, "a")
        b = validator.add(lambda: 5, "b")
        validator.check_cross(a, b, lambda x, y: x < y, "a must be less than b")

        result = await validator.validate()

        assert result.is_valid is False
        assert result.entity == "a"
        assert result.error_message == "a must be less than b"
        assert result.kind is FailureKind.USER_CHECK_FAILED

    @pytest.mark.asyncio
    async def test_three_entities(self, validator):
        low = validator.add(lambda: 1, "low")
        mid = validator.add(lambda: 7, "mid")
        high = validator.add(lambda: 5, "high")
        validator.check_cross3(low, mid, high, lambda lo, m, hi: lo <= m <= hi, "mid out of range")

        result = await validator.validate()

        assert result.entity == "low"
        assert result.error_message == "mid out of range"

    @pytest.mark.asyncio
    async def test_missing_dependent_is_reported_not_raised(self, validator):
        a = validator.add(lambda: 1, "a")
        condition = MagicMock(return_value=True)
        validator.check_cross(a, EntityRef("b"), condition, "unused")

        result = await validator.validate()

        condition.assert_not_called()
        assert result.entity == "a"
        assert result.error_message == "dependent entity not resolved"

    @pytest.mark.asyncio
    async def test_dependent_with_wrong_type(self, validator):
        a = validator.add(lambda: 1, "a")
        validator.add(lambda: "two", "b")
        validator.check_cross(a, EntityRef("b", int), lambda x, y: x < y, "unused")

        result = await validator.validate()

        assert result.error_message == "dependent entity type error"

    @pytest.mark.asyncio
    async def test_missing_primary_is_entity_not_resolved(self, validator):
        b = validator.add(lambda: 1, "b")
        validator.check_cross(EntityRef("a"), b, lambda x, y: True, "unused")

        result = await validator.validate()

        assert result.entity == "a"
        assert result.error_message == "entity not resolved"

    @pytest.mark.asyncio
    async def test_condition_exception_is_validation_error(self, validator):
        a = validator.add(lambda: 1, "a")
        b = validator.add(lambda: 0, "b")
        validator.check_cross(a, b, lambda x, y: x / y > 1, "unused")

        result = await validator.validate()

        assert result.error_message == "validation error: division by zero"


class TestCheckCrossAsync:
    @pytest.mark.asyncio
    async def test_condition_is_awaited(self, validator):
        a = validator.add(lambda: "ann", "username")
        b = validator.add(lambda: "example.com", "domain")
        condition = AsyncMock(return_value=False)
        validator.check_cross_async(a, b, condition, "username taken on domain")

        result = await validator.validate()

        condition.assert_awaited_once_with("ann", "example.com")
        assert result.entity == "username"
        assert result.error_message == "username taken on domain"

    @pytest.mark.asyncio
    async def test_three_entities_pass(self, validator):
        a = validator.add(lambda: 1, "a")
        b = validator.add(lambda: 2, "b")
        c = validator.add(lambda: 3, "c")

        async def ordered(x, y, z):
            return x < y < z

        validator.check_cross3_async(a, b, c, ordered, "not ordered")

        result = await validator.validate()

        assert result.is_valid

    @pytest.mark.asyncio
    async def test_condition_exception_is_async_validation_error(self, validator):
        a = validator.add(lambda: 1, "a")
        b = validator.add(lambda: 2, "b")

        async def condition(x, y):
            raise TimeoutError("lookup timed out")

        validator.check_cross_async(a, b, condition, "unused")

        result = await validator.validate()

        assert result.entity == "a"
        assert result.error_message == "async validation error: lookup timed out"

    @pytest.mark.asyncio
    async def test_short_circuited_dependent_is_not_resolved(self, validator):
        a = validator.add(lambda: 1, "a")
        b = validator.add_async(AsyncMock(return_value=None), "b")
        validator.check_cross_async(a, b, AsyncMock(return_value=True), "unused")

        result = await validator.validate()

        # The null producer fails first; the cross check never runs.
        assert result.entity == "b"
        assert result.kind is FailureKind.NULL_ENTITY
