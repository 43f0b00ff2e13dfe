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
Unit tests for ValidationResult, EntityStore and EntityRef.
"""

import threading
from typing import Literal, NewType, Optional, TypeVar

import pytest

from flowcheck_core.validation import (
    EntityNotFound,
    EntityRef,
    EntityStore,
    EntityTypeMismatch,
    FailureKind,
    MisuseError,
    ValidationResult,
)


class TestValidationResult:
    def test_new_result_is_valid(self):
        result = ValidationResult()
        assert result.is_valid
        assert result.entity is None
        assert result.error_message is None
        assert bool(result) is True

    def test_with_error_returns_failed_copy(self):
        valid = ValidationResult()
        failed = valid.with_error("user", "missing")

        assert valid.is_valid
        assert failed.is_valid is False
        assert failed.has_error
        assert failed.entity == "user"
        assert failed.error_message == "missing"
        assert failed.kind is FailureKind.USER_CHECK_FAILED

    def test_first_error_is_sticky(self):
        failed = ValidationResult().with_error("a", "first", FailureKind.NULL_ENTITY)
        again = failed.with_error("b", "second")

        assert again is failed
        assert again.entity == "a"
        assert again.kind is FailureKind.NULL_ENTITY

    def test_result_is_immutable(self):
        result = ValidationResult()
        with pytest.raises(AttributeError):
            result.is_valid = False

    def test_str_and_dict(self):
        failed = ValidationResult().with_error("age", "too young")
        assert str(failed) == "[age]: too young"
        assert failed.to_dict() == {
            "is_valid": False,
            "entity": "age",
            "error_message": "too young",
            "kind": "user_check_failed",
        }

    def test_success_text_is_ignored_by_equality(self):
        custom = ValidationResult(success_text="OK")
        assert str(custom) == "OK"
        assert custom == ValidationResult()


class TestEntityStore:
    def test_set_and_get(self):
        store = EntityStore()
        store.set("a", 1)

        assert store.get("a") == 1
        assert "a" in store
        assert len(store) == 1
        assert list(store) == ["a"]

    def test_missing_entity(self):
        store = EntityStore()
        with pytest.raises(EntityNotFound) as exc:
            store.get("ghost")
        assert exc.value.name == "ghost"
        assert str(exc.value) == "Entity 'ghost' does not exist"
        # Still a KeyError for callers that use the store like a mapping
        assert isinstance(exc.value, KeyError)

    def test_type_mismatch(self):
        store = EntityStore()
        store.set("a", "text")
        with pytest.raises(EntityTypeMismatch) as exc:
            store.get("a", int)
        assert exc.value.expected is int
        assert exc.value.actual is str

    @pytest.mark.parametrize("hint,value", [
        (Optional[int], None),
        (Optional[int], 3),
        (int | str, "x"),
        (dict[str, int], {"a": 1}),
        (object, 1.5),
    ])
    def test_type_hints_are_accepted(self, hint, value):
        store = EntityStore()
        store.set("a", value)
        assert store.get("a", hint) == value

    def test_literal_hints_compare_by_value(self):
        store = EntityStore()
        store.set("mode", "a")

        assert store.get("mode", Literal["a", "b"]) == "a"
        assert store.get("mode", Optional[Literal["a"]]) == "a"
        with pytest.raises(EntityTypeMismatch):
            store.get("mode", Literal["c"])

    @pytest.mark.parametrize("hint", [TypeVar("V"), NewType("UserId", int)])
    def test_hints_without_runtime_class_are_a_mismatch(self, hint):
        store = EntityStore()
        store.set("a", 1)
        with pytest.raises(EntityTypeMismatch):
            store.get("a", hint)

    def test_snapshot_is_a_copy(self):
        store = EntityStore()
        store.set("a", 1)
        snap = store.snapshot()
        snap["b"] = 2
        assert "b" not in store

    def test_concurrent_writes(self):
        store = EntityStore()

        def writer(offset: int) -> None:
            for i in range(200):
                store.set(f"k{offset}_{i}", i)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(store) == 8 * 200


class TestEntityRef:
    def test_resolves_against_store(self):
        store = EntityStore()
        store.set("a", 1)
        assert EntityRef("a", int).get(store) == 1

    @pytest.mark.parametrize("name", [None, "", 42])
    def test_invalid_names_are_misuse(self, name):
        with pytest.raises(MisuseError):
            EntityRef(name)

    def test_detached_ref(self):
        ref = EntityRef.detached(int)
        assert ref.is_detached
        assert ref.name == ""
        with pytest.raises(EntityNotFound):
            ref.get(EntityStore())

    def test_refs_compare_by_name_and_type(self):
        assert EntityRef("a", int) == EntityRef("a", int)
        assert EntityRef("a", int) != EntityRef("a", str)
        assert str(EntityRef("a")) == "a"
