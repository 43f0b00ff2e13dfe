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
Entity Store

Name-keyed map of every entity produced during a validator run.
"""

from __future__ import annotations

import threading
import types
import typing
from typing import Any, Iterator

from flowcheck_core.validation.errors import EntityNotFound, EntityTypeMismatch


def _isinstance_target(tp: Any) -> type | tuple[type, ...]:
    """Reduce a type hint (list[int], Optional[str], int | None) to something isinstance() accepts."""
    origin = typing.get_origin(tp)
    if origin is typing.Union or origin is types.UnionType:
        targets: list[type] = []
        for arg in typing.get_args(tp):
            t = _isinstance_target(arg)
            targets.extend(t if isinstance(t, tuple) else (t,))
        return tuple(targets)
    if origin is not None:
        return origin
    if tp is None:
        return type(None)
    if tp is Any:
        return object
    return tp


def _matches(value: Any, tp: Any) -> bool:
    """isinstance() against a type hint; Literal members compare by value."""
    origin = typing.get_origin(tp)
    if origin is typing.Union or origin is types.UnionType:
        return any(_matches(value, arg) for arg in typing.get_args(tp))
    if origin is typing.Literal:
        return value in typing.get_args(tp)
    try:
        return isinstance(value, _isinstance_target(tp))
    except TypeError:
        # TypeVar, NewType and similar hints have no runtime class to test against
        return False


class EntityStore:
    """
    Thread-safe entity map shared by all steps of one validator.

    Only the engine writes; predicates and flow callbacks read. Awaited
    producers may resume on another thread, so every access takes the lock.
    The store never evicts: it grows for the lifetime of its validator.
    """

    def __init__(self) -> None:
        self._entities: dict[str, Any] = {}
        self._lock = threading.RLock()

    def set(self, name: str, value: Any) -> None:
        """Store value under name, replacing any previous value."""
        with self._lock:
            self._entities[name] = value

    def get(self, name: str, expected_type: Any = None) -> Any:
        """
        Return the entity stored under name.

        Raises:
            EntityNotFound: name is absent
            EntityTypeMismatch: expected_type is given and the value is not an instance of it
        """
        with self._lock:
            if name not in self._entities:
                raise EntityNotFound(name)
            value = self._entities[name]

        if expected_type is not None and not _matches(value, expected_type):
            raise EntityTypeMismatch(name, expected_type, type(value))
        return value

    def contains(self, name: str) -> bool:
        with self._lock:
            return name in self._entities

    def names(self) -> list[str]:
        """Entity names in insertion order."""
        with self._lock:
            return list(self._entities)

    def snapshot(self) -> dict[str, Any]:
        """Shallow copy of the current entities."""
        with self._lock:
            return dict(self._entities)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.contains(name)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entities)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __repr__(self) -> str:
        return f"EntityStore(names={self.names()})"
