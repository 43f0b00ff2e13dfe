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
Entity References

Typed handles used to address entities in an EntityStore.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from flowcheck_core.validation.constants import DETACHED_ENTITY_NAME
from flowcheck_core.validation.errors import MisuseError
from flowcheck_core.validation.store import EntityStore

T = TypeVar("T")


@dataclass(frozen=True)
class EntityRef(Generic[T]):
    """
    Capability to look up one entity by name.

    The runtime payload is the name plus, optionally, the type the entity is
    declared with; when type_ is set, lookups reject values of another type.
    A ref never owns its value: the EntityStore does.

    Attributes:
        name: Non-empty entity name ("" only for detached refs)
        type_: Declared runtime type (class or type hint), or None for "any"
    """

    name: str
    type_: Any = None
    _detached: bool = field(default=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self._detached:
            return
        if not isinstance(self.name, str) or not self.name:
            raise MisuseError(
                operation="EntityRef",
                reason="entity name must be a non-empty string",
                details={"name": repr(self.name)},
            )

    @classmethod
    def detached(cls, type_: Any = None) -> EntityRef[Any]:
        """
        Ref returned by builder calls on a validator that has already failed.

        It keeps fluent chains intact but resolves to nothing.
        """
        return cls(DETACHED_ENTITY_NAME, type_, _detached=True)

    @property
    def is_detached(self) -> bool:
        return self._detached

    def get(self, store: EntityStore) -> T:
        """
        Resolve this ref against store.

        Raises:
            EntityNotFound: entity absent
            EntityTypeMismatch: value does not match type_
        """
        return store.get(self.name, self.type_)

    def __str__(self) -> str:
        return self.name
