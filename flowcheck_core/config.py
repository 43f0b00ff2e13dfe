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
from __future__ import annotations

from pydantic import BaseModel, Field


class ValidationMessages(BaseModel):
    """
    Message catalogue used when a step failure is folded into a ValidationResult.

    Templates ending in "_prefix" are followed by ": <exception message>".
    """

    model_config = {"extra": "ignore", "frozen": True}

    null_entity: str = Field("entity cannot be None", description="Producer returned None for a non-nullable entity")
    add_failed_prefix: str = Field("failed to add entity", description="Synchronous producer raised")
    add_async_failed_prefix: str = Field("failed to fetch entity", description="Asynchronous producer raised")
    then_add_failed_prefix: str = Field("failed to create entity", description="Dependent factory raised")
    then_add_async_failed_prefix: str = Field(
        "failed to create entity asynchronously", description="Asynchronous dependent factory raised"
    )
    entity_not_resolved: str = Field("entity not resolved", description="Checked entity is absent from the store")
    entity_type_error: str = Field("entity type error", description="Checked entity has an unexpected type")
    check_error_prefix: str = Field("validation error", description="Synchronous predicate raised")
    check_async_error_prefix: str = Field("async validation error", description="Asynchronous predicate raised")
    dependent_not_resolved: str = Field("dependent entity not resolved")
    dependent_type_error: str = Field("dependent entity type error")
    not_none: str = Field("value cannot be None")
    not_empty_collection: str = Field("collection cannot be empty")
    not_empty_string: str = Field("string cannot be empty")
    success: str = Field("Validation succeeded", description="str() of a valid result")

    @classmethod
    def chinese(cls) -> "ValidationMessages":
        """Catalogue matching the messages of the first (Chinese-language) deployment."""
        return cls(
            null_entity="实体不能为null",
            add_failed_prefix="添加实体失败",
            add_async_failed_prefix="获取实体失败",
            then_add_failed_prefix="创建实体失败",
            then_add_async_failed_prefix="异步创建实体失败",
            entity_not_resolved="实体未解析",
            entity_type_error="实体类型错误",
            check_error_prefix="验证错误",
            check_async_error_prefix="异步验证错误",
            dependent_not_resolved="依赖实体未解析",
            dependent_type_error="依赖实体类型错误",
            not_none="值不能为null",
            not_empty_collection="集合不能为空",
            not_empty_string="字符串不能为空",
            success="验证成功",
        )


class FlowCheckConfig(BaseModel):
    """
    Configuration for a FlowValidator.
    Decouples the engine from environment variables.
    """

    model_config = {"frozen": True}

    messages: ValidationMessages = Field(default_factory=ValidationMessages)

    # Synthetic entity names are "<prefix>_<uuid hex>"
    add_name_prefix: str = Field("Add", description="Prefix for unnamed add() entities")
    add_async_name_prefix: str = Field("Async", description="Prefix for unnamed add_async() entities")
    then_add_name_prefix: str = Field("Then", description="Prefix for unnamed then_add() entities")
    then_add_async_name_prefix: str = Field("ThenAsync", description="Prefix for unnamed then_add_async() entities")
