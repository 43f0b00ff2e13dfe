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

from flowcheck_core.config import FlowCheckConfig, ValidationMessages
from flowcheck_core.runtime_config import FlowCheckRuntimeConfig


def test_trace_enabled_by_default(monkeypatch):
    monkeypatch.delenv("FLOWCHECK_TRACE_DISABLE", raising=False)
    cfg = FlowCheckRuntimeConfig.load_from_env()
    assert cfg.features.trace_enabled is True


def test_trace_can_be_disabled(monkeypatch):
    monkeypatch.setenv("FLOWCHECK_TRACE_DISABLE", "yes")
    cfg = FlowCheckRuntimeConfig.load_from_env()
    assert cfg.features.trace_enabled is False


def test_unparseable_flag_falls_back_to_default(monkeypatch):
    monkeypatch.setenv("FLOWCHECK_LOG_STEP_EVENTS", "maybe")
    cfg = FlowCheckRuntimeConfig.load_from_env()
    assert cfg.features.log_step_events is False


def test_trace_max_str_is_clamped(monkeypatch):
    monkeypatch.setenv("FLOWCHECK_TRACE_MAX_STR", "999999")
    cfg = FlowCheckRuntimeConfig.load_from_env()
    assert cfg.debug.trace_max_str == 20_000

    monkeypatch.setenv("FLOWCHECK_TRACE_MAX_STR", "1")
    cfg2 = FlowCheckRuntimeConfig.load_from_env()
    assert cfg2.debug.trace_max_str == 100

    monkeypatch.setenv("FLOWCHECK_TRACE_MAX_STR", "lots")
    cfg3 = FlowCheckRuntimeConfig.load_from_env()
    assert cfg3.debug.trace_max_str == 4000


def test_safe_log_dict():
    cfg = FlowCheckRuntimeConfig()
    safe = cfg.to_safe_log_dict()
    assert safe["features"]["trace_enabled"] is True
    assert safe["debug"]["trace_max_str"] == 4000


def test_default_messages():
    config = FlowCheckConfig()
    assert config.messages.null_entity == "entity cannot be None"
    assert config.messages.entity_not_resolved == "entity not resolved"
    assert config.add_async_name_prefix == "Async"


def test_chinese_messages():
    messages = ValidationMessages.chinese()
    assert messages.dependent_not_resolved == "依赖实体未解析"
    assert messages.success == "验证成功"
