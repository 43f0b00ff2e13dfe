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

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any


def _parse_bool(raw: Any, *, default: bool) -> bool:
    if raw is None:
        return default
    if isinstance(raw, bool):
        return raw
    s = str(raw).strip().lower()
    if not s:
        return default
    if s in ("1", "true", "yes", "y", "on"):
        return True
    if s in ("0", "false", "no", "n", "off"):
        return False
    return default


def _parse_int(raw: Any, *, default: int, min_v: int, max_v: int) -> int:
    try:
        if raw is None:
            v = default
        elif isinstance(raw, int):
            v = raw
        else:
            v = int(str(raw).strip())
    except ValueError:
        v = default
    return max(min_v, min(max_v, v))


@dataclass(frozen=True)
class FlowCheckFeatureFlags:
    # Trace is a local-only debug feature; it is enabled by default and can be disabled via env.
    trace_enabled: bool = True
    # Emit one DEBUG log record per executed step.
    log_step_events: bool = False


@dataclass(frozen=True)
class FlowCheckDebugFlags:
    engine_debug: bool = False
    trace_max_str: int = 4000
    trace_max_list: int = 100


@dataclass(frozen=True)
class FlowCheckRuntimeConfig:
    features: FlowCheckFeatureFlags = field(default_factory=FlowCheckFeatureFlags)
    debug: FlowCheckDebugFlags = field(default_factory=FlowCheckDebugFlags)

    @staticmethod
    def load_from_env() -> "FlowCheckRuntimeConfig":
        features = FlowCheckFeatureFlags(
            trace_enabled=not _parse_bool(os.getenv("FLOWCHECK_TRACE_DISABLE"), default=False),
            log_step_events=_parse_bool(os.getenv("FLOWCHECK_LOG_STEP_EVENTS"), default=False),
        )

        debug = FlowCheckDebugFlags(
            engine_debug=_parse_bool(os.getenv("FLOWCHECK_DEBUG"), default=False),
            trace_max_str=_parse_int(os.getenv("FLOWCHECK_TRACE_MAX_STR"), default=4000, min_v=100, max_v=20_000),
            trace_max_list=_parse_int(os.getenv("FLOWCHECK_TRACE_MAX_LIST"), default=100, min_v=1, max_v=1000),
        )

        return FlowCheckRuntimeConfig(features=features, debug=debug)

    def to_safe_log_dict(self) -> dict[str, Any]:
        return {
            "features": {
                "trace_enabled": bool(self.features.trace_enabled),
                "log_step_events": bool(self.features.log_step_events),
            },
            "debug": {
                "engine_debug": bool(self.debug.engine_debug),
                "trace_max_str": int(self.debug.trace_max_str),
                "trace_max_list": int(self.debug.trace_max_list),
            },
        }
