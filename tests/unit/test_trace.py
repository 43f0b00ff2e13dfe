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
Unit tests for the local JSONL trace sink.
"""

import json

import pytest

from flowcheck_core.runtime_config import FlowCheckFeatureFlags, FlowCheckRuntimeConfig
from flowcheck_core.utils.trace import Trace, _redact_text, _sanitize, trace_enabled
from flowcheck_core.validation import FlowValidator


@pytest.fixture
def local_env(monkeypatch):
    monkeypatch.setenv("FLOWCHECK_ENV", "local")


def _read_events(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


class TestSanitize:
    def test_bearer_tokens_are_redacted(self):
        assert _redact_text("Authorization: Bearer abc.def") == "Authorization: Bearer ***"

    def test_secret_keys_are_masked(self):
        assert _sanitize({"password": "hunter2", "name": "ann"}) == {"password": "***", "name": "ann"}

    def test_long_strings_are_hashed(self):
        out = _sanitize("x" * 50, max_str=10)
        assert out["len"] == 50
        assert len(out["sha256"]) == 64


class TestTrace:
    def test_disabled_outside_local_runs(self, monkeypatch, tmp_path):
        monkeypatch.delenv("FLOWCHECK_ENV", raising=False)
        monkeypatch.delenv("ENV", raising=False)

        ctx = Trace.start("t1", runtime=FlowCheckRuntimeConfig(), trace_dir=tmp_path)
        try:
            assert ctx.enabled is False
            Trace.event("ignored", {"a": 1})
        finally:
            Trace.stop()

        assert list(tmp_path.iterdir()) == []

    def test_disabled_by_runtime_flag(self, local_env, tmp_path):
        runtime = FlowCheckRuntimeConfig(features=FlowCheckFeatureFlags(trace_enabled=False))
        ctx = Trace.start("t2", runtime=runtime, trace_dir=tmp_path)
        Trace.stop()
        assert ctx.enabled is False

    @pytest.mark.asyncio
    async def test_validator_events_are_written(self, local_env, tmp_path, runtime_config):
        Trace.start("run:1", runtime=runtime_config, trace_dir=tmp_path)
        try:
            assert trace_enabled()
            validator = FlowValidator(runtime=runtime_config)
            a = validator.add(lambda: 1, "a")
            validator.check(a, lambda v: (False, "rejected"))
            validator.add(lambda: 2, "b")
            await validator.validate()
        finally:
            Trace.stop()

        events = _read_events(tmp_path / "run_1.jsonl")
        names = [e["event"] for e in events]
        assert names == [
            "trace.start",
            "validator.start",
            "validator.step_failed",
            "validator.short_circuit",
            "validator.end",
            "trace.stop",
        ]
        failed = events[2]["data"]
        assert failed["entity"] == "a"
        assert failed["kind"] == "user_check_failed"
        assert events[4]["data"]["result"]["error_message"] == "rejected"
