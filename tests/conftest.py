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


import pytest

from flowcheck_core.config import FlowCheckConfig
from flowcheck_core.runtime_config import FlowCheckRuntimeConfig
from flowcheck_core.validation import FlowValidator


@pytest.fixture
def runtime_config():
    """Runtime flags with defaults, independent of the test environment."""
    return FlowCheckRuntimeConfig()


@pytest.fixture
def config():
    return FlowCheckConfig()


@pytest.fixture
def validator(config, runtime_config):
    """Fresh validator for each test."""
    return FlowValidator(config=config, runtime=runtime_config)


@pytest.fixture
def calls():
    """Ordered record of side effects produced by steps and callbacks."""
    return []
