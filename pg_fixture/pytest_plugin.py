# /*
# Copyright 2026 The pg-fixture Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""pytest plugin providing the database as a session-scoped fixture.

Enable it from a ``conftest.py``::

    pytest_plugins = ["pg_fixture.pytest_plugin"]

Override ``pg_fixture_factory`` to build the fixture differently.
"""

from __future__ import annotations

from typing import Callable, Iterator

import pytest

from pg_fixture import logger
from pg_fixture.lifecycle import DatabaseFixture, LifecycleHandle


@pytest.fixture(scope="session")
def pg_fixture_factory() -> Callable[[], DatabaseFixture]:
    return DatabaseFixture.from_config


@pytest.fixture(scope="session")
def pg_fixture(pg_fixture_factory: Callable[[], DatabaseFixture]) -> Iterator[DatabaseFixture]:
    """The suite-wide fixture owner; torn down when the session ends."""
    fixture = pg_fixture_factory()
    try:
        yield fixture
    finally:
        logger.info("Tearing down the database fixture")
        report = fixture.release()
        for failure in report.failures:
            logger.warning("Leaked after teardown: %s", failure)


@pytest.fixture(scope="session")
def pg_database(pg_fixture: DatabaseFixture) -> LifecycleHandle:
    """The ready database handle, provisioned on first use."""
    return pg_fixture.acquire()
