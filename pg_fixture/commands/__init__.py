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

"""CLI subcommand groups."""

from __future__ import annotations

from typing import Any

import typer

from pg_fixture import console
from pg_fixture.config import ClusterConfig, DatabaseConfig, PollConfig, resolve_config


def load_config(**overrides: Any) -> tuple[ClusterConfig, DatabaseConfig, PollConfig]:
    """Resolve configuration for a command, exiting with status 2 on invalid input."""
    try:
        return resolve_config(**overrides)
    except ValueError as err:
        console.print(f"[red]❌ Invalid configuration: {err}[/red]")
        raise typer.Exit(code=2) from err
