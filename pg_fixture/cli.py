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

"""
cli.py - Ephemeral Postgres fixture management.

Subcommands:
    create   Create fixture resources (database)
    delete   Delete fixture resources (database)
    show     Inspect fixture resources (status, manifests)

Examples:
    # Provision Postgres in the default namespace and print its URL
    pg-fixture create database

    # Slow cluster: allow ten minutes for the image pull
    pg-fixture create database --pod-timeout 600

    # Tear everything down
    pg-fixture delete database

All settings can also be given as PG_FIXTURE_* environment variables.
"""

from __future__ import annotations

import logging
import sys

import typer

from pg_fixture import console
from pg_fixture.commands import create_cmd, delete_cmd, show_cmd

app = typer.Typer(
    help="Provision and tear down an ephemeral Postgres for test runs.",
    no_args_is_help=True,
)


@app.callback()
def _main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Initialize logging for all subcommands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


app.add_typer(create_cmd.app, name="create")
app.add_typer(delete_cmd.app, name="delete")
app.add_typer(show_cmd.app, name="show")


def main() -> None:
    try:
        app()
    except Exception as e:
        console.print(f"[red]❌ {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
