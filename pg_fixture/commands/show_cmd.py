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

"""Show subcommands (status, manifests)."""

from __future__ import annotations

import typer
import yaml

from pg_fixture import console
from pg_fixture.commands import load_config
from pg_fixture.kube import ClusterClient, Failure, NotFound
from pg_fixture.readiness import READINESS_PREDICATES
from pg_fixture.resources import ResourceKind, build_descriptors

app = typer.Typer(help="Inspect fixture resources.")


@app.command("status")
def status(
    namespace: str | None = typer.Option(None, "--namespace", "-n", help="Namespace of both resources"),
    context: str | None = typer.Option(None, "--context", help="kubeconfig context"),
) -> None:
    """Read both resources once and report presence and readiness."""
    cluster_cfg, db_cfg, _ = load_config(namespace=namespace, kube_context=context)
    cluster = ClusterClient.from_config(cluster_cfg)

    all_ready = True
    for descriptor in build_descriptors(cluster_cfg, db_cfg):
        observed = cluster.get(descriptor.kind, descriptor.namespace, descriptor.name)
        if isinstance(observed, NotFound):
            console.print(f"[yellow]✗ {descriptor.ref}: absent[/yellow]")
            all_ready = False
        elif isinstance(observed, Failure):
            console.print(f"[red]❌ {observed}[/red]")
            all_ready = False
        elif READINESS_PREDICATES[descriptor.kind](observed):
            detail = f"endpoint {observed.endpoint}" if observed.endpoint else f"phase {observed.phase}"
            console.print(f"[green]✓ {descriptor.ref}: ready ({detail})[/green]")
        else:
            if descriptor.kind is ResourceKind.POD:
                detail = f"phase {observed.phase or 'unknown'}"
            else:
                detail = "no endpoint yet"
            console.print(f"[yellow]… {descriptor.ref}: not ready ({detail})[/yellow]")
            all_ready = False
    if not all_ready:
        raise typer.Exit(code=1)


@app.command("manifests")
def manifests(
    namespace: str | None = typer.Option(None, "--namespace", "-n", help="Namespace for both resources"),
    image: str | None = typer.Option(None, "--image", help="Postgres container image"),
) -> None:
    """Print the Service and Pod manifests as YAML."""
    cluster_cfg, db_cfg, _ = load_config(namespace=namespace, image=image)
    documents = [d.manifest() for d in build_descriptors(cluster_cfg, db_cfg)]
    typer.echo(yaml.safe_dump_all(documents, default_flow_style=False, sort_keys=False), nl=False)
