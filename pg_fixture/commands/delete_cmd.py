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

"""Delete subcommands (database)."""

from __future__ import annotations

import typer
from rich.panel import Panel

from pg_fixture import console
from pg_fixture.commands import load_config
from pg_fixture.kube import ClusterClient
from pg_fixture.lifecycle import delete_resources
from pg_fixture.resources import build_descriptors

app = typer.Typer(help="Delete fixture resources.")


@app.command("database")
def database(
    namespace: str | None = typer.Option(None, "--namespace", "-n", help="Namespace of both resources"),
    context: str | None = typer.Option(None, "--context", help="kubeconfig context"),
    service_name: str | None = typer.Option(None, "--service-name", help="Service name"),
    pod_name: str | None = typer.Option(None, "--pod-name", help="Pod name"),
) -> None:
    """Delete the Pod, then the Service. Missing resources are not an error."""
    cluster_cfg, db_cfg, _ = load_config(
        namespace=namespace,
        kube_context=context,
        service_name=service_name,
        pod_name=pod_name,
    )
    service, pod = build_descriptors(cluster_cfg, db_cfg)

    console.print(Panel.fit("Deleting database", style="bold blue"))
    report = delete_resources(ClusterClient.from_config(cluster_cfg), (pod, service))
    for ref in report.deleted:
        console.print(f"[green]✅ {ref} deleted[/green]")
    for ref in report.already_gone:
        console.print(f"[yellow]⚠️  {ref} not found or already deleted[/yellow]")
    for failure in report.failures:
        console.print(f"[red]❌ {failure}[/red]")
    if not report.ok:
        raise typer.Exit(code=1)
