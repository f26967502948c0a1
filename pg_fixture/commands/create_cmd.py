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

"""Create subcommands (database)."""

from __future__ import annotations

import typer
from rich.panel import Panel

from pg_fixture import console
from pg_fixture.commands import load_config
from pg_fixture.config import display_config
from pg_fixture.errors import AcquisitionError
from pg_fixture.lifecycle import DatabaseFixture

app = typer.Typer(help="Create fixture resources.")


@app.command("database")
def database(
    namespace: str | None = typer.Option(None, "--namespace", "-n", help="Namespace for both resources"),
    context: str | None = typer.Option(None, "--context", help="kubeconfig context"),
    image: str | None = typer.Option(None, "--image", help="Postgres container image"),
    service_name: str | None = typer.Option(None, "--service-name", help="Service name"),
    pod_name: str | None = typer.Option(None, "--pod-name", help="Pod name"),
    service_type: str | None = typer.Option(None, "--service-type", help="NodePort, LoadBalancer or ClusterIP"),
    node_port: int | None = typer.Option(None, "--node-port", help="NodePort to expose Postgres on"),
    service_interval: float | None = typer.Option(None, "--service-interval", help="Seconds between Service checks"),
    service_timeout: float | None = typer.Option(None, "--service-timeout", help="Seconds to wait for the Service"),
    pod_interval: float | None = typer.Option(None, "--pod-interval", help="Seconds between Pod checks"),
    pod_timeout: float | None = typer.Option(None, "--pod-timeout", help="Seconds to wait for the Pod"),
) -> None:
    """Provision the Service and Pod, wait until both are ready, print the connection URL."""
    cluster_cfg, db_cfg, poll_cfg = load_config(
        namespace=namespace,
        kube_context=context,
        image=image,
        service_name=service_name,
        pod_name=pod_name,
        service_type=service_type,
        node_port=node_port,
        service_interval=service_interval,
        service_deadline=service_timeout,
        pod_interval=pod_interval,
        pod_deadline=pod_timeout,
    )
    display_config(cluster_cfg, db_cfg, poll_cfg)

    console.print(Panel.fit("Provisioning database", style="bold blue"))
    fixture = DatabaseFixture.from_config(cluster_cfg, db_cfg, poll_cfg)
    try:
        handle = fixture.acquire()
    except AcquisitionError as err:
        console.print(f"[red]❌ {err}[/red]")
        raise typer.Exit(code=1) from err

    console.print(f"[green]✅ Database ready at {handle.host}:{handle.port}[/green]")
    typer.echo(handle.connection_url())
