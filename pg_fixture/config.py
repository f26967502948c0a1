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

"""Configuration classes, resolution, and display."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.panel import Panel

from pg_fixture import console
from pg_fixture.constants import (
    DEFAULT_APP_LABEL,
    DEFAULT_CONTAINER_PORT,
    DEFAULT_DATABASE,
    DEFAULT_IMAGE,
    DEFAULT_NAMESPACE,
    DEFAULT_NODE_HOST,
    DEFAULT_NODE_PORT,
    DEFAULT_PASSWORD,
    DEFAULT_POD_NAME,
    DEFAULT_POD_POLL_DEADLINE,
    DEFAULT_POD_POLL_INTERVAL,
    DEFAULT_SERVICE_NAME,
    DEFAULT_SERVICE_POLL_DEADLINE,
    DEFAULT_SERVICE_POLL_INTERVAL,
    DEFAULT_SERVICE_TYPE,
    DEFAULT_USER,
    ENV_PREFIX,
    NODE_PORT_RANGE,
)
from pg_fixture.resources import ResourceKind

_DNS_LABEL = r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$"


# ============================================================================
# Configuration classes
# ============================================================================

class ClusterConfig(BaseSettings):
    """Cluster access configuration, auto-loaded from PG_FIXTURE_* env vars.

    Attributes:
        namespace: Namespace holding both resources.
        kube_context: kubeconfig context to use, or None for the current one.
        kubeconfig: Path to a kubeconfig file, or None for the default lookup.
        node_host: Host used to reach a NodePort endpoint from the test process.
    """

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="ignore")

    namespace: str = Field(default=DEFAULT_NAMESPACE, pattern=_DNS_LABEL)
    kube_context: str | None = None
    kubeconfig: Path | None = None
    node_host: str = DEFAULT_NODE_HOST


class DatabaseConfig(BaseSettings):
    """Database workload configuration, auto-loaded from PG_FIXTURE_* env vars.

    Attributes:
        service_name: Name of the network-exposing Service.
        pod_name: Name of the workload Pod.
        app_label: Value of the ``app`` label linking Service selector and Pod.
        image: Container image reference.
        container_port: Port Postgres listens on inside the container.
        service_type: Kubernetes Service type.
        node_port: Fixed NodePort, or None to let the cluster assign one.
        database: Database name created by the container.
        user: Database superuser name.
        password: Database superuser password.
        env: Extra environment pairs injected into the container.
    """

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="ignore")

    service_name: str = Field(default=DEFAULT_SERVICE_NAME, pattern=_DNS_LABEL)
    pod_name: str = Field(default=DEFAULT_POD_NAME, pattern=_DNS_LABEL)
    app_label: str = DEFAULT_APP_LABEL
    image: str = DEFAULT_IMAGE
    container_port: int = Field(default=DEFAULT_CONTAINER_PORT, ge=1, le=65535)
    service_type: str = Field(default=DEFAULT_SERVICE_TYPE, pattern=r"^(NodePort|LoadBalancer|ClusterIP)$")
    node_port: int | None = Field(default=DEFAULT_NODE_PORT, ge=NODE_PORT_RANGE[0], le=NODE_PORT_RANGE[1])
    database: str = DEFAULT_DATABASE
    user: str = DEFAULT_USER
    password: str = DEFAULT_PASSWORD
    env: dict[str, str] = Field(default_factory=dict)


class PollConfig(BaseSettings):
    """Readiness polling intervals and deadlines in seconds, per resource kind.

    Attributes:
        service_interval: Sleep between Service status reads.
        service_deadline: Give up on the Service after this long.
        pod_interval: Sleep between Pod status reads.
        pod_deadline: Give up on the Pod after this long.
    """

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="ignore")

    service_interval: float = Field(default=DEFAULT_SERVICE_POLL_INTERVAL, gt=0)
    service_deadline: float = Field(default=DEFAULT_SERVICE_POLL_DEADLINE, gt=0)
    pod_interval: float = Field(default=DEFAULT_POD_POLL_INTERVAL, gt=0)
    pod_deadline: float = Field(default=DEFAULT_POD_POLL_DEADLINE, gt=0)

    def for_kind(self, kind: ResourceKind) -> tuple[float, float]:
        """Return the (interval, deadline) pair for a resource kind."""
        if kind is ResourceKind.SERVICE:
            return self.service_interval, self.service_deadline
        return self.pod_interval, self.pod_deadline


# ============================================================================
# Resolution
# ============================================================================

def _apply_overrides(cfg: BaseSettings, overrides: dict[str, Any]) -> BaseSettings:
    update = {k: v for k, v in overrides.items() if k in type(cfg).model_fields}
    if not update:
        return cfg
    return type(cfg).model_validate({**cfg.model_dump(), **update})


def resolve_config(**overrides: Any) -> tuple[ClusterConfig, DatabaseConfig, PollConfig]:
    """Load all settings from the environment and apply explicit overrides.

    ``None`` overrides are ignored so CLI options left unset fall through to
    environment variables and defaults.

    Args:
        **overrides: Field values keyed by setting name.

    Returns:
        Tuple of (cluster_config, database_config, poll_config).

    Raises:
        ValueError: If an override names no known setting.
        pydantic.ValidationError: If an override fails validation.
    """
    overrides = {k: v for k, v in overrides.items() if v is not None}
    configs = (ClusterConfig(), DatabaseConfig(), PollConfig())
    known = {name for cfg in configs for name in type(cfg).model_fields}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
    cluster_cfg, db_cfg, poll_cfg = (_apply_overrides(cfg, overrides) for cfg in configs)
    return cluster_cfg, db_cfg, poll_cfg


# ============================================================================
# Display
# ============================================================================

def display_config(cluster_cfg: ClusterConfig, db_cfg: DatabaseConfig, poll_cfg: PollConfig) -> None:
    """Print the resolved configuration with the password masked."""
    console.print(Panel.fit("Configuration", style="bold blue"))
    console.print("[yellow]Cluster:[/yellow]")
    console.print(f"  namespace       : {cluster_cfg.namespace}")
    console.print(f"  kube_context    : {cluster_cfg.kube_context or '(current)'}")
    console.print(f"  node_host       : {cluster_cfg.node_host}")
    console.print("[yellow]Database:[/yellow]")
    console.print(f"  service         : {db_cfg.service_name} ({db_cfg.service_type})")
    console.print(f"  pod             : {db_cfg.pod_name}")
    console.print(f"  image           : {db_cfg.image}")
    console.print(f"  port            : {db_cfg.container_port} (node port {db_cfg.node_port or 'auto'})")
    console.print(f"  database        : {db_cfg.database}")
    console.print(f"  user            : {db_cfg.user}")
    console.print("  password        : ********")
    console.print("[yellow]Readiness:[/yellow]")
    console.print(f"  service         : every {poll_cfg.service_interval}s, up to {poll_cfg.service_deadline}s")
    console.print(f"  pod             : every {poll_cfg.pod_interval}s, up to {poll_cfg.pod_deadline}s")
