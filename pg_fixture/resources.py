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

"""Declarative descriptions of the fixture's Service and Pod."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from pg_fixture.constants import (
    ENV_POSTGRES_DB,
    ENV_POSTGRES_PASSWORD,
    ENV_POSTGRES_USER,
    LABEL_APP,
    LABEL_MANAGED_BY,
    MANAGED_BY_VALUE,
    PROTOCOL_TCP,
)

if TYPE_CHECKING:
    from pg_fixture.config import ClusterConfig, DatabaseConfig


class ResourceKind(str, Enum):
    """Kubernetes kinds the fixture manages."""

    SERVICE = "Service"
    POD = "Pod"


@dataclass(frozen=True)
class ServicePortSpec:
    port: int
    target_port: int
    node_port: int | None = None
    protocol: str = PROTOCOL_TCP


@dataclass(frozen=True)
class NetworkSpec:
    """Payload of the network-exposing resource.

    Attributes:
        service_type: Kubernetes Service type (NodePort, LoadBalancer, ClusterIP).
        selector: Label pairs selecting the workload pod.
        ports: Exposed ports.
    """

    service_type: str
    selector: tuple[tuple[str, str], ...]
    ports: tuple[ServicePortSpec, ...]


@dataclass(frozen=True)
class WorkloadSpec:
    """Payload of the workload resource.

    Attributes:
        image: Container image reference.
        container_name: Name of the single container.
        container_port: Port the container listens on.
        env: Environment variable pairs injected into the container.
    """

    image: str
    container_name: str
    container_port: int
    env: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class ResourceDescriptor:
    """Immutable description of one target resource.

    Attributes:
        kind: Which of the two managed kinds this is.
        name: Resource name.
        namespace: Resource namespace.
        spec: Kind-specific payload.
        labels: Metadata label pairs.
    """

    kind: ResourceKind
    name: str
    namespace: str
    spec: NetworkSpec | WorkloadSpec
    labels: tuple[tuple[str, str], ...] = ()

    def __post_init__(self) -> None:
        expected = NetworkSpec if self.kind is ResourceKind.SERVICE else WorkloadSpec
        if not isinstance(self.spec, expected):
            raise ValueError(
                f"{self.kind.value} descriptor requires {expected.__name__}, got {type(self.spec).__name__}"
            )

    @property
    def ref(self) -> str:
        """Human-readable reference, e.g. ``Service default/postgres-service``."""
        return f"{self.kind.value} {self.namespace}/{self.name}"

    def manifest(self) -> dict[str, Any]:
        """Build the Kubernetes manifest for this descriptor.

        Returns:
            Manifest dictionary usable as an API request body or YAML document.
        """
        metadata: dict[str, Any] = {"name": self.name, "namespace": self.namespace}
        if self.labels:
            metadata["labels"] = dict(self.labels)
        if isinstance(self.spec, NetworkSpec):
            spec = _service_spec(self.spec)
        else:
            spec = _pod_spec(self.spec)
        return {"apiVersion": "v1", "kind": self.kind.value, "metadata": metadata, "spec": spec}


def _service_spec(spec: NetworkSpec) -> dict[str, Any]:
    ports = []
    for p in spec.ports:
        entry: dict[str, Any] = {"port": p.port, "targetPort": p.target_port, "protocol": p.protocol}
        if p.node_port is not None and spec.service_type != "ClusterIP":
            entry["nodePort"] = p.node_port
        ports.append(entry)
    return {"type": spec.service_type, "selector": dict(spec.selector), "ports": ports}


def _pod_spec(spec: WorkloadSpec) -> dict[str, Any]:
    container: dict[str, Any] = {
        "name": spec.container_name,
        "image": spec.image,
        "ports": [{"containerPort": spec.container_port}],
    }
    if spec.env:
        container["env"] = [{"name": k, "value": v} for k, v in spec.env]
    return {"containers": [container]}


# ============================================================================
# Descriptor construction from configuration
# ============================================================================

def _labels(db_cfg: DatabaseConfig) -> tuple[tuple[str, str], ...]:
    return ((LABEL_APP, db_cfg.app_label), (LABEL_MANAGED_BY, MANAGED_BY_VALUE))


def workload_env(db_cfg: DatabaseConfig) -> tuple[tuple[str, str], ...]:
    """Merge the generated POSTGRES_* variables with user-supplied env pairs.

    User pairs win on key clash; insertion order is preserved.

    Args:
        db_cfg: Database configuration with credentials and extra env.

    Returns:
        Tuple of (name, value) pairs.
    """
    env = {
        ENV_POSTGRES_DB: db_cfg.database,
        ENV_POSTGRES_USER: db_cfg.user,
        ENV_POSTGRES_PASSWORD: db_cfg.password,
    }
    env.update(db_cfg.env)
    return tuple(env.items())


def service_descriptor(cluster_cfg: ClusterConfig, db_cfg: DatabaseConfig) -> ResourceDescriptor:
    """Describe the Service exposing the database port."""
    port = ServicePortSpec(
        port=db_cfg.container_port,
        target_port=db_cfg.container_port,
        node_port=db_cfg.node_port,
    )
    return ResourceDescriptor(
        kind=ResourceKind.SERVICE,
        name=db_cfg.service_name,
        namespace=cluster_cfg.namespace,
        labels=_labels(db_cfg),
        spec=NetworkSpec(
            service_type=db_cfg.service_type,
            selector=((LABEL_APP, db_cfg.app_label),),
            ports=(port,),
        ),
    )


def pod_descriptor(cluster_cfg: ClusterConfig, db_cfg: DatabaseConfig) -> ResourceDescriptor:
    """Describe the Pod running the database container."""
    return ResourceDescriptor(
        kind=ResourceKind.POD,
        name=db_cfg.pod_name,
        namespace=cluster_cfg.namespace,
        labels=_labels(db_cfg),
        spec=WorkloadSpec(
            image=db_cfg.image,
            container_name=db_cfg.pod_name,
            container_port=db_cfg.container_port,
            env=workload_env(db_cfg),
        ),
    )


def build_descriptors(
    cluster_cfg: ClusterConfig, db_cfg: DatabaseConfig
) -> tuple[ResourceDescriptor, ResourceDescriptor]:
    """Build the (service, pod) descriptor pair.

    Args:
        cluster_cfg: Cluster configuration with the namespace.
        db_cfg: Database configuration with names, image, ports, and env.

    Returns:
        Tuple of (service_descriptor, pod_descriptor).
    """
    return service_descriptor(cluster_cfg, db_cfg), pod_descriptor(cluster_cfg, db_cfg)
