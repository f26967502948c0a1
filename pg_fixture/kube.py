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

"""Cluster API adapter: typed read/create/delete for the fixture's resources.

Every call returns a value instead of raising. A 404 from the API server is
surfaced as ``NotFound``; anything else that goes wrong is a ``Failure``
carrying the HTTP status when there is one. No call is retried here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Union

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from pg_fixture import logger
from pg_fixture.config import ClusterConfig
from pg_fixture.constants import DEFAULT_NODE_HOST, HTTP_NOT_FOUND
from pg_fixture.resources import ResourceDescriptor, ResourceKind


# ============================================================================
# Result types
# ============================================================================

@dataclass(frozen=True)
class Endpoint:
    host: str
    port: int

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class ResourceState:
    """Live view of a present resource, read fresh on every call.

    Attributes:
        kind: Resource kind.
        namespace: Resource namespace.
        name: Resource name.
        endpoint: Assigned reachable endpoint (Service only), or None.
        phase: Reported execution phase (Pod only), or None.
    """

    kind: ResourceKind
    namespace: str
    name: str
    endpoint: Endpoint | None = None
    phase: str | None = None

    @property
    def ref(self) -> str:
        return f"{self.kind.value} {self.namespace}/{self.name}"


@dataclass(frozen=True)
class NotFound:
    kind: ResourceKind
    namespace: str
    name: str

    @property
    def ref(self) -> str:
        return f"{self.kind.value} {self.namespace}/{self.name}"


@dataclass(frozen=True)
class Deleted:
    kind: ResourceKind
    namespace: str
    name: str


@dataclass(frozen=True)
class Failure:
    """A cluster API call that failed for a reason other than absence.

    Attributes:
        kind: Resource kind the call addressed.
        namespace: Resource namespace.
        name: Resource name.
        operation: ``get``, ``create``, or ``delete``.
        status: HTTP status from the API server, or None for transport errors.
        reason: Short failure description.
    """

    kind: ResourceKind
    namespace: str
    name: str
    operation: str
    status: int | None
    reason: str

    @property
    def ref(self) -> str:
        return f"{self.kind.value} {self.namespace}/{self.name}"

    def __str__(self) -> str:
        status = f"HTTP {self.status}" if self.status is not None else "no response"
        return f"{self.operation} {self.ref} failed ({status}): {self.reason}"


GetResult = Union[ResourceState, NotFound, Failure]
CreateResult = Union[ResourceState, Failure]
DeleteResult = Union[Deleted, NotFound, Failure]

_READ = {
    ResourceKind.SERVICE: "read_namespaced_service",
    ResourceKind.POD: "read_namespaced_pod",
}
_CREATE = {
    ResourceKind.SERVICE: "create_namespaced_service",
    ResourceKind.POD: "create_namespaced_pod",
}
_DELETE = {
    ResourceKind.SERVICE: "delete_namespaced_service",
    ResourceKind.POD: "delete_namespaced_pod",
}


# ============================================================================
# Client construction
# ============================================================================

def load_api_client(cluster_cfg: ClusterConfig) -> client.ApiClient:
    """Build an API client from in-cluster config or a kubeconfig file.

    In-cluster credentials are only tried when neither a kubeconfig path nor a
    context was configured explicitly.

    Args:
        cluster_cfg: Cluster configuration with optional kubeconfig and context.

    Returns:
        Configured Kubernetes API client.

    Raises:
        kubernetes.config.ConfigException: If no usable configuration is found.
    """
    if cluster_cfg.kubeconfig is None and cluster_cfg.kube_context is None:
        try:
            config.load_incluster_config()
            logger.debug("Using in-cluster Kubernetes configuration")
            return client.ApiClient()
        except config.ConfigException:
            logger.debug("No in-cluster configuration, falling back to kubeconfig")
    config_file = str(cluster_cfg.kubeconfig) if cluster_cfg.kubeconfig else None
    return config.new_client_from_config(config_file=config_file, context=cluster_cfg.kube_context)


# ============================================================================
# Adapter
# ============================================================================

class ClusterClient:
    """The only component that talks to the Kubernetes API."""

    def __init__(self, api: Any, *, node_host: str = DEFAULT_NODE_HOST) -> None:
        self._api = api
        self._node_host = node_host

    @classmethod
    def from_config(cls, cluster_cfg: ClusterConfig) -> ClusterClient:
        return cls(client.CoreV1Api(load_api_client(cluster_cfg)), node_host=cluster_cfg.node_host)

    def get(self, kind: ResourceKind, namespace: str, name: str) -> GetResult:
        """Read a resource's current state.

        Args:
            kind: Resource kind.
            namespace: Resource namespace.
            name: Resource name.

        Returns:
            ResourceState if present, NotFound if absent, Failure otherwise.
        """
        read = getattr(self._api, _READ[kind])
        result = self._call(kind, namespace, name, "get", lambda: read(name=name, namespace=namespace))
        if isinstance(result, (NotFound, Failure)):
            return result
        return self._to_state(kind, namespace, name, result)

    def create(self, descriptor: ResourceDescriptor) -> CreateResult:
        """Create a resource from its descriptor.

        A missing namespace or an existing resource is a Failure here; only
        reads and deletes normalize absence.

        Args:
            descriptor: The resource to create.

        Returns:
            ResourceState from the API server's response, or Failure.
        """
        kind, namespace, name = descriptor.kind, descriptor.namespace, descriptor.name
        create = getattr(self._api, _CREATE[kind])
        body = descriptor.manifest()
        result = self._call(
            kind, namespace, name, "create",
            lambda: create(namespace=namespace, body=body),
            absent_is_failure=True,
        )
        if isinstance(result, Failure):
            return result
        return self._to_state(kind, namespace, name, result)

    def delete(self, kind: ResourceKind, namespace: str, name: str) -> DeleteResult:
        """Delete a resource by name.

        Args:
            kind: Resource kind.
            namespace: Resource namespace.
            name: Resource name.

        Returns:
            Deleted, NotFound if it was already gone, or Failure.
        """
        delete = getattr(self._api, _DELETE[kind])
        result = self._call(kind, namespace, name, "delete", lambda: delete(name=name, namespace=namespace))
        if isinstance(result, (NotFound, Failure)):
            return result
        return Deleted(kind=kind, namespace=namespace, name=name)

    def _call(
        self,
        kind: ResourceKind,
        namespace: str,
        name: str,
        operation: str,
        fn: Callable[[], Any],
        *,
        absent_is_failure: bool = False,
    ) -> Any:
        try:
            return fn()
        except ApiException as exc:
            if exc.status == HTTP_NOT_FOUND and not absent_is_failure:
                return NotFound(kind=kind, namespace=namespace, name=name)
            return Failure(
                kind=kind, namespace=namespace, name=name, operation=operation,
                status=exc.status, reason=str(exc.reason or "").strip() or "API error",
            )
        except (HTTPError, OSError) as exc:
            return Failure(
                kind=kind, namespace=namespace, name=name, operation=operation,
                status=None, reason=str(exc),
            )

    # ------------------------------------------------------------------------
    # Status normalization
    # ------------------------------------------------------------------------

    def _to_state(self, kind: ResourceKind, namespace: str, name: str, obj: Any) -> ResourceState:
        if kind is ResourceKind.SERVICE:
            return ResourceState(kind=kind, namespace=namespace, name=name, endpoint=self._service_endpoint(obj))
        status = getattr(obj, "status", None)
        phase = getattr(status, "phase", None) if status is not None else None
        return ResourceState(kind=kind, namespace=namespace, name=name, phase=phase)

    def _service_endpoint(self, svc: Any) -> Endpoint | None:
        """Derive the reachable endpoint a Service has been assigned, if any.

        LoadBalancer services are reachable once an ingress ip or hostname is
        reported; NodePort services once a node port is allocated; ClusterIP
        services once a cluster IP is allocated.
        """
        spec = getattr(svc, "spec", None)
        ports = getattr(spec, "ports", None) or []
        if spec is None or not ports:
            return None
        port = ports[0]
        service_type = getattr(spec, "type", None) or "ClusterIP"

        if service_type == "LoadBalancer":
            status = getattr(svc, "status", None)
            balancer = getattr(status, "load_balancer", None)
            for ingress in getattr(balancer, "ingress", None) or []:
                host = getattr(ingress, "ip", None) or getattr(ingress, "hostname", None)
                if host:
                    return Endpoint(host=host, port=port.port)
            return None
        if service_type == "NodePort":
            node_port = getattr(port, "node_port", None)
            return Endpoint(host=self._node_host, port=node_port) if node_port else None
        cluster_ip = getattr(spec, "cluster_ip", None)
        if cluster_ip and cluster_ip != "None":
            return Endpoint(host=cluster_ip, port=port.port)
        return None
