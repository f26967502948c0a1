from __future__ import annotations

from types import SimpleNamespace

from kubernetes.client import ApiException
from urllib3.exceptions import ProtocolError

from pg_fixture.kube import ClusterClient, Deleted, Endpoint, Failure, NotFound, ResourceState
from pg_fixture.resources import ResourceKind


def _service(service_type="NodePort", node_port=32543, ingress=None, cluster_ip="10.43.0.7"):
    port = SimpleNamespace(port=5432, node_port=node_port)
    return SimpleNamespace(
        spec=SimpleNamespace(type=service_type, ports=[port], cluster_ip=cluster_ip),
        status=SimpleNamespace(load_balancer=SimpleNamespace(ingress=ingress)),
    )


class _FakeApi:
    def __init__(self):
        self.services = {}
        self.pods = {}
        self.calls = []
        self.raise_next: Exception | None = None

    def _maybe_raise(self):
        if self.raise_next is not None:
            exc, self.raise_next = self.raise_next, None
            raise exc

    def read_namespaced_service(self, name, namespace):
        self.calls.append(("read_namespaced_service", name, namespace))
        self._maybe_raise()
        if name not in self.services:
            raise ApiException(status=404, reason="Not Found")
        return self.services[name]

    def read_namespaced_pod(self, name, namespace):
        self.calls.append(("read_namespaced_pod", name, namespace))
        self._maybe_raise()
        if name not in self.pods:
            raise ApiException(status=404, reason="Not Found")
        return self.pods[name]

    def create_namespaced_service(self, namespace, body):
        self.calls.append(("create_namespaced_service", body, namespace))
        self._maybe_raise()
        svc = _service(node_port=body["spec"]["ports"][0].get("nodePort"))
        self.services[body["metadata"]["name"]] = svc
        return svc

    def create_namespaced_pod(self, namespace, body):
        self.calls.append(("create_namespaced_pod", body, namespace))
        self._maybe_raise()
        pod = SimpleNamespace(status=SimpleNamespace(phase="Pending"))
        self.pods[body["metadata"]["name"]] = pod
        return pod

    def delete_namespaced_service(self, name, namespace):
        self.calls.append(("delete_namespaced_service", name, namespace))
        self._maybe_raise()
        if self.services.pop(name, None) is None:
            raise ApiException(status=404, reason="Not Found")

    def delete_namespaced_pod(self, name, namespace):
        self.calls.append(("delete_namespaced_pod", name, namespace))
        self._maybe_raise()
        if self.pods.pop(name, None) is None:
            raise ApiException(status=404, reason="Not Found")


def test_get_missing_resource_returns_not_found() -> None:
    cluster = ClusterClient(_FakeApi())
    out = cluster.get(ResourceKind.POD, "default", "postgres")
    assert out == NotFound(kind=ResourceKind.POD, namespace="default", name="postgres")


def test_get_other_api_error_returns_failure_with_status() -> None:
    api = _FakeApi()
    api.raise_next = ApiException(status=403, reason="Forbidden")
    out = ClusterClient(api).get(ResourceKind.SERVICE, "default", "postgres-service")

    assert isinstance(out, Failure)
    assert out.status == 403
    assert out.operation == "get"
    assert "Forbidden" in str(out)


def test_get_transport_error_returns_failure_without_status() -> None:
    api = _FakeApi()
    api.raise_next = ProtocolError("Connection aborted.")
    out = ClusterClient(api).get(ResourceKind.POD, "default", "postgres")

    assert isinstance(out, Failure)
    assert out.status is None
    assert "Connection aborted" in out.reason


def test_node_port_service_endpoint_uses_node_host() -> None:
    api = _FakeApi()
    api.services["postgres-service"] = _service()
    out = ClusterClient(api, node_host="192.168.49.2").get(ResourceKind.SERVICE, "default", "postgres-service")
    assert out.endpoint == Endpoint(host="192.168.49.2", port=32543)


def test_node_port_service_without_allocated_port_has_no_endpoint() -> None:
    api = _FakeApi()
    api.services["postgres-service"] = _service(node_port=None)
    out = ClusterClient(api).get(ResourceKind.SERVICE, "default", "postgres-service")
    assert isinstance(out, ResourceState)
    assert out.endpoint is None


def test_load_balancer_endpoint_waits_for_ingress() -> None:
    api = _FakeApi()
    cluster = ClusterClient(api)
    api.services["db"] = _service(service_type="LoadBalancer", ingress=None)
    assert cluster.get(ResourceKind.SERVICE, "default", "db").endpoint is None

    api.services["db"] = _service(
        service_type="LoadBalancer", ingress=[SimpleNamespace(ip=None, hostname="db.example.com")]
    )
    assert cluster.get(ResourceKind.SERVICE, "default", "db").endpoint == Endpoint("db.example.com", 5432)


def test_cluster_ip_service_endpoint() -> None:
    api = _FakeApi()
    api.services["db"] = _service(service_type="ClusterIP", node_port=None)
    out = ClusterClient(api).get(ResourceKind.SERVICE, "default", "db")
    assert out.endpoint == Endpoint("10.43.0.7", 5432)


def test_pod_state_reports_phase() -> None:
    api = _FakeApi()
    api.pods["postgres"] = SimpleNamespace(status=SimpleNamespace(phase="Running"))
    out = ClusterClient(api).get(ResourceKind.POD, "default", "postgres")
    assert out == ResourceState(kind=ResourceKind.POD, namespace="default", name="postgres", phase="Running")


def test_create_sends_manifest_to_namespace(descriptors) -> None:
    api = _FakeApi()
    service, pod = descriptors
    cluster = ClusterClient(api)

    svc_state = cluster.create(service)
    pod_state = cluster.create(pod)

    assert svc_state.endpoint == Endpoint("127.0.0.1", 32543)
    assert pod_state.phase == "Pending"
    name, body, namespace = api.calls[0]
    assert name == "create_namespaced_service"
    assert namespace == "default"
    assert body == service.manifest()


def test_create_conflict_and_missing_namespace_are_failures(descriptors) -> None:
    api = _FakeApi()
    _, pod = descriptors
    cluster = ClusterClient(api)

    api.raise_next = ApiException(status=409, reason="AlreadyExists")
    conflict = cluster.create(pod)
    api.raise_next = ApiException(status=404, reason="Not Found")
    missing_ns = cluster.create(pod)

    assert isinstance(conflict, Failure) and conflict.status == 409
    assert isinstance(missing_ns, Failure) and missing_ns.status == 404


def test_delete_reports_deleted_then_not_found() -> None:
    api = _FakeApi()
    api.pods["postgres"] = SimpleNamespace(status=SimpleNamespace(phase="Running"))
    cluster = ClusterClient(api)

    assert isinstance(cluster.delete(ResourceKind.POD, "default", "postgres"), Deleted)
    assert isinstance(cluster.delete(ResourceKind.POD, "default", "postgres"), NotFound)


def test_delete_server_error_is_failure() -> None:
    api = _FakeApi()
    api.raise_next = ApiException(status=500, reason="Internal Server Error")
    out = ClusterClient(api).delete(ResourceKind.SERVICE, "default", "postgres-service")
    assert isinstance(out, Failure)
    assert out.status == 500
    assert out.operation == "delete"
