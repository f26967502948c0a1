from __future__ import annotations

import threading
import time
from collections import Counter

from pg_fixture.kube import Deleted, Endpoint, Failure, NotFound, ResourceState
from pg_fixture.resources import ResourceDescriptor, ResourceKind

NODE_HOST = "127.0.0.1"
NODE_PORT = 32543


class FakeCluster:
    """In-memory stand-in for ClusterClient with scripted readiness.

    A resource reports ready once it has been read ``ready_after[kind]`` times
    since creation while not ready. Kinds in ``never_ready`` never do. A
    resource preset with ``ready=False`` is not ready on its first read.
    Reads of a present resource whose kind is in ``interrupt_reads`` raise
    KeyboardInterrupt.
    """

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.calls: list[tuple[str, ResourceKind, str]] = []
        self.present: dict[tuple[ResourceKind, str, str], int] = {}
        self.ready_after: dict[ResourceKind, int] = {ResourceKind.SERVICE: 0, ResourceKind.POD: 0}
        self.never_ready: set[ResourceKind] = set()
        self.fail_get: set[ResourceKind] = set()
        self.fail_create: dict[ResourceKind, int] = {}
        self.fail_delete: set[ResourceKind] = set()
        self.interrupt_reads: set[ResourceKind] = set()
        self.create_delay = 0.0

    def preset(self, kind: ResourceKind, name: str, namespace: str = "default", *, ready: bool = True) -> None:
        self.present[(kind, namespace, name)] = self.ready_after[kind] if ready else -1

    def count(self, operation: str, kind: ResourceKind | None = None) -> int:
        return sum(1 for op, k, _ in self.calls if op == operation and (kind is None or k is kind))

    def counts(self) -> Counter:
        return Counter((op, k) for op, k, _ in self.calls)

    def _state(self, kind: ResourceKind, namespace: str, name: str, reads: int) -> ResourceState:
        ready = kind not in self.never_ready and reads >= self.ready_after[kind]
        if kind is ResourceKind.SERVICE:
            endpoint = Endpoint(host=NODE_HOST, port=NODE_PORT) if ready else None
            return ResourceState(kind=kind, namespace=namespace, name=name, endpoint=endpoint)
        return ResourceState(kind=kind, namespace=namespace, name=name, phase="Running" if ready else "Pending")

    def get(self, kind: ResourceKind, namespace: str, name: str):
        with self.lock:
            self.calls.append(("get", kind, name))
            if kind in self.fail_get:
                return Failure(kind=kind, namespace=namespace, name=name, operation="get",
                               status=503, reason="Service Unavailable")
            key = (kind, namespace, name)
            if key not in self.present:
                return NotFound(kind=kind, namespace=namespace, name=name)
            if kind in self.interrupt_reads:
                raise KeyboardInterrupt
            state = self._state(kind, namespace, name, self.present[key])
            self.present[key] += 1
            return state

    def create(self, descriptor: ResourceDescriptor):
        kind, namespace, name = descriptor.kind, descriptor.namespace, descriptor.name
        if self.create_delay:
            time.sleep(self.create_delay)
        with self.lock:
            self.calls.append(("create", kind, name))
            key = (kind, namespace, name)
            if kind in self.fail_create:
                return Failure(kind=kind, namespace=namespace, name=name, operation="create",
                               status=self.fail_create[kind], reason="Forbidden")
            if key in self.present:
                return Failure(kind=kind, namespace=namespace, name=name, operation="create",
                               status=409, reason="AlreadyExists")
            self.present[key] = 0
            return self._state(kind, namespace, name, -1)

    def delete(self, kind: ResourceKind, namespace: str, name: str):
        with self.lock:
            self.calls.append(("delete", kind, name))
            if kind in self.fail_delete:
                return Failure(kind=kind, namespace=namespace, name=name, operation="delete",
                               status=500, reason="Internal Server Error")
            if self.present.pop((kind, namespace, name), None) is None:
                return NotFound(kind=kind, namespace=namespace, name=name)
            return Deleted(kind=kind, namespace=namespace, name=name)
