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

"""Shared fixture lifecycle: provision once, hand out one handle, tear down."""

from __future__ import annotations

import threading
from concurrent.futures import Future, wait
from dataclasses import dataclass
from enum import Enum
from typing import Iterable
from urllib.parse import quote

from pg_fixture import logger
from pg_fixture.config import ClusterConfig, DatabaseConfig, PollConfig
from pg_fixture.errors import ProvisioningFailed, ReadinessTimeout, TeardownFailure
from pg_fixture.kube import ClusterClient, Deleted, Failure, NotFound, ResourceState
from pg_fixture.provisioner import AlreadyExists, Failed, Provisioner
from pg_fixture.readiness import READINESS_PREDICATES, TimedOut, await_ready
from pg_fixture.resources import ResourceDescriptor, build_descriptors


class LifecycleState(str, Enum):
    ABSENT = "absent"
    PROVISIONING = "provisioning"
    READY = "ready"
    TORN_DOWN = "torn-down"


@dataclass(frozen=True)
class LifecycleHandle:
    """A ready database: where to connect and with which credentials.

    Attributes:
        host: Reachable host of the Service endpoint.
        port: Reachable port of the Service endpoint.
        database: Database name.
        user: Database user.
        password: Database password.
        namespace: Namespace holding the resources.
        service_name: Name of the Service.
        pod_name: Name of the Pod.
    """

    host: str
    port: int
    database: str
    user: str
    password: str
    namespace: str
    service_name: str
    pod_name: str

    def connection_url(self, driver: str = "postgresql") -> str:
        """Build a URL such as ``postgresql://user:pw@host:port/db``."""
        user = quote(self.user, safe="")
        password = quote(self.password, safe="")
        return f"{driver}://{user}:{password}@{self.host}:{self.port}/{self.database}"

    def dsn(self) -> str:
        """Build a libpq keyword/value connection string with every value quoted."""
        pairs = (
            ("host", self.host),
            ("port", self.port),
            ("dbname", self.database),
            ("user", self.user),
            ("password", self.password),
        )
        return " ".join(f"{key}={_libpq_quote(value)}" for key, value in pairs)


def _libpq_quote(value: object) -> str:
    escaped = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


@dataclass(frozen=True)
class TeardownReport:
    deleted: tuple[str, ...] = ()
    already_gone: tuple[str, ...] = ()
    failures: tuple[Failure, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures


def delete_resources(cluster: ClusterClient, descriptors: Iterable[ResourceDescriptor]) -> TeardownReport:
    """Delete resources in the given order, best effort.

    A resource that is already gone counts as deleted. Other failures are
    logged and collected; they never stop the remaining deletes.

    Args:
        cluster: Cluster API adapter.
        descriptors: Resources to delete, in deletion order.

    Returns:
        Report of deleted, already-gone, and failed resources.
    """
    deleted: list[str] = []
    already_gone: list[str] = []
    failures: list[Failure] = []
    for descriptor in descriptors:
        outcome = cluster.delete(descriptor.kind, descriptor.namespace, descriptor.name)
        if isinstance(outcome, Deleted):
            logger.info("%s deleted", descriptor.ref)
            deleted.append(descriptor.ref)
        elif isinstance(outcome, NotFound):
            logger.info("%s not found, already deleted", descriptor.ref)
            already_gone.append(descriptor.ref)
        else:
            logger.warning("Teardown of %s failed: %s", descriptor.ref, outcome)
            failures.append(outcome)
    return TeardownReport(deleted=tuple(deleted), already_gone=tuple(already_gone), failures=tuple(failures))


class DatabaseFixture:
    """Process-local owner of the fixture's state machine.

    ``acquire`` provisions the Service, waits for it, provisions the Pod, and
    waits for it; concurrent callers share a single provisioning sequence and
    its outcome. ``release`` deletes the Pod and then the Service.

    States: absent -> provisioning -> ready -> torn-down. A failed acquisition
    returns to absent; acquiring after teardown provisions again.
    """

    def __init__(
        self,
        cluster: ClusterClient,
        service: ResourceDescriptor,
        pod: ResourceDescriptor,
        db_cfg: DatabaseConfig,
        poll_cfg: PollConfig,
    ) -> None:
        self._cluster = cluster
        self._provisioner = Provisioner(cluster)
        self._service = service
        self._pod = pod
        self._db_cfg = db_cfg
        self._poll_cfg = poll_cfg
        self._lock = threading.Lock()
        self._state = LifecycleState.ABSENT
        self._handle: LifecycleHandle | None = None
        self._inflight: Future[LifecycleHandle] | None = None

    @classmethod
    def from_config(
        cls,
        cluster_cfg: ClusterConfig | None = None,
        db_cfg: DatabaseConfig | None = None,
        poll_cfg: PollConfig | None = None,
        *,
        cluster: ClusterClient | None = None,
    ) -> DatabaseFixture:
        """Build a fixture from settings, loading them from the environment when omitted."""
        cluster_cfg = cluster_cfg or ClusterConfig()
        db_cfg = db_cfg or DatabaseConfig()
        poll_cfg = poll_cfg or PollConfig()
        service, pod = build_descriptors(cluster_cfg, db_cfg)
        if cluster is None:
            cluster = ClusterClient.from_config(cluster_cfg)
        return cls(cluster, service, pod, db_cfg, poll_cfg)

    @property
    def state(self) -> LifecycleState:
        with self._lock:
            return self._state

    @property
    def handle(self) -> LifecycleHandle | None:
        with self._lock:
            return self._handle

    def __enter__(self) -> LifecycleHandle:
        return self.acquire()

    def __exit__(self, *exc_info: object) -> None:
        self.release()

    # ------------------------------------------------------------------------
    # Acquire
    # ------------------------------------------------------------------------

    def acquire(self) -> LifecycleHandle:
        """Return the shared handle, provisioning the database if needed.

        A ready handle is returned as-is without checking the cluster again.

        Returns:
            The ready handle.

        Raises:
            ProvisioningFailed: If reading or creating a resource failed.
            ReadinessTimeout: If a resource did not become ready in time.
        """
        with self._lock:
            if self._state is LifecycleState.READY:
                return self._handle
            inflight = self._inflight
            owner = inflight is None
            if owner:
                inflight = self._inflight = Future()
                self._state = LifecycleState.PROVISIONING

        if not owner:
            logger.debug("Waiting for in-flight provisioning")
            return inflight.result()

        try:
            handle = self._provision()
        except BaseException as exc:
            # Interrupts included, so waiters and release() are never left blocked.
            with self._lock:
                self._state = LifecycleState.ABSENT
                self._inflight = None
            inflight.set_exception(exc)
            raise

        with self._lock:
            self._handle = handle
            self._state = LifecycleState.READY
            self._inflight = None
        inflight.set_result(handle)
        logger.info("Database ready at %s:%d", handle.host, handle.port)
        return handle

    def _provision(self) -> LifecycleHandle:
        service_state = self._bring_up(self._service)
        self._bring_up(self._pod)
        endpoint = service_state.endpoint
        return LifecycleHandle(
            host=endpoint.host,
            port=endpoint.port,
            database=self._db_cfg.database,
            user=self._db_cfg.user,
            password=self._db_cfg.password,
            namespace=self._service.namespace,
            service_name=self._service.name,
            pod_name=self._pod.name,
        )

    def _bring_up(self, descriptor: ResourceDescriptor) -> ResourceState:
        outcome = self._provisioner.ensure(descriptor)
        if isinstance(outcome, Failed):
            raise ProvisioningFailed(outcome)

        interval, deadline = self._poll_cfg.for_kind(descriptor.kind)
        result = await_ready(
            self._cluster,
            descriptor.kind,
            descriptor.namespace,
            descriptor.name,
            READINESS_PREDICATES[descriptor.kind],
            interval=interval,
            deadline=deadline,
            observed=outcome.state if isinstance(outcome, AlreadyExists) else None,
        )
        if isinstance(result, TimedOut):
            raise ReadinessTimeout(result)
        return result.state

    # ------------------------------------------------------------------------
    # Release
    # ------------------------------------------------------------------------

    def release(self, *, strict: bool = False) -> TeardownReport:
        """Delete the Pod, then the Service, and clear the handle.

        Waits for an in-flight acquisition first. A no-op unless the fixture is
        ready. State is cleared even when deletes fail.

        Args:
            strict: Raise TeardownFailure after clearing state if any delete failed.

        Returns:
            The teardown report (empty for a no-op).

        Raises:
            TeardownFailure: If ``strict`` and a delete failed for a reason other than absence.
        """
        with self._lock:
            inflight = self._inflight
        if inflight is not None:
            wait([inflight])

        with self._lock:
            if self._state is not LifecycleState.READY:
                logger.debug("Release with state %s is a no-op", self._state.value)
                return TeardownReport()
            try:
                report = delete_resources(self._cluster, (self._pod, self._service))
            finally:
                self._handle = None
                self._state = LifecycleState.TORN_DOWN

        if strict and not report.ok:
            raise TeardownFailure(report)
        return report
