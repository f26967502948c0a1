from __future__ import annotations

import os

import pytest

from pg_fixture.config import ClusterConfig, DatabaseConfig, PollConfig
from pg_fixture.lifecycle import DatabaseFixture
from pg_fixture.resources import build_descriptors
from tests.fakes import FakeCluster


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("PG_FIXTURE_"):
            monkeypatch.delenv(key)


@pytest.fixture
def cluster_cfg() -> ClusterConfig:
    return ClusterConfig(namespace="default")


@pytest.fixture
def db_cfg() -> DatabaseConfig:
    return DatabaseConfig()


@pytest.fixture
def poll_cfg() -> PollConfig:
    return PollConfig(service_interval=0.01, service_deadline=0.3, pod_interval=0.01, pod_deadline=0.3)


@pytest.fixture
def descriptors(cluster_cfg, db_cfg):
    return build_descriptors(cluster_cfg, db_cfg)


@pytest.fixture
def fake_cluster() -> FakeCluster:
    return FakeCluster()


@pytest.fixture
def fixture(fake_cluster, descriptors, db_cfg, poll_cfg) -> DatabaseFixture:
    service, pod = descriptors
    return DatabaseFixture(fake_cluster, service, pod, db_cfg, poll_cfg)
