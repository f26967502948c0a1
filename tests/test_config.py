from __future__ import annotations

import pytest
from pydantic import ValidationError

from pg_fixture.config import ClusterConfig, DatabaseConfig, PollConfig, resolve_config
from pg_fixture.resources import ResourceKind


def test_defaults_match_the_shared_test_database() -> None:
    cluster_cfg, db_cfg, poll_cfg = resolve_config()

    assert cluster_cfg.namespace == "default"
    assert db_cfg.service_name == "postgres-service"
    assert db_cfg.pod_name == "postgres"
    assert db_cfg.node_port == 32543
    assert db_cfg.database == "eventstore_db"
    assert poll_cfg.service_deadline < poll_cfg.pod_deadline


def test_environment_variables_are_loaded(monkeypatch) -> None:
    monkeypatch.setenv("PG_FIXTURE_NAMESPACE", "ci")
    monkeypatch.setenv("PG_FIXTURE_IMAGE", "postgres:16-alpine")
    monkeypatch.setenv("PG_FIXTURE_ENV", '{"PGDATA": "/tmp/pg"}')
    monkeypatch.setenv("PG_FIXTURE_POD_DEADLINE", "600")

    assert ClusterConfig().namespace == "ci"
    db_cfg = DatabaseConfig()
    assert db_cfg.image == "postgres:16-alpine"
    assert db_cfg.env == {"PGDATA": "/tmp/pg"}
    assert PollConfig().pod_deadline == 600


def test_resolve_config_applies_overrides_and_skips_none(monkeypatch) -> None:
    monkeypatch.setenv("PG_FIXTURE_IMAGE", "postgres:15")

    cluster_cfg, db_cfg, poll_cfg = resolve_config(namespace="ci", image=None, pod_deadline=42.0)

    assert cluster_cfg.namespace == "ci"
    assert db_cfg.image == "postgres:15"
    assert poll_cfg.pod_deadline == 42.0


def test_resolve_config_validates_overrides() -> None:
    with pytest.raises(ValidationError):
        resolve_config(node_port=80)
    with pytest.raises(ValidationError):
        resolve_config(service_interval=0)


def test_resolve_config_rejects_unknown_keys() -> None:
    with pytest.raises(ValueError, match="nodeport"):
        resolve_config(nodeport=32000)


def test_poll_config_pairs_per_kind() -> None:
    cfg = PollConfig(service_interval=1, service_deadline=10, pod_interval=5, pod_deadline=300)
    assert cfg.for_kind(ResourceKind.SERVICE) == (1, 10)
    assert cfg.for_kind(ResourceKind.POD) == (5, 300)
