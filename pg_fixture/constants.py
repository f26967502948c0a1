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

"""Default names, ports, credentials, and poll timings."""

from __future__ import annotations

# -- Cluster defaults --
DEFAULT_NAMESPACE = "default"
DEFAULT_NODE_HOST = "127.0.0.1"

# -- Resource names --
DEFAULT_SERVICE_NAME = "postgres-service"
DEFAULT_POD_NAME = "postgres"
DEFAULT_APP_LABEL = "postgres"
LABEL_APP = "app"
LABEL_MANAGED_BY = "app.kubernetes.io/managed-by"
MANAGED_BY_VALUE = "pg-fixture"

# -- Workload defaults --
DEFAULT_IMAGE = "postgres:latest"
DEFAULT_CONTAINER_PORT = 5432
DEFAULT_NODE_PORT = 32543
DEFAULT_SERVICE_TYPE = "NodePort"
SERVICE_TYPES = ("NodePort", "LoadBalancer", "ClusterIP")
NODE_PORT_RANGE = (30000, 32767)
PROTOCOL_TCP = "TCP"

# -- Credentials --
DEFAULT_DATABASE = "eventstore_db"
DEFAULT_USER = "postgres"
DEFAULT_PASSWORD = "password"
ENV_POSTGRES_DB = "POSTGRES_DB"
ENV_POSTGRES_USER = "POSTGRES_USER"
ENV_POSTGRES_PASSWORD = "POSTGRES_PASSWORD"

# -- Readiness --
POD_RUNNING_PHASE = "Running"
DEFAULT_SERVICE_POLL_INTERVAL = 1.0
DEFAULT_SERVICE_POLL_DEADLINE = 30.0
DEFAULT_POD_POLL_INTERVAL = 5.0
DEFAULT_POD_POLL_DEADLINE = 300.0

# -- Settings --
ENV_PREFIX = "PG_FIXTURE_"
HTTP_NOT_FOUND = 404
