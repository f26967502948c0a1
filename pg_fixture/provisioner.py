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

"""Create-if-missing provisioning of a single resource."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from pg_fixture import logger
from pg_fixture.kube import ClusterClient, Failure, ResourceState
from pg_fixture.resources import ResourceDescriptor


@dataclass(frozen=True)
class AlreadyExists:
    state: ResourceState


@dataclass(frozen=True)
class Created:
    state: ResourceState


@dataclass(frozen=True)
class Failed:
    descriptor: ResourceDescriptor
    cause: Failure


ProvisioningOutcome = Union[AlreadyExists, Created, Failed]


class Provisioner:
    """Ensures a resource exists, trusting whatever is already there.

    An existing resource is never compared with the descriptor and never
    updated. A failed read never leads to a create attempt.
    """

    def __init__(self, cluster: ClusterClient) -> None:
        self._cluster = cluster

    def ensure(self, descriptor: ResourceDescriptor) -> ProvisioningOutcome:
        """Create the resource if, and only if, the API reports it absent.

        Args:
            descriptor: The resource to ensure.

        Returns:
            AlreadyExists, Created, or Failed with the underlying Failure.
        """
        current = self._cluster.get(descriptor.kind, descriptor.namespace, descriptor.name)
        if isinstance(current, ResourceState):
            logger.info("%s already exists", descriptor.ref)
            return AlreadyExists(state=current)
        if isinstance(current, Failure):
            logger.error("Cannot determine whether %s exists: %s", descriptor.ref, current)
            return Failed(descriptor=descriptor, cause=current)

        # Absent: the only case that creates.
        created = self._cluster.create(descriptor)
        if isinstance(created, Failure):
            logger.error("Failed to create %s: %s", descriptor.ref, created)
            return Failed(descriptor=descriptor, cause=created)
        logger.info("%s created", descriptor.ref)
        return Created(state=created)
