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

"""Exceptions raised by the fixture lifecycle."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pg_fixture.lifecycle import TeardownReport
    from pg_fixture.provisioner import Failed
    from pg_fixture.readiness import TimedOut
    from pg_fixture.resources import ResourceKind


class FixtureError(RuntimeError):
    """Base class for fixture errors."""


class AcquisitionError(FixtureError):
    """Bringing the fixture up failed; the fixture stays absent.

    Attributes:
        kind: Kind of the resource that failed.
        name: Name of the resource that failed.
        phase: ``provision`` or ``readiness``.
    """

    def __init__(self, message: str, *, kind: ResourceKind, name: str, phase: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.name = name
        self.phase = phase


class ProvisioningFailed(AcquisitionError):
    def __init__(self, outcome: Failed) -> None:
        descriptor = outcome.descriptor
        super().__init__(
            f"Provisioning {descriptor.ref} failed: {outcome.cause}",
            kind=descriptor.kind,
            name=descriptor.name,
            phase="provision",
        )
        self.outcome = outcome


class ReadinessTimeout(AcquisitionError):
    def __init__(self, outcome: TimedOut) -> None:
        super().__init__(outcome.describe(), kind=outcome.kind, name=outcome.name, phase="readiness")
        self.outcome = outcome


class TeardownFailure(FixtureError):
    """One or more deletes failed; raised only on request, after state is cleared."""

    def __init__(self, report: TeardownReport) -> None:
        details = "; ".join(str(f) for f in report.failures)
        super().__init__(f"Teardown incomplete: {details}")
        self.report = report
