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

"""Bounded fixed-interval polling until a readiness predicate holds."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Union

from tenacity import RetryCallState, RetryError, Retrying, retry_if_result, wait_fixed

from pg_fixture import logger
from pg_fixture.constants import POD_RUNNING_PHASE
from pg_fixture.kube import ClusterClient, Failure, GetResult, NotFound, ResourceState
from pg_fixture.resources import ResourceKind

Predicate = Callable[[ResourceState], bool]


@dataclass(frozen=True)
class Ready:
    """The predicate held.

    Attributes:
        state: The observation that satisfied the predicate.
        attempts: Status reads performed by the poller (0 if a prior read sufficed).
        elapsed: Seconds spent polling.
    """

    state: ResourceState
    attempts: int
    elapsed: float


@dataclass(frozen=True)
class TimedOut:
    """The deadline passed without the predicate holding.

    Attributes:
        kind: Resource kind.
        namespace: Resource namespace.
        name: Resource name.
        deadline: Configured deadline in seconds.
        attempts: Status reads performed.
        elapsed: Seconds spent polling, always greater than ``deadline``.
        last_observation: The final read result, or None if nothing was read.
    """

    kind: ResourceKind
    namespace: str
    name: str
    deadline: float
    attempts: int
    elapsed: float
    last_observation: GetResult | None = None

    @property
    def ref(self) -> str:
        return f"{self.kind.value} {self.namespace}/{self.name}"

    def describe(self) -> str:
        """Summarize the timeout and what was last seen."""
        last = self.last_observation
        if isinstance(last, ResourceState):
            if last.kind is ResourceKind.POD:
                seen = f"phase {last.phase or 'unknown'}"
            else:
                seen = "no endpoint assigned"
        elif isinstance(last, NotFound):
            seen = "resource not found"
        elif isinstance(last, Failure):
            seen = str(last)
        else:
            seen = "no status read"
        return (
            f"{self.ref} not ready after {self.elapsed:.1f}s "
            f"(deadline {self.deadline:g}s, {self.attempts} attempts, last seen: {seen})"
        )


PollResult = Union[Ready, TimedOut]


# ============================================================================
# Readiness predicates
# ============================================================================

def endpoint_assigned(state: ResourceState) -> bool:
    """Service predicate: a reachable endpoint has been assigned."""
    return state.endpoint is not None


def phase_running(state: ResourceState) -> bool:
    """Pod predicate: the reported phase is exactly ``Running``."""
    return state.phase == POD_RUNNING_PHASE


READINESS_PREDICATES: dict[ResourceKind, Predicate] = {
    ResourceKind.SERVICE: endpoint_assigned,
    ResourceKind.POD: phase_running,
}


# ============================================================================
# Poller
# ============================================================================

def await_ready(
    cluster: ClusterClient,
    kind: ResourceKind,
    namespace: str,
    name: str,
    predicate: Predicate,
    *,
    interval: float,
    deadline: float,
    observed: ResourceState | None = None,
) -> PollResult:
    """Poll a resource's status until ``predicate`` holds or the deadline passes.

    Each iteration reads the status once; if the predicate holds the result is
    returned immediately, otherwise the deadline is checked and the loop sleeps
    ``interval`` seconds. A read that is in flight when the deadline passes is
    allowed to finish, but no further read is started. ``NotFound`` and
    ``Failure`` reads count as not ready.

    Args:
        cluster: Cluster API adapter.
        kind: Resource kind.
        namespace: Resource namespace.
        name: Resource name.
        predicate: Readiness test applied to each fresh ResourceState.
        interval: Fixed sleep between reads, in seconds.
        deadline: Give up once this many seconds have elapsed.
        observed: A state the caller has just read; checked before polling.

    Returns:
        Ready or TimedOut.
    """
    ref = f"{kind.value} {namespace}/{name}"
    start = time.monotonic()
    if observed is not None and predicate(observed):
        logger.info("%s is ready", ref)
        return Ready(state=observed, attempts=0, elapsed=0.0)

    attempts = 0

    def _fetch() -> GetResult:
        nonlocal attempts
        attempts += 1
        observation = cluster.get(kind, namespace, name)
        if isinstance(observation, Failure):
            logger.warning("Status read failed: %s", observation)
        return observation

    def _not_ready(observation: GetResult) -> bool:
        return not (isinstance(observation, ResourceState) and predicate(observation))

    def _past_deadline(retry_state: RetryCallState) -> bool:
        return time.monotonic() - start > deadline

    def _log_wait(retry_state: RetryCallState) -> None:
        logger.debug(
            "%s not ready (attempt %d), checking again in %gs",
            ref, retry_state.attempt_number, interval,
        )

    retrying = Retrying(
        stop=_past_deadline,
        wait=wait_fixed(interval),
        retry=retry_if_result(_not_ready),
        before_sleep=_log_wait,
    )
    try:
        observation = retrying(_fetch)
    except RetryError as err:
        outcome = TimedOut(
            kind=kind,
            namespace=namespace,
            name=name,
            deadline=deadline,
            attempts=attempts,
            elapsed=time.monotonic() - start,
            last_observation=err.last_attempt.result(),
        )
        logger.warning("%s", outcome.describe())
        return outcome

    elapsed = time.monotonic() - start
    logger.info("%s is ready after %.1fs (%d attempts)", ref, elapsed, attempts)
    return Ready(state=observation, attempts=attempts, elapsed=elapsed)
