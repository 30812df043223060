"""Status resolution for Watchers.

A Watcher's status is derived from two signals carried by its Deployment:
the ``target_status`` label, which records the last declared intent, and the
number of available replicas, which reflects what the cluster is actually
running. This module fuses them into a single :class:`Status` without doing
any I/O.
"""

import logging
from enum import Enum

from kubernetes import client

from hawkeye.errors import IntegrityViolation
from hawkeye.models import Status

logger = logging.getLogger(__name__)

# Label carrying the declared intent on a Watcher's Deployment
TARGET_STATUS_LABEL = "target_status"


class TargetState(str, Enum):
    """Declared intent of a Watcher."""
    READY = "Ready"
    RUNNING = "Running"


class ObservedState(str, Enum):
    """Runtime state of a Watcher's Deployment as reported by the cluster."""
    READY = "Ready"
    RUNNING = "Running"


_RESOLUTION_TABLE = {
    (TargetState.RUNNING, ObservedState.RUNNING): Status.RUNNING,
    (TargetState.READY, ObservedState.READY): Status.READY,
    (TargetState.READY, ObservedState.RUNNING): Status.PENDING,
    (TargetState.RUNNING, ObservedState.READY): Status.PENDING,
}


def parse_target_status(value: str | None) -> TargetState:
    """Parse the value of a ``target_status`` label.

    Args:
        value: The raw label value.

    Returns:
        The declared target state.

    Raises:
        IntegrityViolation: If the value is missing or is not a valid target state.
    """
    if value is None:
        raise IntegrityViolation(f"Missing required '{TARGET_STATUS_LABEL}' label")
    try:
        return TargetState(value)
    except ValueError as e:
        raise IntegrityViolation(f"Invalid '{TARGET_STATUS_LABEL}' label value: {value!r}") from e


def target_state(deployment: client.V1Deployment | None) -> TargetState | None:
    """Read the declared target state of a Deployment.

    Args:
        deployment: The Watcher's Deployment, or None if it does not exist.

    Returns:
        The target state, or None if it cannot be read.
    """
    if deployment is None:
        return None
    labels = deployment.metadata.labels or {}
    try:
        return parse_target_status(labels.get(TARGET_STATUS_LABEL))
    except IntegrityViolation as e:
        logger.error(f"Deployment {deployment.metadata.name}: {e.message}")
        return None


def observed_state(deployment: client.V1Deployment | None) -> ObservedState | None:
    """Compute the observed runtime state of a Deployment.

    Args:
        deployment: The Watcher's Deployment, or None if it does not exist.

    Returns:
        RUNNING if at least one replica is available, READY otherwise, or None
        if the Deployment or its status block is absent.
    """
    if deployment is None or deployment.status is None:
        return None
    if (deployment.status.available_replicas or 0) > 0:
        return ObservedState.RUNNING
    return ObservedState.READY


def resolve(target: TargetState | None, observed: ObservedState | None) -> Status:
    """Fuse a target state and an observed state into a Watcher status.

    A mismatch in either direction means a transition is in flight and
    resolves to PENDING. A missing side resolves to ERROR.

    Args:
        target: The declared target state, or None if absent or malformed.
        observed: The observed state, or None if the Deployment was not found.

    Returns:
        The derived status.
    """
    return _RESOLUTION_TABLE.get((target, observed), Status.ERROR)


def workload_status(deployment: client.V1Deployment | None) -> Status:
    """Derive the status of a Watcher from its Deployment."""
    return resolve(target_state(deployment), observed_state(deployment))
