"""Kubernetes events handling module.

Each accepted start or stop is recorded as an event regarding the Watcher's
Deployment, so ``kubectl describe`` shows who changed its intent and when.
"""

import logging
from datetime import UTC, datetime

from kubernetes import client

from hawkeye.kubernetes.connection import KubernetesConnection
from hawkeye.status import TargetState

logger = logging.getLogger(__name__)

EVENT_TYPE_NORMAL = "Normal"
# Name reported as the controller emitting the events
EVENT_COMPONENT = "hawkeye-api"

# reason, action and note of the event recorded for each target state
_TRANSITIONS = {
    TargetState.RUNNING: (
        "Started",
        "Start",
        "Watcher was started by Hawkeye: scaled to 1 replica, target status Running",
    ),
    TargetState.READY: (
        "Stopped",
        "Stop",
        "Watcher was stopped by Hawkeye: scaled to 0 replicas, target status Ready",
    ),
}


def create_transition_event(
    connection: KubernetesConnection,
    deployment: client.V1Deployment,
    target: TargetState,
    request_timeout: int = 10,
) -> None:
    """Record a Watcher transition as an event regarding its Deployment.

    Failures are logged and never propagated: the transition has already
    been applied when the event is recorded.

    Args:
        connection: The Kubernetes connection to use
        deployment: The Watcher's Deployment, as read before the transition
        target: The target state the Watcher was moved to
        request_timeout: Timeout in seconds applied to the API call
    """
    name = deployment.metadata.name
    namespace = deployment.metadata.namespace
    if not name or not namespace:
        logger.warning("Cannot create event for Deployment without name and namespace")
        return

    reason, action, note = _TRANSITIONS[target]
    body = client.EventsV1Event(
        metadata=client.V1ObjectMeta(generate_name=f"{name}-", namespace=namespace),
        reason=reason,
        action=action,
        note=note,
        type=EVENT_TYPE_NORMAL,
        reporting_controller=EVENT_COMPONENT,
        reporting_instance=connection.hostname,
        regarding=client.V1ObjectReference(
            api_version="apps/v1",
            kind="Deployment",
            name=name,
            namespace=namespace,
            uid=deployment.metadata.uid,
        ),
        event_time=datetime.now(UTC),
    )

    try:
        connection.events_v1_api.create_namespaced_event(
            namespace=namespace, body=body, _request_timeout=request_timeout
        )
    except Exception as e:
        logger.warning(f"Failed to create {reason} event for Deployment {namespace}/{name}: {e}")
        return
    logger.debug(f"Created {reason} event for Deployment {namespace}/{name}")
