"""Kubernetes Pods handling module.

Pods are never managed directly; they are only read to enrich a Watcher's
status and to reach the worker process.
"""

import logging
from typing import Any

from kubernetes import client

from hawkeye import templates
from hawkeye.kubernetes.base import KubernetesResource
from hawkeye.kubernetes.connection import KubernetesConnection

logger = logging.getLogger(__name__)


class PodResource(KubernetesResource[client.V1Pod]):
    """Read-only handler for the pods running Watchers."""

    # Resource type specific constants
    RESOURCE_KIND = "Pod"

    def __init__(self, connection: KubernetesConnection, namespace: str, request_timeout: int = 10):
        super().__init__(connection, namespace, request_timeout)
        self.api = connection.core_v1_api

    def list_namespaced_resources(self, namespace: str, **kwargs) -> Any:
        return self.api.list_namespaced_pod(namespace, **kwargs)

    def first_pod(self, watcher_id: str) -> client.V1Pod | None:
        """Get the first pod running a Watcher, if any."""
        pods = self.list_resources(templates.watcher_selector(watcher_id))
        return pods[0] if pods else None

    @staticmethod
    def waiting_message(pod: client.V1Pod | None) -> str | None:
        """Get the reason the first container of a pod is waiting, if any."""
        if pod is None or pod.status is None or not pod.status.container_statuses:
            return None
        state = pod.status.container_statuses[0].state
        if state is None or state.waiting is None:
            return None
        return state.waiting.message

    @staticmethod
    def pod_ip(pod: client.V1Pod | None) -> str | None:
        if pod is None or pod.status is None:
            return None
        return pod.status.pod_ip
