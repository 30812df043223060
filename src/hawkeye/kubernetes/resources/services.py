"""Kubernetes Services handling module.

A Watcher's Service exposes its ingest address once the cluster has assigned one.
"""

import logging
from typing import Any

from kubernetes import client

from hawkeye import templates
from hawkeye.kubernetes.base import WatcherResource
from hawkeye.kubernetes.connection import KubernetesConnection

logger = logging.getLogger(__name__)


class ServiceResource(WatcherResource[client.V1Service]):
    """Handler for the LoadBalancer Services exposing Watchers."""

    # Resource type specific constants
    RESOURCE_KIND = "Service"

    def __init__(
        self,
        connection: KubernetesConnection,
        namespace: str,
        request_timeout: int = 10,
        field_manager: str = "hawkeye_api",
    ):
        super().__init__(connection, namespace, request_timeout, field_manager)
        # API client for services
        self.api = connection.core_v1_api

    def resource_name(self, watcher_id: str) -> str:
        return templates.service_name(watcher_id)

    def read_namespaced_resource(self, name: str, namespace: str, **kwargs) -> client.V1Service:
        # Only the status block is needed, it carries the load balancer ingress
        return self.api.read_namespaced_service_status(name, namespace, **kwargs)

    def create_namespaced_resource(self, namespace: str, body: dict, **kwargs) -> client.V1Service:
        return self.api.create_namespaced_service(namespace, body, **kwargs)

    def patch_namespaced_resource(self, name: str, namespace: str, body: dict, **kwargs) -> client.V1Service:
        return self.api.patch_namespaced_service(name, namespace, body, **kwargs)

    def delete_namespaced_resource(self, name: str, namespace: str, **kwargs) -> Any:
        return self.api.delete_namespaced_service(name, namespace, **kwargs)

    def list_namespaced_resources(self, namespace: str, **kwargs) -> Any:
        return self.api.list_namespaced_service(namespace, **kwargs)

    @staticmethod
    def ingress_address(service: client.V1Service | None) -> str | None:
        """Get the address assigned to a Service's load balancer.

        Args:
            service: The Service, or None if it does not exist.

        Returns:
            The hostname of the first ingress point, its IP if it has no
            hostname, or None if no address is assigned yet.
        """
        if service is None or service.status is None or service.status.load_balancer is None:
            return None
        ingress = service.status.load_balancer.ingress or []
        if not ingress:
            return None
        return ingress[0].hostname or ingress[0].ip
