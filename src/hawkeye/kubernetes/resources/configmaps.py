"""Kubernetes ConfigMaps handling module.

A Watcher's ConfigMap holds its serialized record and is the source of truth
for which Watchers exist.
"""

import logging
from typing import Any

from kubernetes import client

from hawkeye import templates
from hawkeye.kubernetes.base import WatcherResource
from hawkeye.kubernetes.connection import KubernetesConnection
from hawkeye.models import Watcher

logger = logging.getLogger(__name__)


class ConfigMapResource(WatcherResource[client.V1ConfigMap]):
    """Handler for the ConfigMaps holding Watcher records."""

    # Resource type specific constants
    RESOURCE_KIND = "ConfigMap"

    def __init__(
        self,
        connection: KubernetesConnection,
        namespace: str,
        request_timeout: int = 10,
        field_manager: str = "hawkeye_api",
    ):
        super().__init__(connection, namespace, request_timeout, field_manager)
        # API client for configmaps
        self.api = connection.core_v1_api

    def resource_name(self, watcher_id: str) -> str:
        return templates.configmap_name(watcher_id)

    def read_namespaced_resource(self, name: str, namespace: str, **kwargs) -> client.V1ConfigMap:
        return self.api.read_namespaced_config_map(name, namespace, **kwargs)

    def create_namespaced_resource(self, namespace: str, body: dict, **kwargs) -> client.V1ConfigMap:
        return self.api.create_namespaced_config_map(namespace, body, **kwargs)

    def patch_namespaced_resource(self, name: str, namespace: str, body: dict, **kwargs) -> client.V1ConfigMap:
        return self.api.patch_namespaced_config_map(name, namespace, body, **kwargs)

    def delete_namespaced_resource(self, name: str, namespace: str, **kwargs) -> Any:
        return self.api.delete_namespaced_config_map(name, namespace, **kwargs)

    def list_namespaced_resources(self, namespace: str, **kwargs) -> Any:
        return self.api.list_namespaced_config_map(namespace, **kwargs)

    def load_watcher(self, config_map: client.V1ConfigMap) -> Watcher:
        """Decode the Watcher record stored in a ConfigMap.

        Args:
            config_map: The Watcher's ConfigMap.

        Returns:
            The stored Watcher.

        Raises:
            IntegrityViolation: If the record is missing or malformed.
        """
        data = config_map.data or {}
        return Watcher.from_record(data.get(templates.WATCHER_RECORD_KEY), origin=config_map.metadata.name)
