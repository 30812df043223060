"""Kubernetes Deployments handling module.

This module provides specific functionality for managing Watcher Deployments.
A Watcher is started and stopped by scaling its Deployment between one and
zero replicas, and its declared intent is recorded in a label.
"""

import logging
from typing import Any

from kubernetes import client
from kubernetes.client.exceptions import ApiException
from urllib3.exceptions import HTTPError

from hawkeye import templates
from hawkeye.kubernetes.base import WatcherResource
from hawkeye.kubernetes.connection import KubernetesConnection
from hawkeye.status import TARGET_STATUS_LABEL, TargetState

logger = logging.getLogger(__name__)


class DeploymentResource(WatcherResource[client.V1Deployment]):
    """Handler for Watcher Deployment resources."""

    # Resource type specific constants
    RESOURCE_KIND = "Deployment"

    def __init__(
        self,
        connection: KubernetesConnection,
        namespace: str,
        request_timeout: int = 10,
        field_manager: str = "hawkeye_api",
    ):
        """Initialize the Deployment resource handler.

        Args:
            connection: The Kubernetes connection to use
            namespace: Namespace holding the Watcher resources.
            request_timeout: Timeout in seconds applied to every API call.
            field_manager: Field manager name sent with create and patch calls.
        """
        super().__init__(connection, namespace, request_timeout, field_manager)
        # API client for deployments
        self.api = connection.apps_v1_api

    def resource_name(self, watcher_id: str) -> str:
        return templates.deployment_name(watcher_id)

    def read_namespaced_resource(self, name: str, namespace: str, **kwargs) -> client.V1Deployment:
        """Get a specific deployment by name.

        Args:
            name: Name of the deployment.
            namespace: Namespace of the deployment.

        Returns:
            The deployment object.
        """
        return self.api.read_namespaced_deployment(name, namespace, **kwargs)

    def create_namespaced_resource(self, namespace: str, body: dict, **kwargs) -> client.V1Deployment:
        return self.api.create_namespaced_deployment(namespace, body, **kwargs)

    def patch_namespaced_resource(self, name: str, namespace: str, body: dict, **kwargs) -> client.V1Deployment:
        """Patch a deployment with the given body.

        Args:
            name: Name of the deployment.
            namespace: Namespace of the deployment.
            body: The patch body to apply.
        """
        return self.api.patch_namespaced_deployment(name, namespace, body, **kwargs)

    def delete_namespaced_resource(self, name: str, namespace: str, **kwargs) -> Any:
        return self.api.delete_namespaced_deployment(name, namespace, **kwargs)

    def list_namespaced_resources(self, namespace: str, **kwargs) -> Any:
        """List deployments in a specific namespace.

        Args:
            namespace: The namespace to list deployments in.
            **kwargs: Additional arguments to pass to the API call.

        Returns:
            The API response containing the list of deployments.
        """
        return self.api.list_namespaced_deployment(namespace, **kwargs)

    def set_replicas(self, watcher_id: str, replicas: int) -> None:
        """Set the replica count of a Watcher's deployment through its scale subresource.

        The count is written as an absolute value, so repeating the call is harmless.

        Args:
            watcher_id: The Watcher identifier.
            replicas: The number of replicas to set.

        Raises:
            NotFoundError: If the deployment does not exist.
            UpstreamFailure: If the API call fails.
        """
        name = self.resource_name(watcher_id)
        try:
            self.api.patch_namespaced_deployment_scale(
                name,
                self.namespace,
                {"spec": {"replicas": replicas}},
                field_manager=self.field_manager,
                _request_timeout=self.request_timeout,
            )
        except (ApiException, HTTPError) as e:
            self._raise_api_error(e, "scale", name)
        logger.debug(f"Scaled {self.RESOURCE_KIND} {self.namespace}/{name} to {replicas} replicas")

    def set_target_status(self, watcher_id: str, target: TargetState) -> None:
        """Record the declared intent of a Watcher on its deployment.

        Args:
            watcher_id: The Watcher identifier.
            target: The target state to declare.

        Raises:
            NotFoundError: If the deployment does not exist.
            UpstreamFailure: If the API call fails.
        """
        self.patch(watcher_id, {"metadata": {"labels": {TARGET_STATUS_LABEL: target.value}}})
        logger.debug(f"Set {TARGET_STATUS_LABEL}={target.value} on Watcher {watcher_id}")

    def set_containers(self, watcher_id: str, containers: list[dict]) -> client.V1Deployment:
        """Replace the container definitions of a Watcher's pod template.

        Replica count and labels are left untouched.

        Args:
            watcher_id: The Watcher identifier.
            containers: The container definitions to apply.

        Returns:
            The patched deployment.
        """
        return self.patch(watcher_id, {"spec": {"template": {"spec": {"containers": containers}}}})
