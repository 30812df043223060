"""Kubernetes connection management.

This module handles the connection to the Kubernetes API.
"""
import logging
import socket

from kubernetes import client, config
from kubernetes.config.config_exception import ConfigException

logger = logging.getLogger(__name__)


class KubernetesConnection:
    """Connection to the Kubernetes API shared by every resource handler.

    All API groups go through a single ApiClient, so they share one connection
    pool and one set of credentials.

    Attributes:
        api_client: The underlying API client.
        apps_v1_api: Client for Deployments and their scale subresource.
        core_v1_api: Client for ConfigMaps, Services and pods.
        events_v1_api: Client for events.k8s.io/v1 Events.
        version_api: Client for the API server version, used as a liveness probe.
        hostname: Name of this host, reported as the event reporting instance.
    """

    def __init__(self, api_client: client.ApiClient | None = None):
        """Initialize the Kubernetes connection.

        Args:
            api_client: A preconfigured API client. If None, configuration is
                loaded from the pod's service account, or from the local
                kubeconfig when not running in a cluster.

        Raises:
            RuntimeError: If no configuration can be loaded.
        """
        if api_client is None:
            source = self._load_configuration()
            api_client = client.ApiClient()
            logger.info(f"Connected to Kubernetes API at {api_client.configuration.host} using {source}")

        self.api_client = api_client
        self.apps_v1_api = client.AppsV1Api(api_client)
        self.core_v1_api = client.CoreV1Api(api_client)
        self.events_v1_api = client.EventsV1Api(api_client)
        self.version_api = client.VersionApi(api_client)
        self.hostname = socket.gethostname()

    @staticmethod
    def _load_configuration() -> str:
        """Load the default client configuration.

        Returns:
            The configuration source that was used.
        """
        try:
            config.load_incluster_config()
            return "in-cluster configuration"
        except ConfigException:
            logger.debug("No in-cluster configuration, falling back to kubeconfig")

        try:
            config.load_kube_config()
        except ConfigException as e:
            logger.error(
                "Failed to load Kubernetes configuration. Ensure that the kubeconfig file is available and valid."
            )
            raise RuntimeError("Kubernetes configuration error: kubeconfig file is missing or invalid.") from e
        return "kubeconfig"
