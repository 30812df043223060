"""Watcher registry module.

This module answers read requests: it lists Watchers and describes a single
Watcher by correlating its ConfigMap, Deployment, pods and Service.
"""

import logging

from hawkeye import templates
from hawkeye.errors import IntegrityViolation, NotFoundError, UpstreamFailure
from hawkeye.kubernetes.controller import WatcherController
from hawkeye.models import Status, Watcher
from hawkeye.status import workload_status

logger = logging.getLogger(__name__)


class WatcherRegistry:
    """Read path over the Watchers stored in the cluster.

    ConfigMaps enumerate which Watchers exist; Deployments only contribute
    their status. Nothing is cached, every call reads the cluster again.
    """

    def __init__(self, controller: WatcherController):
        """Initialize the registry.

        Args:
            controller: The controller whose resource handlers are used for reads.
        """
        self.config_maps = controller.config_maps
        self.deployments = controller.deployments
        self.services = controller.services
        self.pods = controller.pods

    def list(self) -> list[Watcher]:
        """List every Watcher with its derived status.

        The Deployment and ConfigMap listings are two independent reads, so a
        Watcher created or deleted in between may briefly show as Error.

        Returns:
            The Watchers, without ingest address.

        Raises:
            UpstreamFailure: If a listing fails.
        """
        statuses: dict[str, Status] = {}
        for deployment in self.deployments.iter_resources(templates.DISCOVERY_SELECTOR):
            watcher_id = (deployment.metadata.labels or {}).get(templates.WATCHER_ID_LABEL)
            if watcher_id:
                statuses[watcher_id] = workload_status(deployment)

        watchers = []
        for config_map in self.config_maps.iter_resources(templates.DISCOVERY_SELECTOR):
            try:
                watcher = self.config_maps.load_watcher(config_map)
            except IntegrityViolation as e:
                logger.error(f"Skipping ConfigMap {config_map.metadata.name}: {e.message}")
                continue
            watcher.status = statuses.get(watcher.id, Status.ERROR)
            watchers.append(watcher)

        logger.debug(f"Listed {len(watchers)} Watchers")
        return watchers

    def get(self, watcher_id: str) -> Watcher:
        """Describe a single Watcher.

        A Pending Watcher gets the waiting reason of its pod as status
        description. A Watcher not in the Error status gets the address of its
        Service as ingest address. Both are best effort.

        Args:
            watcher_id: The Watcher identifier.

        Returns:
            The Watcher with its derived fields.

        Raises:
            NotFoundError: If the Watcher's Deployment or ConfigMap does not exist.
            IntegrityViolation: If the stored record cannot be decoded.
            UpstreamFailure: If a Kubernetes API call fails.
        """
        deployment = self.deployments.find(watcher_id)
        config_map = self.config_maps.find(watcher_id)
        if deployment is None or config_map is None:
            raise NotFoundError(f"Watcher {watcher_id} not found")

        watcher = self.config_maps.load_watcher(config_map)
        watcher.status = workload_status(deployment)

        if watcher.status == Status.PENDING:
            watcher.status_description = self._pending_reason(watcher_id)

        if watcher.status != Status.ERROR:
            logger.debug(f"Getting ingest address of Watcher {watcher_id} from its Service")
            watcher.source.ingest_ip = self.services.ingress_address(self.services.find(watcher_id))

        return watcher

    def _pending_reason(self, watcher_id: str) -> str | None:
        """Get the reason the pod of a Pending Watcher is waiting, if any."""
        try:
            pod = self.pods.first_pod(watcher_id)
        except UpstreamFailure as e:
            logger.warning(f"Could not look up pods of Watcher {watcher_id}: {e.message}")
            return None
        reason = self.pods.waiting_message(pod)
        logger.debug(f"Additional information for the Pending status of Watcher {watcher_id}: {reason}")
        return reason
