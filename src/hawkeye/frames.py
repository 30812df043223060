"""Frame proxy module.

Fetches the latest video frame captured by a running Watcher straight from
its pod.
"""

import logging

import httpx

from hawkeye.errors import FrameUnavailableError, NotAcceptableError, NotFoundError
from hawkeye.kubernetes.controller import WatcherController
from hawkeye.models import Status
from hawkeye.status import workload_status

logger = logging.getLogger(__name__)

FRAME_PATH = "/latest_frame"
FRAME_CONTENT_TYPE = "image/png"


class FrameProxy:
    """Forwards latest-frame requests to Watcher pods."""

    def __init__(self, controller: WatcherController, timeout_s: float = 5.0, legacy_port: int = 3030):
        """Initialize the proxy.

        Args:
            controller: The controller whose resource handlers are used for reads.
            timeout_s: Timeout in seconds for each call made to a pod.
            legacy_port: Port older workers serve frames on, tried after the ingest port.
        """
        self.config_maps = controller.config_maps
        self.deployments = controller.deployments
        self.pods = controller.pods
        self.timeout_s = timeout_s
        self.legacy_port = legacy_port

    def latest_frame(self, watcher_id: str) -> bytes:
        """Get the latest frame captured by a running Watcher.

        The pod is called on the Watcher's ingest port first, then on the
        legacy port. A transport error ends the attempt immediately.

        Args:
            watcher_id: The Watcher identifier.

        Returns:
            The PNG encoded frame.

        Raises:
            NotFoundError: If the Watcher's ConfigMap or Deployment does not exist.
            NotAcceptableError: If the Watcher is not running.
            FrameUnavailableError: If the pod cannot be reached or returns no frame.
        """
        config_map = self.config_maps.find(watcher_id)
        if config_map is None:
            logger.debug(f"ConfigMap object not found for this watcher: {watcher_id}")
            raise NotFoundError(f"Watcher {watcher_id} not found")
        watcher = self.config_maps.load_watcher(config_map)

        deployment = self.deployments.find(watcher_id)
        if deployment is None:
            raise NotFoundError(f"Watcher {watcher_id} not found")
        if workload_status(deployment) != Status.RUNNING:
            logger.debug(f"Watcher {watcher_id} is not running")
            raise NotAcceptableError(f"Watcher {watcher_id} is not running")

        pod_ip = self.pods.pod_ip(self.pods.first_pod(watcher_id))
        if not pod_ip:
            logger.debug(f"Not able to get Pod IP for Watcher {watcher_id}")
            raise FrameUnavailableError(f"Watcher {watcher_id} has no reachable pod")

        ports = [watcher.source.ingest_port]
        if self.legacy_port not in ports:
            ports.append(self.legacy_port)
        try:
            # IPv6 hosts are bracketed by httpx
            urls = [httpx.URL(scheme="http", host=pod_ip, port=port, path=FRAME_PATH) for port in ports]
        except httpx.InvalidURL as e:
            logger.error(f"Invalid Pod IP {pod_ip!r} for Watcher {watcher_id}: {e}")
            raise FrameUnavailableError(f"Watcher {watcher_id} has no reachable pod") from e

        with httpx.Client(timeout=self.timeout_s, follow_redirects=False) as client:
            for url in urls:
                logger.info(f"Calling Pod using url: {url}")
                try:
                    resp = client.get(url)
                except httpx.HTTPError as e:
                    logger.error(f"Could not call {url} endpoint: {e}")
                    raise FrameUnavailableError(f"Could not call Watcher {watcher_id} pod") from e
                if resp.is_success:
                    return resp.content
                logger.debug(f"Pod answered HTTP {resp.status_code} on {url}")

        logger.error(f"Error calling Pod of Watcher {watcher_id} using old and new urls")
        raise FrameUnavailableError(f"Watcher {watcher_id} pod did not return a frame")
