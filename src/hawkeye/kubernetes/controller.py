"""Kubernetes controller module.

This module provides the controller driving the lifecycle of Watchers. Every
guarded operation first derives the Watcher's current status from its
Deployment, then acts according to a fixed decision table.
"""

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum

from hawkeye import templates
from hawkeye.config import HawkeyeConfig
from hawkeye.errors import (
    ConflictError,
    InvalidRequestError,
    NotAcceptableError,
    NotFoundError,
    UpstreamFailure,
)
from hawkeye.kubernetes.connection import KubernetesConnection
from hawkeye.kubernetes.resources.configmaps import ConfigMapResource
from hawkeye.kubernetes.resources.deployments import DeploymentResource
from hawkeye.kubernetes.resources.events import create_transition_event
from hawkeye.kubernetes.resources.pods import PodResource
from hawkeye.kubernetes.resources.services import ServiceResource
from hawkeye.models import Status, Watcher
from hawkeye.status import TargetState, workload_status

logger = logging.getLogger(__name__)


class TransitionOutcome(Enum):
    """Base class for the outcome of a guarded transition.

    Each member is a (message, status_code) pair. Rejections are answered
    without mutating anything.
    """

    def __init__(self, message: str, status_code: int):
        self.message = message
        self.status_code = status_code

    def raise_for_status(self) -> None:
        """Raise the error matching a rejected transition.

        Raises:
            NotFoundError: If the Watcher does not exist.
            ConflictError: If a previous transition has not settled.
            NotAcceptableError: If the Watcher is in the Error status.
        """
        error_class = _REJECTIONS.get(self.status_code)
        if error_class is not None:
            raise error_class(self.message)


_REJECTIONS = {404: NotFoundError, 409: ConflictError, 406: NotAcceptableError}


class WatcherStartStatus(TransitionOutcome):
    """Outcome of a request to start a Watcher."""
    ALREADY_RUNNING = ("Watcher is already running", 200)
    STARTING = ("Watcher is starting", 200)
    CURRENTLY_UPDATING = ("Watcher is currently updating", 409)
    IN_ERROR_STATE = ("Watcher in error state cannot be set to running", 406)
    NOT_FOUND = ("Watcher not found", 404)


class WatcherStopStatus(TransitionOutcome):
    """Outcome of a request to stop a Watcher."""
    ALREADY_STOPPED = ("Watcher is already stopped", 200)
    STOPPING = ("Watcher is stopping", 200)
    CURRENTLY_UPDATING = ("Watcher is currently updating", 409)
    IN_ERROR_STATE = ("Watcher in error state cannot be set to stopped", 406)
    NOT_FOUND = ("Watcher not found", 404)


@dataclass
class DeleteResult:
    """Per-resource outcome of a Watcher deletion.

    Attributes:
        watcher_id: The deleted Watcher.
        resources: Resource kind mapped to True if it was deleted, False if it was already absent.
    """
    watcher_id: str
    resources: dict[str, bool] = field(default_factory=dict)

    @property
    def deleted_any(self) -> bool:
        return any(self.resources.values())


def _worker_image(deployment) -> str | None:
    """Return the image of the worker container of a Deployment, if any."""
    pod_spec = deployment.spec.template.spec if deployment.spec and deployment.spec.template else None
    for container in (pod_spec.containers if pod_spec else None) or []:
        if container.name == templates.CONTAINER_NAME:
            return container.image
    return None


class WatcherController:
    """Controller for the lifecycle of Watchers.

    This class creates, upgrades and deletes the three resources backing each
    Watcher and guards the start and stop transitions. It holds no lock:
    every mutation it issues is an absolute overwrite, so concurrent requests
    on the same Watcher converge to the same end state.
    """

    def __init__(self, config: HawkeyeConfig, connection: KubernetesConnection | None = None):
        """Initialize the controller.

        Args:
            config: The Hawkeye configuration.
            connection: The Kubernetes connection to use. If None, a new one is created.
        """
        self.config = config
        self.connection = connection or KubernetesConnection()

        ns = config.namespace
        timeout = config.request_timeout
        self.config_maps = ConfigMapResource(self.connection, ns, timeout, config.field_manager)
        self.deployments = DeploymentResource(self.connection, ns, timeout, config.field_manager)
        self.services = ServiceResource(self.connection, ns, timeout, config.field_manager)
        self.pods = PodResource(self.connection, ns, timeout)

    def get_status(self, watcher_id: str) -> Status | None:
        """Derive the current status of a Watcher.

        Args:
            watcher_id: The Watcher identifier.

        Returns:
            The derived status, or None if the Watcher's Deployment does not exist.
        """
        deployment = self.deployments.find(watcher_id)
        if deployment is None:
            return None
        return workload_status(deployment)

    def start(self, watcher_id: str) -> WatcherStartStatus:
        """Start a Watcher by scaling its Deployment to one replica.

        Args:
            watcher_id: The Watcher identifier.

        Returns:
            The outcome of the request.

        Raises:
            UpstreamFailure: If a Kubernetes API call fails.
        """
        logger.debug(f"Starting Watcher {watcher_id}")
        deployment = self.deployments.find(watcher_id)
        if deployment is None:
            return WatcherStartStatus.NOT_FOUND

        status = workload_status(deployment)
        if status == Status.RUNNING:
            return WatcherStartStatus.ALREADY_RUNNING
        if status == Status.PENDING:
            return WatcherStartStatus.CURRENTLY_UPDATING
        if status == Status.ERROR:
            return WatcherStartStatus.IN_ERROR_STATE

        self.deployments.set_replicas(watcher_id, 1)
        self.deployments.set_target_status(watcher_id, TargetState.RUNNING)
        create_transition_event(
            self.connection, deployment, TargetState.RUNNING, request_timeout=self.config.request_timeout
        )
        logger.info(f"Watcher {watcher_id} is starting")
        return WatcherStartStatus.STARTING

    def stop(self, watcher_id: str) -> WatcherStopStatus:
        """Stop a Watcher by scaling its Deployment to zero replicas.

        Args:
            watcher_id: The Watcher identifier.

        Returns:
            The outcome of the request.

        Raises:
            UpstreamFailure: If a Kubernetes API call fails.
        """
        logger.debug(f"Stopping Watcher {watcher_id}")
        deployment = self.deployments.find(watcher_id)
        if deployment is None:
            return WatcherStopStatus.NOT_FOUND

        status = workload_status(deployment)
        if status == Status.READY:
            return WatcherStopStatus.ALREADY_STOPPED
        if status == Status.PENDING:
            return WatcherStopStatus.CURRENTLY_UPDATING
        if status == Status.ERROR:
            return WatcherStopStatus.IN_ERROR_STATE

        self.deployments.set_replicas(watcher_id, 0)
        self.deployments.set_target_status(watcher_id, TargetState.READY)
        create_transition_event(
            self.connection, deployment, TargetState.READY, request_timeout=self.config.request_timeout
        )
        logger.info(f"Watcher {watcher_id} is stopping")
        return WatcherStopStatus.STOPPING

    def create(self, watcher: Watcher) -> Watcher:
        """Provision a new Watcher.

        The ConfigMap, Deployment and Service are created in that order. A
        failure half-way leaves the earlier resources in place.

        Args:
            watcher: The requested Watcher. Its id and derived fields are ignored.

        Returns:
            The created Watcher, in the Pending status.

        Raises:
            UpstreamFailure: If a Kubernetes API call fails.
        """
        watcher = watcher.model_copy(deep=True)
        watcher.id = str(uuid.uuid4())
        watcher.status = None
        watcher.status_description = None
        watcher.source.ingest_ip = None
        logger.debug(f"Creating Watcher {watcher.id}: {watcher.to_record()}")

        port = watcher.source.ingest_port
        self.config_maps.create(
            watcher.id, templates.build_configmap(watcher.id, watcher.to_record(), watcher.tags)
        )
        self.deployments.create(
            watcher.id,
            templates.build_deployment(watcher.id, port, self.config.worker_image, watcher.tags),
        )
        self.services.create(watcher.id, templates.build_service(watcher.id, port, watcher.tags))
        logger.info(f"Created Watcher {watcher.id} with ingest port {port}")

        watcher.status = Status.PENDING
        return watcher

    def upgrade(self, watcher_id: str, image: str | None = None) -> Watcher:
        """Replace the worker container definition of a stopped Watcher.

        Args:
            watcher_id: The Watcher identifier.
            image: Worker image to use. If None, use the configured worker image.

        Returns:
            The upgraded Watcher.

        Raises:
            NotFoundError: If the Watcher's Deployment or ConfigMap does not exist.
            InvalidRequestError: If the Watcher is not in the Ready status.
            UpstreamFailure: If a Kubernetes API call fails.
        """
        logger.debug(f"Upgrading Watcher {watcher_id}")
        deployment = self.deployments.find(watcher_id)
        config_map = self.config_maps.find(watcher_id)
        if deployment is None or config_map is None:
            raise NotFoundError(f"Watcher {watcher_id} not found")

        watcher = self.config_maps.load_watcher(config_map)
        status = workload_status(deployment)
        if status != Status.READY:
            raise InvalidRequestError("The Watcher must be stopped before the upgrade can be applied")

        container = templates.container_spec(
            watcher_id, watcher.source.ingest_port, image or self.config.worker_image
        )
        self.deployments.set_containers(watcher_id, [container])
        logger.info(f"Upgraded Watcher {watcher_id} to image {container['image']}")

        watcher.status = status
        return watcher

    def update(self, watcher_id: str, watcher: Watcher) -> Watcher:
        """Rewrite the record, Deployment and Service of a stopped Watcher.

        The worker image currently deployed is kept. Labels of tags that were
        removed stay on the resources, since patches only add or overwrite.

        Args:
            watcher_id: The Watcher identifier.
            watcher: The new definition. Its id and derived fields are ignored.

        Returns:
            The updated Watcher, in the Ready status.

        Raises:
            NotFoundError: If the Watcher's Deployment or ConfigMap does not exist.
            InvalidRequestError: If the Watcher is not in the Ready status.
            UpstreamFailure: If a Kubernetes API call fails.
        """
        logger.debug(f"Updating Watcher {watcher_id}")
        deployment = self.deployments.find(watcher_id)
        config_map = self.config_maps.find(watcher_id)
        if deployment is None or config_map is None:
            raise NotFoundError(f"Watcher {watcher_id} not found")

        status = workload_status(deployment)
        if status != Status.READY:
            raise InvalidRequestError("The Watcher must be stopped before it can be updated")

        watcher = watcher.model_copy(deep=True)
        watcher.id = watcher_id
        watcher.status = None
        watcher.status_description = None
        watcher.source.ingest_ip = None

        port = watcher.source.ingest_port
        image = _worker_image(deployment) or self.config.worker_image
        self.config_maps.patch(
            watcher_id, templates.build_configmap(watcher_id, watcher.to_record(), watcher.tags)
        )
        self.deployments.patch(
            watcher_id, templates.build_deployment_patch(watcher_id, port, image, watcher.tags)
        )
        self.services.patch(watcher_id, templates.build_service_patch(watcher_id, port, watcher.tags))
        logger.info(f"Updated Watcher {watcher_id} with ingest port {port}")

        watcher.status = status
        return watcher

    def delete(self, watcher_id: str) -> DeleteResult:
        """Delete the three resources backing a Watcher.

        Every deletion is attempted even if an earlier one fails.

        Args:
            watcher_id: The Watcher identifier.

        Returns:
            The per-resource outcome.

        Raises:
            NotFoundError: If none of the resources existed.
            UpstreamFailure: If any deletion failed for a reason other than absence.
        """
        logger.debug(f"Deleting Watcher {watcher_id}")
        result = DeleteResult(watcher_id=watcher_id)
        failures = []

        for handler in (self.deployments, self.config_maps, self.services):
            try:
                result.resources[handler.RESOURCE_KIND] = handler.delete(watcher_id)
            except UpstreamFailure as e:
                failures.append(e.message)

        if failures:
            raise UpstreamFailure(f"Watcher {watcher_id} was not fully deleted: {'; '.join(failures)}")
        if not result.deleted_any:
            raise NotFoundError(f"Watcher {watcher_id} does not exist")

        logger.info(f"Deleted Watcher {watcher_id}")
        return result
