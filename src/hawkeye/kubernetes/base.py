"""Base module for Kubernetes resources.

This module provides base classes for the Kubernetes resources backing a Watcher.
Every API call goes through these classes, which bound it with a timeout and
translate client errors into Hawkeye errors.
"""

import abc
import logging
from collections.abc import Iterator
from typing import Any, ClassVar, Generic, NoReturn, TypeVar

from kubernetes.client.exceptions import ApiException
from urllib3.exceptions import HTTPError

from hawkeye.errors import NotFoundError, UpstreamFailure
from hawkeye.kubernetes.connection import KubernetesConnection

logger = logging.getLogger(__name__)

# Type variable for resource types
T = TypeVar("T")


class KubernetesResource(Generic[T], abc.ABC):
    """Base class for all Kubernetes resources.

    This abstract base class defines the listing interface shared by every
    resource kind Hawkeye reads.
    """

    # Resource type specific constants
    RESOURCE_KIND: ClassVar[str]

    def __init__(self, connection: KubernetesConnection, namespace: str, request_timeout: int = 10):
        """Initialize the resource handler.

        Args:
            connection: The Kubernetes connection to use
            namespace: Namespace holding the Watcher resources.
            request_timeout: Timeout in seconds applied to every API call.
        """
        self.connection = connection
        self.namespace = namespace
        self.request_timeout = request_timeout

    def iter_resources(self, label_selector: str, batch_size: int = 100) -> Iterator[T]:
        """Iterate over all resources matching a label selector.

        Uses pagination to fetch resources in batches and yield them one by one
        to limit memory usage.

        Args:
            label_selector: Label selector the resources must match.
            batch_size: Number of resources to fetch per API call.

        Yields:
            Resources, one at a time.

        Raises:
            UpstreamFailure: If a page cannot be fetched.
        """
        continue_token = None

        while True:
            try:
                result = self.list_namespaced_resources(
                    self.namespace,
                    label_selector=label_selector,
                    limit=batch_size,
                    _continue=continue_token,
                    _request_timeout=self.request_timeout,
                )
            except (ApiException, HTTPError) as e:
                self._raise_api_error(e, "list", label_selector)

            # Yield resources from this page one by one
            yield from result.items

            # Check if there are more pages to process
            continue_token = result.metadata._continue
            if not continue_token:
                break

    def list_resources(self, label_selector: str) -> list[T]:
        """List all resources matching a label selector."""
        return list(self.iter_resources(label_selector))

    @abc.abstractmethod
    def list_namespaced_resources(self, namespace: str, **kwargs) -> Any:
        """List resources in a specific namespace.

        Args:
            namespace: The namespace to list resources in.
            **kwargs: Additional arguments to pass to the API call.

        Returns:
            The API response containing the list of resources.
        """
        pass

    def _raise_api_error(self, error: Exception, action: str, name: str) -> NoReturn:
        """Translate a Kubernetes client error into a Hawkeye error.

        Args:
            error: The error raised by the Kubernetes client.
            action: The action that failed, used in messages.
            name: The resource name or selector involved.

        Raises:
            NotFoundError: If the API answered 404.
            UpstreamFailure: For every other failure.
        """
        if isinstance(error, ApiException) and error.status == 404:
            raise NotFoundError(f"{self.RESOURCE_KIND} {name} not found") from error

        if isinstance(error, ApiException):
            detail = f"{error.status} {error.reason}"
        else:
            detail = str(error)
        logger.error(f"Error calling Kubernetes API to {action} {self.RESOURCE_KIND} {name}: {detail}")
        raise UpstreamFailure(f"Kubernetes API call to {action} {self.RESOURCE_KIND} {name} failed: {detail}") from error


class WatcherResource(KubernetesResource[T], Generic[T], abc.ABC):
    """Base class for resources named after a Watcher id.

    Each Watcher owns exactly one resource of each such kind, so every operation
    is keyed by the Watcher id alone.
    """

    def __init__(
        self,
        connection: KubernetesConnection,
        namespace: str,
        request_timeout: int = 10,
        field_manager: str = "hawkeye_api",
    ):
        """Initialize the resource handler.

        Args:
            connection: The Kubernetes connection to use
            namespace: Namespace holding the Watcher resources.
            request_timeout: Timeout in seconds applied to every API call.
            field_manager: Field manager name sent with create and patch calls.
        """
        super().__init__(connection, namespace, request_timeout)
        self.field_manager = field_manager

    @abc.abstractmethod
    def resource_name(self, watcher_id: str) -> str:
        """Get the name of the resource owned by a Watcher.

        Args:
            watcher_id: The Watcher identifier.

        Returns:
            The resource name.
        """
        pass

    @abc.abstractmethod
    def read_namespaced_resource(self, name: str, namespace: str, **kwargs) -> T:
        pass

    @abc.abstractmethod
    def create_namespaced_resource(self, namespace: str, body: dict, **kwargs) -> T:
        pass

    @abc.abstractmethod
    def patch_namespaced_resource(self, name: str, namespace: str, body: dict, **kwargs) -> T:
        pass

    @abc.abstractmethod
    def delete_namespaced_resource(self, name: str, namespace: str, **kwargs) -> Any:
        pass

    def get(self, watcher_id: str) -> T:
        """Get the resource owned by a Watcher.

        Args:
            watcher_id: The Watcher identifier.

        Returns:
            The resource object.

        Raises:
            NotFoundError: If the resource does not exist.
            UpstreamFailure: If the API call fails.
        """
        name = self.resource_name(watcher_id)
        try:
            return self.read_namespaced_resource(name, self.namespace, _request_timeout=self.request_timeout)
        except (ApiException, HTTPError) as e:
            self._raise_api_error(e, "read", name)

    def find(self, watcher_id: str) -> T | None:
        """Get the resource owned by a Watcher, or None if it does not exist."""
        try:
            return self.get(watcher_id)
        except NotFoundError:
            logger.debug(f"{self.RESOURCE_KIND} {self.resource_name(watcher_id)} not found")
            return None

    def create(self, watcher_id: str, body: dict) -> T | None:
        """Create the resource owned by a Watcher.

        A resource that already exists is left untouched, so a retried creation
        call is harmless.

        Args:
            watcher_id: The Watcher identifier.
            body: The resource definition.

        Returns:
            The created resource, or None if it already existed.

        Raises:
            UpstreamFailure: If the API call fails.
        """
        name = self.resource_name(watcher_id)
        logger.debug(f"Creating {self.RESOURCE_KIND} {self.namespace}/{name}")
        try:
            return self.create_namespaced_resource(
                self.namespace,
                body,
                field_manager=self.field_manager,
                _request_timeout=self.request_timeout,
            )
        except ApiException as e:
            if e.status == 409:
                logger.warning(f"{self.RESOURCE_KIND} {self.namespace}/{name} already exists")
                return None
            self._raise_api_error(e, "create", name)
        except HTTPError as e:
            self._raise_api_error(e, "create", name)

    def patch(self, watcher_id: str, body: dict) -> T:
        """Patch the resource owned by a Watcher with the given body.

        Args:
            watcher_id: The Watcher identifier.
            body: The patch body to apply.

        Returns:
            The patched resource.

        Raises:
            NotFoundError: If the resource does not exist.
            UpstreamFailure: If the API call fails.
        """
        name = self.resource_name(watcher_id)
        try:
            return self.patch_namespaced_resource(
                name,
                self.namespace,
                body,
                field_manager=self.field_manager,
                _request_timeout=self.request_timeout,
            )
        except (ApiException, HTTPError) as e:
            self._raise_api_error(e, "patch", name)

    def delete(self, watcher_id: str) -> bool:
        """Delete the resource owned by a Watcher.

        Args:
            watcher_id: The Watcher identifier.

        Returns:
            True if the resource was deleted, False if it did not exist.

        Raises:
            UpstreamFailure: If the API call fails for any other reason.
        """
        name = self.resource_name(watcher_id)
        try:
            self.delete_namespaced_resource(name, self.namespace, _request_timeout=self.request_timeout)
        except (ApiException, HTTPError) as e:
            if isinstance(e, ApiException) and e.status == 404:
                logger.debug(f"{self.RESOURCE_KIND} {self.namespace}/{name} already deleted")
                return False
            self._raise_api_error(e, "delete", name)
        logger.info(f"Deleted {self.RESOURCE_KIND} {self.namespace}/{name}")
        return True
