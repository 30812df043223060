"""Resources package for Kubernetes resource handlers.

This package contains specialized handlers for the resource kinds backing a Watcher.
"""

from hawkeye.kubernetes.resources.configmaps import ConfigMapResource
from hawkeye.kubernetes.resources.deployments import DeploymentResource
from hawkeye.kubernetes.resources.events import create_transition_event
from hawkeye.kubernetes.resources.pods import PodResource
from hawkeye.kubernetes.resources.services import ServiceResource

__all__ = [
    "ConfigMapResource",
    "DeploymentResource",
    "PodResource",
    "ServiceResource",
    "create_transition_event",
]
