"""Resource definitions for Watchers.

Every Watcher is backed by a ConfigMap, a Deployment and a Service whose
names are derived from the Watcher id, so no lookup table is ever needed.
"""

from hawkeye.config import LEGACY_WORKER_HTTP_PORT
from hawkeye.status import TARGET_STATUS_LABEL, TargetState

APP_LABEL = "hawkeye"
WATCHER_ID_LABEL = "watcher_id"
# Key holding the serialized Watcher in the ConfigMap
WATCHER_RECORD_KEY = "watcher.json"
# Selector matching every resource owned by a Watcher
DISCOVERY_SELECTOR = f"app={APP_LABEL},{WATCHER_ID_LABEL}"

CONTAINER_NAME = "hawkeye-worker"
CONFIG_MOUNT_PATH = "/config"


def configmap_name(watcher_id: str) -> str:
    return f"watcher-{watcher_id}-config"


def deployment_name(watcher_id: str) -> str:
    return f"watcher-{watcher_id}"


def service_name(watcher_id: str) -> str:
    return f"watcher-{watcher_id}-svc"


def watcher_selector(watcher_id: str) -> str:
    """Label selector matching the resources, and pods, of a single Watcher."""
    return f"app={APP_LABEL},{WATCHER_ID_LABEL}={watcher_id}"


def watcher_labels(watcher_id: str, tags: dict[str, str] | None = None) -> dict[str, str]:
    """Build the labels shared by every resource of a Watcher.

    Tags never override the identifying labels.
    """
    labels = dict(tags or {})
    labels.update({"app": APP_LABEL, WATCHER_ID_LABEL: watcher_id})
    return labels


def build_configmap(watcher_id: str, record: str, tags: dict[str, str] | None = None) -> dict:
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {
            "name": configmap_name(watcher_id),
            "labels": watcher_labels(watcher_id, tags),
        },
        "data": {WATCHER_RECORD_KEY: record},
    }


def container_spec(watcher_id: str, ingest_port: int, image: str) -> dict:
    """Build the worker container definition of a Watcher.

    This is the only part of the Deployment an upgrade replaces.
    """
    return {
        "name": CONTAINER_NAME,
        "image": image,
        "imagePullPolicy": "IfNotPresent",
        "args": [f"{CONFIG_MOUNT_PATH}/{WATCHER_RECORD_KEY}"],
        "ports": [
            {"name": "ingest", "containerPort": ingest_port, "protocol": "UDP"},
            {"name": "http", "containerPort": LEGACY_WORKER_HTTP_PORT, "protocol": "TCP"},
        ],
        "volumeMounts": [{"name": "config", "mountPath": CONFIG_MOUNT_PATH, "readOnly": True}],
        "env": [{"name": "WATCHER_ID", "value": watcher_id}],
    }


def build_deployment(
    watcher_id: str, ingest_port: int, image: str, tags: dict[str, str] | None = None
) -> dict:
    """Build the Deployment of a Watcher.

    Watchers are created stopped: zero replicas and a Ready target status.
    """
    labels = watcher_labels(watcher_id, tags)
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {
            "name": deployment_name(watcher_id),
            "labels": {**labels, TARGET_STATUS_LABEL: TargetState.READY.value},
        },
        "spec": {
            "replicas": 0,
            "selector": {"matchLabels": {"app": APP_LABEL, WATCHER_ID_LABEL: watcher_id}},
            "template": {
                "metadata": {"labels": labels},
                "spec": {
                    "containers": [container_spec(watcher_id, ingest_port, image)],
                    "volumes": [
                        {"name": "config", "configMap": {"name": configmap_name(watcher_id)}},
                    ],
                },
            },
        },
    }


def build_service(watcher_id: str, ingest_port: int, tags: dict[str, str] | None = None) -> dict:
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {
            "name": service_name(watcher_id),
            "labels": watcher_labels(watcher_id, tags),
        },
        "spec": {
            "type": "LoadBalancer",
            "selector": {"app": APP_LABEL, WATCHER_ID_LABEL: watcher_id},
            "ports": [
                {"name": "ingest", "port": ingest_port, "targetPort": ingest_port, "protocol": "UDP"},
            ],
        },
    }


def replace_list(items: list[dict]) -> list[dict]:
    """Mark a list so a strategic merge patch replaces it instead of merging it by key."""
    return [*items, {"$patch": "replace"}]


def build_deployment_patch(
    watcher_id: str, ingest_port: int, image: str, tags: dict[str, str] | None = None
) -> dict:
    """Build the patch bringing an existing Deployment in line with a Watcher record.

    Containers are replaced as a whole so a changed ingest port does not
    leave the previous one declared.
    """
    body = build_deployment(watcher_id, ingest_port, image, tags)
    pod_spec = body["spec"]["template"]["spec"]
    pod_spec["containers"] = replace_list(pod_spec["containers"])
    return body


def build_service_patch(watcher_id: str, ingest_port: int, tags: dict[str, str] | None = None) -> dict:
    body = build_service(watcher_id, ingest_port, tags)
    body["spec"]["ports"] = replace_list(body["spec"]["ports"])
    return body
