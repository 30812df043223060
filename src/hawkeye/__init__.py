__version__ = "0.1.0"
__description__ = (
    "Control plane managing the lifecycle of Hawkeye video Watcher workloads on Kubernetes"
)
