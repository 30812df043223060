"""Kubernetes client module for Hawkeye.

This module handles all interactions with the Kubernetes API.
"""

from hawkeye.kubernetes.controller import (
    DeleteResult,
    WatcherController,
    WatcherStartStatus,
    WatcherStopStatus,
)

# Export WatcherController as the main interface
__all__ = [
    "DeleteResult",
    "WatcherController",
    "WatcherStartStatus",
    "WatcherStopStatus",
]
