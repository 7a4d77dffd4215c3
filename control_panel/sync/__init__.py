"""Status synchronization package for dual-channel service monitoring."""

from .status_reconciler import DockerStatusReconciler, StatusListener

__all__ = ["DockerStatusReconciler", "StatusListener"]
