"""
fleet-bootstrap registers the local cluster with Fleet so that it manages itself.

On every configuration change the bootstrap handler reads the local kubeconfig,
builds a fixed set of objects (Namespace, kubeconfig Secret, Cluster,
ClusterGroup and an optional GitRepo) and applies them under a single owner
so that stale objects are pruned.
"""

__all__ = [
    "apply",
    "builder",
    "config",
    "connection",
    "exceptions",
    "handler",
    "kubeconfig",
    "manifest",
    "source",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
