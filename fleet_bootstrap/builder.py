"""Builds the objects that register the local cluster with Fleet.

The objects are a pure function of the bootstrap configuration and the
connection, so building twice from the same inputs produces identical
objects and applying them again is a no-op.
"""

import re

from .config import BootstrapConfig
from .connection import Connection
from .manifest import (
    BaseResource,
    Cluster,
    ClusterGroup,
    ClusterGroupSpec,
    ClusterSpec,
    GitRepo,
    GitRepoSpec,
    LabelSelector,
    Namespace,
    Secret,
)

__all__ = [
    "build_objects",
    "split_bundle_dirs",
]

LOCAL_CLUSTER_NAME = "local"
LOCAL_CLUSTER_LABELS = {"name": LOCAL_CLUSTER_NAME}
KUBECONFIG_SECRET_NAME = "local-cluster"
DEFAULT_CLUSTER_GROUP_NAME = "default"
BOOTSTRAP_REPO_NAME = "bootstrap"

# Keys read back by the agent when it connects to the local cluster
SECRET_VALUE_KEY = "value"
SECRET_API_SERVER_URL_KEY = "apiServerURL"
SECRET_API_SERVER_CA_KEY = "apiServerCA"

_DIRS_SPLITTER = re.compile(r"\s*,\s*")


def split_bundle_dirs(dirs: str) -> list[str]:
    """Split a comma separated list of directories.

    Whitespace around each entry is removed. An empty string produces a single
    empty entry.
    """
    return _DIRS_SPLITTER.split(dirs.strip())


def _kubeconfig_secret(namespace: str, connection: Connection) -> Secret:
    return Secret(
        name=KUBECONFIG_SECRET_NAME,
        namespace=namespace,
        data={
            SECRET_VALUE_KEY: connection.value,
            SECRET_API_SERVER_URL_KEY: connection.server.encode("utf-8"),
            SECRET_API_SERVER_CA_KEY: connection.ca,
        },
    )


def _bootstrap_repo(config: BootstrapConfig) -> GitRepo:
    return GitRepo(
        name=BOOTSTRAP_REPO_NAME,
        namespace=config.namespace,
        spec=GitRepoSpec(
            repo=config.repo,
            branch=config.branch or None,
            client_secret_name=config.secret or None,
            bundle_dirs=split_bundle_dirs(config.dirs),
        ),
    )


def build_objects(
    config: BootstrapConfig, connection: Connection
) -> list[BaseResource]:
    """Return the complete set of objects for the local cluster.

    An empty list is returned when bootstrapping is disabled.
    """
    if not config.enabled:
        return []
    secret = _kubeconfig_secret(config.namespace, connection)
    base: tuple[BaseResource, ...] = (
        Namespace(name=config.namespace),
        secret,
        Cluster(
            name=LOCAL_CLUSTER_NAME,
            namespace=config.namespace,
            labels=dict(LOCAL_CLUSTER_LABELS),
            spec=ClusterSpec(kube_config_secret=secret.name),
        ),
        ClusterGroup(
            name=DEFAULT_CLUSTER_GROUP_NAME,
            namespace=config.namespace,
            spec=ClusterGroupSpec(
                selector=LabelSelector(match_labels=dict(LOCAL_CLUSTER_LABELS))
            ),
        ),
    )
    repo: tuple[BaseResource, ...] = (
        (_bootstrap_repo(config),) if config.repo else ()
    )
    return [*base, *repo]
