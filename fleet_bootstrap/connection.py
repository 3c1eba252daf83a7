"""Extracts the details needed for the local cluster to connect to itself.

The connection is derived from the cluster entry of the current context. When
the current context does not name a known cluster the first cluster in name
order is used, so the choice does not depend on the order of the kubeconfig.
"""

from dataclasses import dataclass
import logging

import aiofiles

from .exceptions import CAReadError, NoClusterConfigured
from .kubeconfig import KubeCluster, KubeConfig

__all__ = [
    "Connection",
    "extract_connection",
]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Connection:
    """Connection details for the API server of the local cluster."""

    server: str
    """The URL of the API server."""

    ca: bytes
    """PEM encoded CA certificates for the API server."""

    value: bytes
    """The serialized kubeconfig."""


def resolve_cluster(kubeconfig: KubeConfig) -> tuple[str, KubeCluster]:
    """Return the name and entry of the cluster to connect to."""
    if not kubeconfig.clusters:
        raise NoClusterConfigured("The kubeconfig does not contain any clusters")
    if (current := kubeconfig.current_context) is not None:
        cluster_name = kubeconfig.contexts.get(current, current)
        if (cluster := kubeconfig.clusters.get(cluster_name)) is not None:
            return cluster_name, cluster
    cluster_name = sorted(kubeconfig.clusters)[0]
    _LOGGER.debug(
        "Current context %s does not match a cluster, using cluster %s",
        kubeconfig.current_context,
        cluster_name,
    )
    return cluster_name, kubeconfig.clusters[cluster_name]


async def read_ca(cluster_name: str, cluster: KubeCluster) -> bytes:
    """Return the CA certificates for the cluster.

    Inline certificate data is preferred over the certificate file.
    """
    if cluster.certificate_authority_data:
        return cluster.certificate_authority_data
    if not cluster.certificate_authority:
        raise CAReadError(
            cluster_name,
            "certificate-authority-data and certificate-authority are unset",
        )
    try:
        async with aiofiles.open(cluster.certificate_authority, mode="rb") as ca_file:
            ca = await ca_file.read()
    except OSError as err:
        raise CAReadError(cluster_name, str(err)) from err
    if not ca:
        raise CAReadError(
            cluster_name,
            f"certificate-authority {cluster.certificate_authority} is empty",
        )
    return ca


async def extract_connection(kubeconfig: KubeConfig) -> Connection:
    """Return the connection details for the local cluster."""
    cluster_name, cluster = resolve_cluster(kubeconfig)
    _LOGGER.debug("Extracting connection for cluster %s", cluster_name)
    value = kubeconfig.serialize()
    ca = await read_ca(cluster_name, cluster)
    return Connection(server=cluster.server, ca=ca, value=value)
