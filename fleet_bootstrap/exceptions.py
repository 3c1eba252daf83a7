"""Exceptions related to fleet-bootstrap."""

__all__ = [
    "FleetException",
    "InputException",
    "KubeConfigException",
    "NoClusterConfigured",
    "CAReadError",
    "ConfigSerializationError",
    "ApplyFailure",
]


class FleetException(Exception):
    """Generic base exception used for this library."""


class InputException(FleetException):
    """Raised when the input files or values are not formatted as expected."""


class KubeConfigException(FleetException):
    """Raised when connection details can't be extracted from a kubeconfig."""


class NoClusterConfigured(KubeConfigException):
    """Raised when the kubeconfig does not contain any cluster entries."""


class CAReadError(KubeConfigException):
    """Raised when neither inline CA data nor a readable CA file is available."""

    def __init__(self, cluster_name: str, message: str) -> None:
        super().__init__(f"Cluster {cluster_name} has no usable CA: {message}")
        self.cluster_name = cluster_name
        self.message = message


class ConfigSerializationError(KubeConfigException):
    """Raised when the kubeconfig can't be serialized for storage."""


class ApplyFailure(FleetException):
    """Raised when the apply engine fails to apply the desired objects."""

    def __init__(self, owner: str, message: str) -> None:
        super().__init__(f"Apply for owner {owner} failed: {message}")
        self.owner = owner
        self.message = message
