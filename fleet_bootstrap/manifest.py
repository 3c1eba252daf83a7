"""Representation of the objects that register the local cluster with Fleet.

Each object renders to a plain kubernetes document with `to_doc` so that it
can be handed to an apply engine or printed. Rendering is deterministic: the
same object always produces the same document with the same key order.
"""

import base64
import binascii
from dataclasses import dataclass, field
from typing import Any, ClassVar

import yaml
from mashumaro import DataClassDictMixin, field_options
from mashumaro.config import BaseConfig

from .exceptions import InputException

__all__ = [
    "NamedResource",
    "Namespace",
    "Secret",
    "Cluster",
    "ClusterSpec",
    "ClusterGroup",
    "ClusterGroupSpec",
    "LabelSelector",
    "GitRepo",
    "GitRepoSpec",
]


CORE_API_VERSION = "v1"
FLEET_API_VERSION = "fleet.cattle.io/v1alpha1"
NAMESPACE_KIND = "Namespace"
SECRET_KIND = "Secret"
CLUSTER_KIND = "Cluster"
CLUSTER_GROUP_KIND = "ClusterGroup"
GIT_REPO_KIND = "GitRepo"


@dataclass
class BaseManifest(DataClassDictMixin):
    """Base class for all manifest objects."""

    class Config(BaseConfig):
        omit_none = True
        serialize_by_alias = True


@dataclass(frozen=True, order=True)
class NamedResource:
    """Identifier for a kubernetes resource."""

    kind: str
    namespace: str | None
    name: str

    @property
    def namespaced_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name

    def __str__(self) -> str:
        """Return the kind and namespaced name concatenated as an id."""
        return f"{self.kind}/{self.namespaced_name}"


@dataclass(kw_only=True)
class BaseResource(BaseManifest):
    """A kubernetes object identified by kind, namespace and name."""

    kind: ClassVar[str]
    """The kind of the object."""

    api_version: ClassVar[str]
    """The apiVersion of the object."""

    name: str
    """The name of the object."""

    namespace: str | None = None
    """The namespace of the object, or None for cluster scoped objects."""

    labels: dict[str, str] | None = None
    """Labels on the object."""

    @property
    def resource_id(self) -> NamedResource:
        """Return the identity of the object."""
        return NamedResource(kind=self.kind, namespace=self.namespace, name=self.name)

    def to_doc(self) -> dict[str, Any]:
        """Render the object as a kubernetes document."""
        metadata: dict[str, Any] = {"name": self.name}
        if self.namespace:
            metadata["namespace"] = self.namespace
        if self.labels:
            metadata["labels"] = dict(sorted(self.labels.items()))
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": metadata,
            **self._content(),
        }

    def _content(self) -> dict[str, Any]:
        """Return the top level fields after metadata e.g. spec or data."""
        return {}

    def yaml(self) -> str:
        """Return a YAML string representation of the kubernetes document."""
        return yaml.dump(self.to_doc(), sort_keys=False, explicit_start=True)


@dataclass(kw_only=True)
class Namespace(BaseResource):
    """A Namespace holding the bootstrap objects."""

    kind: ClassVar[str] = NAMESPACE_KIND
    api_version: ClassVar[str] = CORE_API_VERSION


@dataclass(kw_only=True)
class Secret(BaseResource):
    """A Secret contains a small amount of sensitive data."""

    kind: ClassVar[str] = SECRET_KIND
    api_version: ClassVar[str] = CORE_API_VERSION

    data: dict[str, bytes] = field(default_factory=dict)
    """The raw (not base64 encoded) values stored in the Secret."""

    def _content(self) -> dict[str, Any]:
        return {
            "data": {
                key: base64.b64encode(value).decode("ascii")
                for key, value in self.data.items()
            }
        }

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "Secret":
        """Parse a Secret from a kubernetes document, decoding its data."""
        if doc.get("kind") != SECRET_KIND:
            raise InputException(f"Invalid object expected {SECRET_KIND}: {doc}")
        if not (metadata := doc.get("metadata")):
            raise InputException(f"Invalid {cls} missing metadata: {doc}")
        if not (name := metadata.get("name")):
            raise InputException(f"Invalid {cls} missing metadata.name: {doc}")
        data: dict[str, bytes] = {}
        for key, value in (doc.get("data") or {}).items():
            try:
                data[key] = base64.b64decode(value, validate=True)
            except (binascii.Error, TypeError) as err:
                raise InputException(
                    f"Invalid {cls} data.{key} is not base64 encoded"
                ) from err
        return cls(
            name=name,
            namespace=metadata.get("namespace"),
            labels=metadata.get("labels"),
            data=data,
        )


@dataclass
class ClusterSpec(BaseManifest):
    """Spec of a Fleet Cluster."""

    kube_config_secret: str | None = field(
        metadata=field_options(alias="kubeConfigSecret"), default=None
    )
    """Name of the Secret holding the kubeconfig for the cluster."""


@dataclass(kw_only=True)
class Cluster(BaseResource):
    """A Fleet Cluster is a downstream cluster that Fleet deploys to."""

    kind: ClassVar[str] = CLUSTER_KIND
    api_version: ClassVar[str] = FLEET_API_VERSION

    spec: ClusterSpec = field(default_factory=ClusterSpec)

    def _content(self) -> dict[str, Any]:
        return {"spec": self.spec.to_dict()}


@dataclass
class LabelSelector(BaseManifest):
    """A label query over a set of resources."""

    match_labels: dict[str, str] = field(
        metadata=field_options(alias="matchLabels"), default_factory=dict
    )
    """Labels that must all be present on a selected resource."""

    def matches(self, labels: dict[str, str] | None) -> bool:
        """Return True if the labels satisfy the selector."""
        labels = labels or {}
        return all(
            labels.get(key) == value for key, value in self.match_labels.items()
        )


@dataclass
class ClusterGroupSpec(BaseManifest):
    """Spec of a Fleet ClusterGroup."""

    selector: LabelSelector | None = None
    """Selects the Clusters in the group."""


@dataclass(kw_only=True)
class ClusterGroup(BaseResource):
    """A ClusterGroup is a named set of Clusters selected by label."""

    kind: ClassVar[str] = CLUSTER_GROUP_KIND
    api_version: ClassVar[str] = FLEET_API_VERSION

    spec: ClusterGroupSpec = field(default_factory=ClusterGroupSpec)

    def _content(self) -> dict[str, Any]:
        return {"spec": self.spec.to_dict()}


@dataclass
class GitRepoSpec(BaseManifest):
    """Spec of a Fleet GitRepo."""

    repo: str
    """The URL of the git repository."""

    branch: str | None = None
    """The git branch to watch."""

    client_secret_name: str | None = field(
        metadata=field_options(alias="clientSecretName"), default=None
    )
    """Name of the Secret holding the git client credentials."""

    bundle_dirs: list[str] = field(
        metadata=field_options(alias="bundleDirs"), default_factory=list
    )
    """Directories in the repository that contain bundles."""


@dataclass(kw_only=True)
class GitRepo(BaseResource):
    """A GitRepo points Fleet at a git repository of bundles to deploy."""

    kind: ClassVar[str] = GIT_REPO_KIND
    api_version: ClassVar[str] = FLEET_API_VERSION

    spec: GitRepoSpec

    def _content(self) -> dict[str, Any]:
        return {"spec": self.spec.to_dict()}
