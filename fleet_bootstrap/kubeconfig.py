"""Library for reading a kubeconfig used to connect to the local cluster.

A `KubeConfig` keeps the verbatim document it was parsed from so that it can
be serialized and stored unchanged, along with a typed view of the cluster and
context entries needed to find the API server and its CA.

A `KubeConfigLoader` is the long lived handle used to read the current
kubeconfig. It may be called any number of times.
"""

from abc import ABC, abstractmethod
import base64
import binascii
from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Any

import aiofiles
import yaml
from mashumaro import DataClassDictMixin, field_options

from .exceptions import ConfigSerializationError, InputException

__all__ = [
    "KubeCluster",
    "KubeConfig",
    "KubeConfigLoader",
    "FileKubeConfigLoader",
    "StaticKubeConfigLoader",
]

_LOGGER = logging.getLogger(__name__)


@dataclass
class _ClusterEntry(DataClassDictMixin):
    """The `cluster` field of an entry in the kubeconfig `clusters` list."""

    server: str = ""
    certificate_authority_data: str | None = field(
        metadata=field_options(alias="certificate-authority-data"), default=None
    )
    certificate_authority: str | None = field(
        metadata=field_options(alias="certificate-authority"), default=None
    )


@dataclass
class KubeCluster:
    """Connection details for a single cluster in a kubeconfig."""

    server: str
    """The URL of the API server."""

    certificate_authority_data: bytes | None = None
    """Inline PEM encoded CA certificates (decoded)."""

    certificate_authority: str | None = None
    """Path to a file holding PEM encoded CA certificates."""

    @classmethod
    def parse_doc(
        cls, doc: dict[str, Any], base_dir: Path | None = None
    ) -> "KubeCluster":
        """Parse the `cluster` field of a kubeconfig clusters entry."""
        try:
            entry = _ClusterEntry.from_dict(doc)
        except (ValueError, LookupError, TypeError) as err:
            raise InputException(f"Invalid kubeconfig cluster {doc}: {err}") from err
        ca_data: bytes | None = None
        if entry.certificate_authority_data:
            try:
                ca_data = base64.b64decode(
                    entry.certificate_authority_data, validate=True
                )
            except (binascii.Error, ValueError) as err:
                raise InputException(
                    "Invalid kubeconfig cluster certificate-authority-data: "
                    f"{err}"
                ) from err
        ca_path = entry.certificate_authority
        if ca_path and base_dir is not None and not Path(ca_path).is_absolute():
            ca_path = str(base_dir / ca_path)
        return cls(
            server=entry.server,
            certificate_authority_data=ca_data,
            certificate_authority=ca_path,
        )


@dataclass
class KubeConfig:
    """The raw structure of a kubeconfig file."""

    current_context: str | None
    """The name of the context used by default."""

    clusters: dict[str, KubeCluster] = field(default_factory=dict)
    """Clusters keyed by name."""

    contexts: dict[str, str] = field(default_factory=dict)
    """The cluster name used by each context, keyed by context name."""

    contents: dict[str, Any] = field(default_factory=dict)
    """The verbatim kubeconfig document."""

    @classmethod
    def parse_doc(
        cls, doc: dict[str, Any], base_dir: Path | None = None
    ) -> "KubeConfig":
        """Parse a kubeconfig document.

        Relative certificate-authority paths are resolved against `base_dir`,
        typically the directory holding the kubeconfig file.
        """
        if not isinstance(doc, dict):
            raise InputException(f"Invalid kubeconfig, expected a mapping: {doc}")
        clusters: dict[str, KubeCluster] = {}
        for entry in doc.get("clusters") or ():
            if not isinstance(entry, dict) or not (name := entry.get("name")):
                raise InputException(
                    f"Invalid kubeconfig cluster missing name: {entry}"
                )
            if not isinstance(info := entry.get("cluster"), dict):
                raise InputException(
                    f"Invalid kubeconfig cluster {name} missing cluster: {entry}"
                )
            clusters[name] = KubeCluster.parse_doc(info, base_dir)
        contexts: dict[str, str] = {}
        for entry in doc.get("contexts") or ():
            if not isinstance(entry, dict) or not (name := entry.get("name")):
                raise InputException(
                    f"Invalid kubeconfig context missing name: {entry}"
                )
            if not isinstance(context := (entry.get("context") or {}), dict):
                raise InputException(
                    f"Invalid kubeconfig context {name} expected a mapping: {entry}"
                )
            if cluster_name := context.get("cluster"):
                if not isinstance(cluster_name, str):
                    raise InputException(
                        f"Invalid kubeconfig context {name} cluster: {entry}"
                    )
                contexts[name] = cluster_name
        current_context = doc.get("current-context")
        if current_context is not None and not isinstance(current_context, str):
            raise InputException(
                f"Invalid kubeconfig current-context: {current_context}"
            )
        return cls(
            current_context=current_context,
            clusters=clusters,
            contexts=contexts,
            contents=doc,
        )

    @classmethod
    def parse_yaml(cls, content: str, base_dir: Path | None = None) -> "KubeConfig":
        """Parse a serialized kubeconfig."""
        try:
            doc = yaml.safe_load(content)
        except yaml.YAMLError as err:
            raise InputException(f"Invalid kubeconfig YAML: {err}") from err
        return cls.parse_doc(doc or {}, base_dir)

    def serialize(self) -> bytes:
        """Serialize the full kubeconfig document for storage."""
        try:
            content = yaml.safe_dump(self.contents, sort_keys=False)
        except yaml.YAMLError as err:
            raise ConfigSerializationError(
                f"Unable to serialize kubeconfig: {err}"
            ) from err
        return content.encode("utf-8")


class KubeConfigLoader(ABC):
    """Read only handle to the kubeconfig of the local cluster."""

    @abstractmethod
    async def raw_config(self) -> KubeConfig:
        """Return the current kubeconfig structure."""


class FileKubeConfigLoader(KubeConfigLoader):
    """Reads the kubeconfig from a file each time it is requested."""

    def __init__(self, path: Path) -> None:
        """Initialize FileKubeConfigLoader."""
        self._path = path

    async def raw_config(self) -> KubeConfig:
        """Return the kubeconfig parsed from the file."""
        _LOGGER.debug("Reading kubeconfig %s", self._path)
        try:
            async with aiofiles.open(str(self._path)) as kubeconfig_file:
                content = await kubeconfig_file.read()
        except OSError as err:
            raise InputException(
                f"Unable to read kubeconfig {self._path}: {err}"
            ) from err
        return KubeConfig.parse_yaml(content, base_dir=self._path.parent)


class StaticKubeConfigLoader(KubeConfigLoader):
    """Returns a kubeconfig that was already loaded."""

    def __init__(self, kubeconfig: KubeConfig) -> None:
        """Initialize StaticKubeConfigLoader."""
        self._kubeconfig = kubeconfig

    async def raw_config(self) -> KubeConfig:
        """Return the kubeconfig."""
        return self._kubeconfig
