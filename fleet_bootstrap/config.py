"""Configuration objects for fleet-bootstrap.

The Fleet controller reads its configuration from a ConfigMap whose `config`
key holds a JSON document. Only the `bootstrap` section is used here.
"""

from dataclasses import dataclass, field
import json
import logging
from pathlib import Path
from typing import Any

import aiofiles
import yaml
from mashumaro import DataClassDictMixin

from .exceptions import InputException

__all__ = [
    "BootstrapConfig",
    "Config",
    "parse_config",
    "parse_config_map",
    "read_config",
]

_LOGGER = logging.getLogger(__name__)

DISABLED_NAMESPACE = "-"
DEFAULT_NAMESPACE = "fleet-local"
DEFAULT_BRANCH = "master"
CONFIG_MAP_KIND = "ConfigMap"
CONFIG_KEY = "config"


@dataclass(frozen=True)
class BootstrapConfig(DataClassDictMixin):
    """Settings for registering the local cluster with itself."""

    namespace: str = DEFAULT_NAMESPACE
    """Namespace the bootstrap objects are created in, or "-" to disable."""

    repo: str = ""
    """URL of a git repository to deploy into the local cluster."""

    secret: str = ""
    """Name of the secret holding the git client credentials."""

    branch: str = DEFAULT_BRANCH
    """The git branch to deploy."""

    dirs: str = ""
    """Comma separated list of bundle directories in the repository."""

    @property
    def enabled(self) -> bool:
        """Return False when bootstrapping is turned off."""
        return self.namespace not in ("", DISABLED_NAMESPACE)


@dataclass(frozen=True)
class Config(DataClassDictMixin):
    """Snapshot of the controller configuration."""

    bootstrap: BootstrapConfig = field(default_factory=BootstrapConfig)


def parse_config(doc: dict[str, Any]) -> Config:
    """Parse a configuration document."""
    if not isinstance(doc, dict):
        raise InputException(f"Invalid config, expected a mapping: {doc}")
    try:
        return Config.from_dict(doc)
    except (ValueError, LookupError, TypeError) as err:
        raise InputException(f"Invalid config {doc}: {err}") from err


def parse_config_map(doc: dict[str, Any]) -> Config:
    """Parse the configuration stored in the controller ConfigMap."""
    if doc.get("kind") != CONFIG_MAP_KIND:
        raise InputException(f"Invalid object expected {CONFIG_MAP_KIND}: {doc}")
    data = doc.get("data") or {}
    if not (content := data.get(CONFIG_KEY)):
        _LOGGER.debug("ConfigMap has no %s key, using defaults", CONFIG_KEY)
        return Config()
    try:
        config_doc = json.loads(content)
    except json.JSONDecodeError as err:
        raise InputException(f"Invalid JSON in ConfigMap data.config: {err}") from err
    return parse_config(config_doc)


async def read_config(path: Path) -> Config:
    """Read a configuration from a YAML file.

    The file may contain either the controller ConfigMap or the bare
    configuration document.
    """
    try:
        async with aiofiles.open(str(path)) as config_file:
            content = await config_file.read()
    except OSError as err:
        raise InputException(f"Unable to read config {path}: {err}") from err
    try:
        doc = yaml.safe_load(content)
    except yaml.YAMLError as err:
        raise InputException(f"Invalid YAML in config file {path}: {err}") from err
    if doc is None:
        return Config()
    if isinstance(doc, dict) and doc.get("kind") == CONFIG_MAP_KIND:
        return parse_config_map(doc)
    return parse_config(doc)
