"""Test fixtures for fleet-bootstrap."""

import base64
from pathlib import Path
from typing import Any

import pytest
import yaml

from fleet_bootstrap.connection import Connection
from fleet_bootstrap.kubeconfig import KubeConfig

SERVER_URL = "https://10.0.0.1:6443"
CA_DATA = b"CERT_A"


@pytest.fixture
def kubeconfig_doc() -> dict[str, Any]:
    """A kubeconfig with a single cluster selected by the current context."""
    return {
        "apiVersion": "v1",
        "kind": "Config",
        "current-context": "ctx-a",
        "clusters": [
            {
                "name": "ctx-a",
                "cluster": {
                    "server": SERVER_URL,
                    "certificate-authority-data": base64.b64encode(CA_DATA).decode(),
                },
            }
        ],
        "contexts": [
            {"name": "ctx-a", "context": {"cluster": "ctx-a", "user": "admin"}}
        ],
        "users": [{"name": "admin", "user": {"token": "example-token"}}],
    }


@pytest.fixture
def kubeconfig(kubeconfig_doc: dict[str, Any]) -> KubeConfig:
    """A parsed kubeconfig."""
    return KubeConfig.parse_doc(kubeconfig_doc)


@pytest.fixture
def kubeconfig_path(tmp_path: Path, kubeconfig_doc: dict[str, Any]) -> Path:
    """A kubeconfig written to a file."""
    path = tmp_path / "kubeconfig"
    path.write_text(yaml.safe_dump(kubeconfig_doc, sort_keys=False))
    return path


@pytest.fixture
def connection() -> Connection:
    """A connection to the local cluster."""
    return Connection(server=SERVER_URL, ca=CA_DATA, value=b"kind: Config\n")
