"""Tests for the bootstrap handler."""

import logging
from typing import Any

import pytest
import yaml

from fleet_bootstrap.apply import ApplyResult, InMemoryApply
from fleet_bootstrap.config import BootstrapConfig, Config
from fleet_bootstrap.exceptions import ApplyFailure, NoClusterConfigured
from fleet_bootstrap.handler import OWNER_ID, BootstrapHandler, register
from fleet_bootstrap.kubeconfig import KubeConfig, StaticKubeConfigLoader
from fleet_bootstrap.manifest import NamedResource, Namespace, Secret
from fleet_bootstrap.source import ConfigSource

NAMESPACE_ID = NamedResource("Namespace", None, "fleet-local")
SECRET_ID = NamedResource("Secret", "fleet-local", "local-cluster")
CLUSTER_ID = NamedResource("Cluster", "fleet-local", "local")
CLUSTER_GROUP_ID = NamedResource("ClusterGroup", "fleet-local", "default")
GIT_REPO_ID = NamedResource("GitRepo", "fleet-local", "bootstrap")

WITH_REPO = Config(
    bootstrap=BootstrapConfig(repo="https://github.com/example/fleet", dirs="apps")
)
WITHOUT_REPO = Config()
DISABLED = Config(bootstrap=BootstrapConfig(namespace="-"))

class FailingApply(InMemoryApply):
    """Apply engine that always fails."""

    async def apply_objects(self, owner: str, objects: Any) -> ApplyResult:
        raise ApplyFailure(owner, "connection refused")

class CountingLoader(StaticKubeConfigLoader):
    """Loader that counts how many times the kubeconfig was read."""

    def __init__(self, kubeconfig: KubeConfig) -> None:
        super().__init__(kubeconfig)
        self.reads = 0

    async def raw_config(self) -> KubeConfig:
        self.reads += 1
        return await super().raw_config()

@pytest.fixture
def apply() -> InMemoryApply:
    return InMemoryApply()

@pytest.fixture
def loader(kubeconfig: KubeConfig) -> CountingLoader:
    return CountingLoader(kubeconfig)

@pytest.fixture
def handler(loader: CountingLoader, apply: InMemoryApply) -> BootstrapHandler:
    return BootstrapHandler(loader, apply)

async def test_apply_with_repo(
    handler: BootstrapHandler, apply: InMemoryApply, kubeconfig_doc: dict[str, Any]
) -> None:
    """Test all objects are applied under the bootstrap owner."""
    result = await handler.on_config(WITH_REPO)
    assert result is not None
    assert result.created == [
        NAMESPACE_ID,
        SECRET_ID,
        CLUSTER_ID,
        CLUSTER_GROUP_ID,
        GIT_REPO_ID,
    ]
    assert apply.list_objects(OWNER_ID) == result.created

    secret_doc = apply.get_object(SECRET_ID)
    assert secret_doc is not None
    secret = Secret.parse_doc(secret_doc)
    assert yaml.safe_load(secret.data["value"]) == kubeconfig_doc
    assert secret.data["apiServerURL"] == b"https://10.0.0.1:6443"
    assert secret.data["apiServerCA"] == b"CERT_A"

async def test_reapply_is_noop(handler: BootstrapHandler) -> None:
    """Test the same configuration produces no changes."""
    await handler.on_config(WITH_REPO)
    result = await handler.on_config(WITH_REPO)
    assert result is not None
    assert not result.changed
    assert len(result.unchanged) == 5

async def test_repo_removed_prunes_git_repo(
    handler: BootstrapHandler, apply: InMemoryApply
) -> None:
    """Test the GitRepo is deleted once the repository is unset."""
    await handler.on_config(WITH_REPO)
    result = await handler.on_config(WITHOUT_REPO)
    assert result is not None
    assert result.deleted == [GIT_REPO_ID]
    assert apply.get_object(GIT_REPO_ID) is None
    assert len(apply.list_objects(OWNER_ID)) == 4

async def test_existing_namespace(
    handler: BootstrapHandler, apply: InMemoryApply
) -> None:
    """Test an existing bootstrap namespace is not an error."""
    apply.add_object(Namespace(name="fleet-local"))
    result = await handler.on_config(WITHOUT_REPO)
    assert result is not None
    assert result.updated == [NAMESPACE_ID]

async def test_logs_only_debug(
    handler: BootstrapHandler, caplog: pytest.LogCaptureFixture
) -> None:
    """Test a successful apply emits only debug records."""
    with caplog.at_level(logging.DEBUG, logger="fleet_bootstrap"):
        result = await handler.on_config(WITH_REPO)
    assert result is not None
    assert result.changed
    assert caplog.records
    assert all(record.levelno == logging.DEBUG for record in caplog.records)

async def test_disabled(
    handler: BootstrapHandler, apply: InMemoryApply, loader: CountingLoader
) -> None:
    """Test a disabled configuration reads and applies nothing."""
    assert await handler.on_config(DISABLED) is None
    assert loader.reads == 0
    assert apply.list_objects() == []

async def test_disabled_keeps_applied_objects(
    handler: BootstrapHandler, apply: InMemoryApply
) -> None:
    """Test disabling bootstrap leaves previously applied objects in place."""
    await handler.on_config(WITHOUT_REPO)
    assert await handler.on_config(DISABLED) is None
    assert len(apply.list_objects(OWNER_ID)) == 4

async def test_extract_error_propagates(apply: InMemoryApply) -> None:
    """Test extractor errors are returned to the caller without applying."""
    handler = BootstrapHandler(
        StaticKubeConfigLoader(KubeConfig.parse_doc({"clusters": []})), apply
    )
    with pytest.raises(NoClusterConfigured):
        await handler.on_config(WITHOUT_REPO)
    assert apply.list_objects() == []

async def test_apply_error_propagates(loader: CountingLoader) -> None:
    """Test apply errors are returned to the caller without retry."""
    handler = BootstrapHandler(loader, FailingApply())
    with pytest.raises(ApplyFailure, match="connection refused"):
        await handler.on_config(WITHOUT_REPO)
    assert loader.reads == 1

async def test_register(loader: CountingLoader, apply: InMemoryApply) -> None:
    """Test the handler is invoked for each new configuration value."""
    source = ConfigSource()
    remove = register(source, loader, apply)

    await source.update(WITH_REPO)
    await source.update(WITH_REPO)
    assert loader.reads == 1
    assert len(apply.list_objects(OWNER_ID)) == 5

    await source.update(WITHOUT_REPO)
    assert loader.reads == 2
    assert len(apply.list_objects(OWNER_ID)) == 4

    remove()
    await source.update(WITH_REPO)
    assert loader.reads == 2
