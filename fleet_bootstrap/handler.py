"""Handler that registers the local cluster with Fleet on configuration changes.

The handler is constructed with a handle to the local kubeconfig and an apply
engine. Each configuration value is turned into the complete set of bootstrap
objects which are applied under a fixed owner, so objects from a previous
configuration that are no longer wanted (e.g. the GitRepo after the repo is
unset) are pruned.

Errors are not retried here and propagate to the caller.
"""

from collections.abc import Callable
import logging

from .apply import Apply, ApplyResult
from .builder import build_objects
from .config import Config
from .connection import extract_connection
from .kubeconfig import KubeConfigLoader
from .source import ConfigSource

__all__ = [
    "BootstrapHandler",
    "register",
]

_LOGGER = logging.getLogger(__name__)

OWNER_ID = "fleet-bootstrap"


class BootstrapHandler:
    """Applies the bootstrap objects for each configuration value."""

    def __init__(
        self, loader: KubeConfigLoader, apply: Apply, owner: str = OWNER_ID
    ) -> None:
        """Initialize BootstrapHandler.

        Args:
            loader: Handle used to read the kubeconfig of the local cluster
            apply: The apply engine that receives the desired objects
            owner: Identifier scoping which applied objects may be pruned
        """
        self._loader = loader
        self._apply = apply
        self._owner = owner

    async def on_config(self, config: Config) -> ApplyResult | None:
        """Reconcile the bootstrap objects for the configuration.

        Returns None when bootstrapping is disabled, in which case nothing is
        read or applied.
        """
        bootstrap = config.bootstrap
        if not bootstrap.enabled:
            _LOGGER.debug("Bootstrap disabled (namespace=%r)", bootstrap.namespace)
            return None
        kubeconfig = await self._loader.raw_config()
        connection = await extract_connection(kubeconfig)
        objects = build_objects(bootstrap, connection)
        _LOGGER.debug(
            "Applying %d objects in %s for %s",
            len(objects),
            bootstrap.namespace,
            self._owner,
        )
        result = await self._apply.apply_objects(self._owner, objects)
        if result.changed:
            _LOGGER.debug(
                "Bootstrap objects in %s: created=%d updated=%d deleted=%d",
                bootstrap.namespace,
                len(result.created),
                len(result.updated),
                len(result.deleted),
            )
        return result


def register(
    source: ConfigSource, loader: KubeConfigLoader, apply: Apply
) -> Callable[[], None]:
    """Subscribe a new BootstrapHandler to the configuration source.

    Returns a callable that removes the subscription.
    """
    handler = BootstrapHandler(loader, apply)

    async def on_config(config: Config) -> None:
        await handler.on_config(config)

    return source.add_listener(on_config)
