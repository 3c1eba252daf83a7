"""Delivers configuration changes to registered listeners.

Listeners are coroutines called with each new configuration value. Delivery is
serialized, so a listener is never running twice at the same time, and a value
equal to the last one delivered is not delivered again.
"""

import asyncio
from collections.abc import Awaitable, Callable
import logging

from .config import Config

__all__ = [
    "ConfigListener",
    "ConfigSource",
]

_LOGGER = logging.getLogger(__name__)

ConfigListener = Callable[[Config], Awaitable[None]]


class ConfigSource:
    """Holds the current configuration and notifies listeners of changes."""

    def __init__(self) -> None:
        """Initialize the ConfigSource."""
        self._listeners: list[ConfigListener] = []
        self._current: Config | None = None
        self._lock = asyncio.Lock()

    @property
    def current(self) -> Config | None:
        """The last configuration successfully delivered to all listeners."""
        return self._current

    def add_listener(self, callback: ConfigListener) -> Callable[[], None]:
        """Register a callback for configuration changes.

        Returns a callable that can be called to remove the listener.
        """

        def remove() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        self._listeners.append(callback)
        return remove

    async def update(self, config: Config) -> None:
        """Deliver a configuration value to all listeners.

        An exception raised by a listener is propagated to the caller and the
        value is not recorded, so calling `update` again with the same value
        delivers it again.
        """
        async with self._lock:
            if config == self._current:
                _LOGGER.debug("Configuration unchanged, skipping")
                return
            for listener in list(self._listeners):
                await listener(config)
            self._current = config
