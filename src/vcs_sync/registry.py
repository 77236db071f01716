"""Maps backend names to driver constructors.

Registration is explicit: call `register_builtin_drivers()` once during
process setup before asking for a driver by name.
"""

import logging
from collections.abc import Callable

from .constants import APP_NAME
from .driver import Driver
from .git_driver import GitDriver

logger = logging.getLogger(APP_NAME)

DriverFactory = Callable[[bytes | None], Driver]


class DriverRegistry:
    """A name-to-constructor table for version-control drivers."""

    def __init__(self) -> None:
        self._factories: dict[str, DriverFactory] = {}

    def register(self, factory: DriverFactory, *names: str) -> None:
        """Registers `factory` under each of `names`.

        Raises:
            ValueError: If a name is already taken.
        """
        for name in names:
            if name in self._factories:
                raise ValueError(f"VCS driver already registered: {name}")
            self._factories[name] = factory
            logger.debug(f"Registered VCS driver '{name}'")

    def new(self, name: str, blob: bytes | None = None) -> Driver:
        """Constructs the driver registered as `name`.

        Args:
            name (str): The backend name (e.g. 'git').
            blob (bytes | None, optional): Serialized driver configuration.

        Returns:
            Driver: A fresh driver instance.

        Raises:
            ValueError: If `name` is unknown or the configuration is malformed.
        """
        factory = self._factories.get(name)
        if factory is None:
            raise ValueError(f"Unsupported VCS driver: {name}")
        return factory(blob)

    def names(self) -> list[str]:
        return sorted(self._factories)

    def __contains__(self, name: object) -> bool:
        return name in self._factories


REGISTRY = DriverRegistry()


def register_builtin_drivers(registry: DriverRegistry = REGISTRY) -> None:
    """Registers the drivers shipped with vcs-sync. Safe to call twice."""
    if "git" not in registry:
        registry.register(GitDriver.from_bytes, "git")


def new_driver(name: str, blob: bytes | None = None) -> Driver:
    """Constructs a driver from the process-wide registry."""
    return REGISTRY.new(name, blob)
