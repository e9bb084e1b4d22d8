"""Error taxonomy for registry lookups and client construction."""

from __future__ import annotations

from collections.abc import Iterable


class HBaseRegistryError(Exception):
    """Base class for every error raised by the registry."""


class ClusterNotFoundError(HBaseRegistryError, LookupError):
    """The requested cluster alias is not among the aliases cached for a flavor."""

    def __init__(self, cluster: str, flavor: str, known: Iterable[str] = ()) -> None:
        self.cluster = cluster
        self.flavor = flavor
        self.known = sorted(known)
        valid = ", ".join(self.known) or "<none>"
        msg = f"Unknown cluster '{cluster}' for {flavor} clients. Valid clusters: {valid}"
        super().__init__(msg)


class ClientConstructionError(HBaseRegistryError, RuntimeError):
    """Building a client handle failed during a population pass."""

    def __init__(self, cluster: str, flavor: str, reason: str = "") -> None:
        self.cluster = cluster
        self.flavor = flavor
        msg = f"Failed to build {flavor} client for cluster '{cluster}'"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class RegistryClosedError(HBaseRegistryError, RuntimeError):
    """The registry was closed and no longer hands out clients."""
