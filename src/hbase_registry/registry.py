"""Per-flavor, per-cluster client cache and the process-wide registry accessor."""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from enum import StrEnum
from typing import Any

import structlog

from hbase_registry.clients.hbase_admin import HBaseAdminClient
from hbase_registry.clients.hbase_data import HBaseClient
from hbase_registry.clients.hbase_sql import HBaseSqlClient
from hbase_registry.config import ClusterConfigResolver, load_cluster_config
from hbase_registry.errors import ClientConstructionError, ClusterNotFoundError, RegistryClosedError
from hbase_registry.properties import ClientPropertiesBuilder

log = structlog.get_logger()


class ClientFlavor(StrEnum):
    """Which behaviour set a client handle provides."""

    GENERAL = "general"
    ADMIN = "admin"
    SQL = "sql"


ClientFactory = Callable[[str, dict[str, str]], Any]

DEFAULT_FACTORIES: dict[ClientFlavor, ClientFactory] = {
    ClientFlavor.GENERAL: HBaseClient,
    ClientFlavor.ADMIN: HBaseAdminClient,
    ClientFlavor.SQL: HBaseSqlClient,
}


class ClientRegistry:
    """Lazily builds and caches one client per (flavor, cluster alias).

    The first lookup for a flavor builds clients for every cluster alias the
    resolver knows about at that moment. Once a pass for a flavor has completed,
    aliases added to the configuration later are not picked up for that flavor.
    A pass that fails part-way keeps what it built and is resumed by the next
    lookup that misses the cache. Cached clients are never replaced.

    Each flavor has its own lock: lookups for one flavor never wait on a
    population pass for another.
    """

    def __init__(
        self,
        resolver: ClusterConfigResolver,
        factories: Mapping[ClientFlavor, ClientFactory] | None = None,
        builder: ClientPropertiesBuilder | None = None,
    ) -> None:
        self._resolver = resolver
        self._builder = builder or ClientPropertiesBuilder(resolver)
        self._factories: dict[ClientFlavor, ClientFactory] = dict(DEFAULT_FACTORIES)
        if factories:
            self._factories.update({ClientFlavor(flavor): factory for flavor, factory in factories.items()})
        self._caches: dict[ClientFlavor, dict[str, Any]] = {flavor: {} for flavor in ClientFlavor}
        self._complete: dict[ClientFlavor, bool] = {flavor: False for flavor in ClientFlavor}
        self._locks: dict[ClientFlavor, threading.Lock] = {flavor: threading.Lock() for flavor in ClientFlavor}
        self._closed = False

    def get(self, flavor: ClientFlavor | str, cluster: str) -> Any:
        """Return the cached client of ``flavor`` for ``cluster``, populating on first use.

        Raises:
            ClusterNotFoundError: If ``cluster`` was not known when the flavor was populated.
            ClientConstructionError: If building a client failed during population.
            RegistryClosedError: If the registry has been closed.
            ValueError: If ``flavor`` is not a known client flavor.
        """
        flavor = ClientFlavor(flavor)
        log.info("client_requested", flavor=flavor.value, cluster=cluster)
        with self._locks[flavor]:
            if self._closed:
                msg = "Client registry is closed."
                raise RegistryClosedError(msg)
            cache = self._caches[flavor]
            if cluster in cache:
                return cache[cluster]
            if not cache or not self._complete[flavor]:
                self._populate(flavor)
                if cluster in cache:
                    return cache[cluster]
            known = list(cache)
        log.warning("cluster_not_found", flavor=flavor.value, cluster=cluster, known=known)
        raise ClusterNotFoundError(cluster, flavor.value, known)

    def _populate(self, flavor: ClientFlavor) -> None:
        # Caller holds self._locks[flavor].
        cache = self._caches[flavor]
        factory = self._factories[flavor]
        clusters = self._resolver.list_cluster_aliases()
        log.info("populating_clients", flavor=flavor.value, clusters=clusters)
        self._complete[flavor] = False
        for cluster in clusters:
            if cluster in cache:
                continue
            properties = self._builder.build(cluster)
            try:
                cache[cluster] = factory(cluster, properties)
            except Exception as e:
                log.error("failed_to_construct_client", flavor=flavor.value, cluster=cluster, error=str(e))
                raise ClientConstructionError(cluster, flavor.value, str(e)) from e
            log.info("client_constructed", flavor=flavor.value, cluster=cluster)
        self._complete[flavor] = True

    def get_client(self, cluster: str) -> Any:
        return self.get(ClientFlavor.GENERAL, cluster)

    def get_admin_client(self, cluster: str) -> Any:
        return self.get(ClientFlavor.ADMIN, cluster)

    def get_sql_client(self, cluster: str) -> Any:
        return self.get(ClientFlavor.SQL, cluster)

    def cached_clusters(self, flavor: ClientFlavor | str) -> list[str]:
        """Aliases that currently have a cached client of ``flavor``."""
        flavor = ClientFlavor(flavor)
        with self._locks[flavor]:
            return list(self._caches[flavor])

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Close every cached client and refuse further lookups.

        A client whose ``close`` fails is logged and the remaining clients are
        still closed. Calling ``close`` twice is a no-op.
        """
        for flavor in ClientFlavor:
            self._locks[flavor].acquire()
        try:
            if self._closed:
                return
            self._closed = True
            for flavor, cache in self._caches.items():
                for cluster, client in cache.items():
                    close = getattr(client, "close", None)
                    if close is None:
                        continue
                    try:
                        close()
                    except Exception:
                        log.exception("failed_to_close_client", flavor=flavor.value, cluster=cluster)
                cache.clear()
            log.info("client_registry_closed")
        finally:
            for flavor in reversed(ClientFlavor):
                self._locks[flavor].release()

    def __enter__(self) -> ClientRegistry:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


_registry: ClientRegistry | None = None
_registry_lock = threading.Lock()


def get_registry() -> ClientRegistry:
    """Return the process-wide registry, creating it from ``load_cluster_config()`` on first call."""
    global _registry
    with _registry_lock:
        if _registry is None:
            _registry = ClientRegistry(load_cluster_config())
        return _registry


def close_registry() -> None:
    """Close and forget the process-wide registry, if one was created."""
    global _registry
    with _registry_lock:
        registry, _registry = _registry, None
    if registry is not None:
        registry.close()


def get_client(cluster: str) -> Any:
    return get_registry().get_client(cluster)


def get_admin_client(cluster: str) -> Any:
    return get_registry().get_admin_client(cluster)


def get_sql_client(cluster: str) -> Any:
    return get_registry().get_sql_client(cluster)
