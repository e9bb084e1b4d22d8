"""Multi-cluster HBase client registry."""

from hbase_registry.config import ClusterConfigResolver, PropertySource, load_cluster_config
from hbase_registry.errors import (
    ClientConstructionError,
    ClusterNotFoundError,
    HBaseRegistryError,
    RegistryClosedError,
)
from hbase_registry.properties import ClientPropertiesBuilder, build_client_properties
from hbase_registry.registry import (
    ClientFlavor,
    ClientRegistry,
    close_registry,
    get_admin_client,
    get_client,
    get_registry,
    get_sql_client,
)

__all__ = [
    "ClientConstructionError",
    "ClientFlavor",
    "ClientPropertiesBuilder",
    "ClientRegistry",
    "ClusterConfigResolver",
    "ClusterNotFoundError",
    "HBaseRegistryError",
    "PropertySource",
    "RegistryClosedError",
    "build_client_properties",
    "close_registry",
    "get_admin_client",
    "get_client",
    "get_registry",
    "get_sql_client",
    "load_cluster_config",
]
