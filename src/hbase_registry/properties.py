"""Assemble the normalized client property set for one cluster alias."""

from __future__ import annotations

import structlog

from hbase_registry.config import ClusterConfigResolver

log = structlog.get_logger()

# Canonical keys handed to the client constructors
ZK_QUORUM = "hbase.zookeeper.quorum"
ZK_CLIENT_PORT = "hbase.zookeeper.property.clientPort"
ZNODE_PARENT = "zookeeper.znode.parent"
KRB5_CONF = "java.security.krb5.conf"
HADOOP_AUTHENTICATION = "hadoop.security.authentication"
HBASE_AUTHENTICATION = "hbase.security.authentication"
KEYTAB_FILE = "keytab.file"
KERBEROS_PRINCIPAL = "kerberos.principal"
MASTER_PRINCIPAL = "hbase.master.kerberos.principal"
REGIONSERVER_PRINCIPAL = "hbase.regionserver.kerberos.principal"

DEFAULT_QUORUM = "localhost"
DEFAULT_CLIENT_PORT = "2181"
DEFAULT_ZNODE_PARENT = "/hbase"

# Separators of the "<alias>.hbase.client.properties" block: "k1=v1;k2=v2"
EXTRA_PAIR_SEPARATOR = ";"
EXTRA_KEY_VALUE_SEPARATOR = "="

# (config suffix, canonical key, default), in the order they are set
_CANONICAL_FIELDS: tuple[tuple[str, str, str], ...] = (
    ("hbase.quorum", ZK_QUORUM, DEFAULT_QUORUM),
    ("hbase.zk.client.port", ZK_CLIENT_PORT, DEFAULT_CLIENT_PORT),
    ("hbase.node.parent", ZNODE_PARENT, DEFAULT_ZNODE_PARENT),
    ("hbase.java.security.krb5.conf", KRB5_CONF, ""),
    ("hbase.hadoop.security.authentication", HADOOP_AUTHENTICATION, ""),
    ("hbase.hbase.security.authentication", HBASE_AUTHENTICATION, ""),
    ("hbase.keytab.file", KEYTAB_FILE, ""),
    ("hbase.kerberos.principal", KERBEROS_PRINCIPAL, ""),
    ("hbase.master.kerberos.principal", MASTER_PRINCIPAL, ""),
    ("hbase.regionserver.kerberos.principal", REGIONSERVER_PRINCIPAL, ""),
)

EXTRA_PROPERTIES_SUFFIX = "hbase.client.properties"

_REDACTED_KEYS = frozenset({KEYTAB_FILE, KERBEROS_PRINCIPAL, MASTER_PRINCIPAL, REGIONSERVER_PRINCIPAL})


def parse_extra_properties(text: str, cluster: str | None = None) -> dict[str, str]:
    """Parse a ``key=value;key=value`` block into a dict.

    Empty chunks are ignored. Chunks without ``=`` or with an empty key are
    skipped with a warning; parsing never fails.
    """
    result: dict[str, str] = {}
    for chunk in text.split(EXTRA_PAIR_SEPARATOR):
        chunk = chunk.strip()
        if not chunk:
            continue
        key, sep, value = chunk.partition(EXTRA_KEY_VALUE_SEPARATOR)
        key = key.strip()
        if not sep or not key:
            log.warning("extra_property_skipped", cluster=cluster, entry=chunk)
            continue
        result[key] = value.strip()
    return result


def redact_properties(properties: dict[str, str]) -> dict[str, str]:
    """Return a copy safe for logging: keytab path and principals are masked."""
    return {key: ("[REDACTED]" if key in _REDACTED_KEYS and value else value) for key, value in properties.items()}


class ClientPropertiesBuilder:
    """Builds client properties for a cluster alias from a ClusterConfigResolver."""

    def __init__(self, resolver: ClusterConfigResolver) -> None:
        self._resolver = resolver

    def build(self, cluster: str) -> dict[str, str]:
        """Resolve the canonical keys, then merge the free-form extra block over them.

        Missing keys fall back to defaults; this never raises for missing
        configuration. Extra properties win over canonical ones.
        """
        log.info("resolving_cluster_properties", cluster=cluster)
        properties: dict[str, str] = {}
        for suffix, key, default in _CANONICAL_FIELDS:
            properties[key] = self._resolver.get_property(f"{cluster}.{suffix}", default)

        extra = self._resolver.get_property(f"{cluster}.{EXTRA_PROPERTIES_SUFFIX}", "")
        if extra.strip():
            properties.update(parse_extra_properties(extra, cluster=cluster))

        log.debug("cluster_properties_resolved", cluster=cluster, properties=redact_properties(properties))
        return properties


def build_client_properties(resolver: ClusterConfigResolver, cluster: str) -> dict[str, str]:
    """Shorthand for ``ClientPropertiesBuilder(resolver).build(cluster)``."""
    return ClientPropertiesBuilder(resolver).build(cluster)
