"""Client flavors backed by an HBase Thrift connection."""

from __future__ import annotations

import happybase

from hbase_registry.properties import ZK_CLIENT_PORT, ZK_QUORUM

THRIFT_HOST = "hbase.thrift.host"
THRIFT_PORT = "hbase.thrift.port"
THRIFT_TIMEOUT = "hbase.thrift.timeout"
THRIFT_TRANSPORT = "hbase.thrift.transport"
THRIFT_PROTOCOL = "hbase.thrift.protocol"

DEFAULT_THRIFT_PORT = 9090


def validate_client_properties(cluster: str, properties: dict[str, str]) -> None:
    """Reject property sets no client can connect with.

    Raises:
        ValueError: If the quorum is empty, the ZooKeeper client port is not a
            number, or a Thrift port or timeout is set to a non-number.
    """
    if not properties.get(ZK_QUORUM, "").strip():
        msg = f"Cluster '{cluster}' has an empty {ZK_QUORUM}."
        raise ValueError(msg)
    port = properties.get(ZK_CLIENT_PORT, "")
    if not port.isdigit():
        msg = f"Cluster '{cluster}' has a non-numeric {ZK_CLIENT_PORT}: {port!r}."
        raise ValueError(msg)
    for key in (THRIFT_PORT, THRIFT_TIMEOUT):
        value = properties.get(key, "")
        if value and not value.isdigit():
            msg = f"Cluster '{cluster}' has a non-numeric {key}: {value!r}."
            raise ValueError(msg)


def thrift_endpoint(properties: dict[str, str]) -> tuple[str, int]:
    """Return the Thrift gateway (host, port) for a property set.

    The host defaults to the first quorum member, without any ``:port`` suffix.
    """
    host = properties.get(THRIFT_HOST) or properties[ZK_QUORUM].split(",")[0].strip().partition(":")[0]
    port = int(properties.get(THRIFT_PORT) or DEFAULT_THRIFT_PORT)
    return host, port


def load_hbase_connection(properties: dict[str, str]) -> happybase.Connection:
    """Open a happybase connection for one cluster's properties.

    Each caller gets its own connection so clients for different clusters never
    share transport state.
    """
    host, port = thrift_endpoint(properties)
    kwargs: dict[str, object] = {
        "host": host,
        "port": port,
        "transport": properties.get(THRIFT_TRANSPORT) or "buffered",
        "protocol": properties.get(THRIFT_PROTOCOL) or "binary",
    }
    if properties.get(THRIFT_TIMEOUT):
        kwargs["timeout"] = int(properties[THRIFT_TIMEOUT])
    return happybase.Connection(**kwargs)


def decode(value: bytes | str) -> str:
    """Decode HBase bytes as UTF-8.

    Row keys, qualifiers and cells are often binary (e.g. serialized longs);
    bytes that are not valid UTF-8 come back as ``\\xNN`` escapes instead of raising.
    """
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="backslashreplace")
    return value
