"""Client-specific fixtures: property sets and a mocked happybase connection."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest


@pytest.fixture
def client_properties() -> dict[str, str]:
    """Property set as the registry would hand it to a client constructor."""
    return {
        "hbase.zookeeper.quorum": "node1,node2,node3",
        "hbase.zookeeper.property.clientPort": "2181",
        "zookeeper.znode.parent": "/hbase",
        "java.security.krb5.conf": "",
        "hadoop.security.authentication": "",
        "hbase.security.authentication": "",
        "keytab.file": "",
        "kerberos.principal": "",
        "hbase.master.kerberos.principal": "",
        "hbase.regionserver.kerberos.principal": "",
    }


@pytest.fixture
def mock_connection() -> MagicMock:
    """A happybase.Connection stand-in whose ``table()`` always returns the same mock table."""
    connection = MagicMock()
    connection.table.return_value = MagicMock()
    return connection
