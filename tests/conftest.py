"""Shared test fixtures for all test modules."""

from __future__ import annotations

import threading
from collections.abc import Iterator

import pytest

from hbase_registry.config import PropertySource
from hbase_registry.registry import close_registry


@pytest.fixture
def cluster_properties() -> dict[str, str]:
    """Two clusters: a plain one and a Kerberos-secured one."""
    return {
        "cluster1.hbase.quorum": "node1,node2,node3",
        "cluster1.hbase.zk.client.port": "2181",
        "cluster1.hbase.node.parent": "/hbase",
        "cluster2.hbase.quorum": "zk-a,zk-b",
        "cluster2.hbase.zk.client.port": "2182",
        "cluster2.hbase.node.parent": "/hbase-secure",
        "cluster2.hbase.hadoop.security.authentication": "kerberos",
        "cluster2.hbase.hbase.security.authentication": "kerberos",
        "cluster2.hbase.java.security.krb5.conf": "/etc/krb5.conf",
        "cluster2.hbase.keytab.file": "/etc/security/hbase.keytab",
        "cluster2.hbase.kerberos.principal": "hbase/admin@EXAMPLE.COM",
        "cluster2.hbase.master.kerberos.principal": "hbase/_HOST@EXAMPLE.COM",
        "cluster2.hbase.regionserver.kerberos.principal": "hbase/_HOST@EXAMPLE.COM",
    }


@pytest.fixture
def property_source(cluster_properties: dict[str, str]) -> PropertySource:
    return PropertySource(cluster_properties)


class FakeClient:
    """Stand-in client handle that records how it was built."""

    def __init__(self, cluster: str, properties: dict[str, str]) -> None:
        self.cluster = cluster
        self.properties = properties
        self.closed = False

    def close(self) -> None:
        self.closed = True


class RecordingFactory:
    """Client factory that counts constructions and can fail for chosen clusters."""

    def __init__(self, fail_for: set[str] | None = None) -> None:
        self.fail_for = set(fail_for or ())
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def __call__(self, cluster: str, properties: dict[str, str]) -> FakeClient:
        with self._lock:
            self.calls.append(cluster)
        if cluster in self.fail_for:
            msg = f"cannot reach {cluster}"
            raise ConnectionError(msg)
        return FakeClient(cluster, properties)


@pytest.fixture
def make_factory() -> type[RecordingFactory]:
    return RecordingFactory


@pytest.fixture(autouse=True)
def _reset_process_registry() -> Iterator[None]:
    yield
    close_registry()
