"""Administrative HBase client: table lifecycle and schema inspection."""

from __future__ import annotations

import threading
from typing import Any

import happybase
import structlog

from hbase_registry.clients import decode, load_hbase_connection, validate_client_properties

log = structlog.get_logger()


class HBaseAdminClient:
    """Table management operations against one cluster."""

    def __init__(self, cluster: str, properties: dict[str, str]) -> None:
        validate_client_properties(cluster, properties)
        self.cluster = cluster
        self.properties = dict(properties)
        self._connection: happybase.Connection | None = None
        self._lock = threading.Lock()

    def _get_connection(self) -> happybase.Connection:
        with self._lock:
            if self._connection is None:
                self._connection = load_hbase_connection(self.properties)
            return self._connection

    def list_tables(self) -> list[str]:
        connection = self._get_connection()
        try:
            tables = connection.tables()
        except Exception:
            log.error("failed_to_list_tables", cluster=self.cluster)
            raise
        return sorted(decode(t) for t in tables)

    def create_table(self, table: str, families: dict[str, dict[str, Any]]) -> None:
        """Create a table.

        Args:
            table: Table name.
            families: Column family name to happybase family options
                (e.g. ``{"cf": {"max_versions": 3}}``).
        """
        if not families:
            msg = f"Table {table!r} needs at least one column family."
            raise ValueError(msg)
        connection = self._get_connection()
        try:
            connection.create_table(table, families)
        except Exception:
            log.error("failed_to_create_table", cluster=self.cluster, table=table)
            raise
        log.info("table_created", cluster=self.cluster, table=table, families=sorted(families))

    def delete_table(self, table: str, disable: bool = True) -> None:
        connection = self._get_connection()
        try:
            connection.delete_table(table, disable=disable)
        except Exception:
            log.error("failed_to_delete_table", cluster=self.cluster, table=table)
            raise
        log.info("table_deleted", cluster=self.cluster, table=table)

    def enable_table(self, table: str) -> None:
        connection = self._get_connection()
        try:
            connection.enable_table(table)
        except Exception:
            log.error("failed_to_enable_table", cluster=self.cluster, table=table)
            raise

    def disable_table(self, table: str) -> None:
        connection = self._get_connection()
        try:
            connection.disable_table(table)
        except Exception:
            log.error("failed_to_disable_table", cluster=self.cluster, table=table)
            raise

    def is_table_enabled(self, table: str) -> bool:
        connection = self._get_connection()
        try:
            return bool(connection.is_table_enabled(table))
        except Exception:
            log.error("failed_to_check_table_state", cluster=self.cluster, table=table)
            raise

    def get_families(self, table: str) -> dict[str, dict[str, Any]]:
        """Return the column family descriptors of a table keyed by family name."""
        connection = self._get_connection()
        try:
            families = connection.table(table).families()
        except Exception:
            log.error("failed_to_get_families", cluster=self.cluster, table=table)
            raise
        return {decode(name): dict(options) for name, options in families.items()}

    def close(self) -> None:
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None
