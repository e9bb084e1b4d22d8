"""General-purpose HBase client: row reads, writes, deletes and scans."""

from __future__ import annotations

import threading
from typing import Any

import happybase
import structlog

from hbase_registry.clients import decode, load_hbase_connection, validate_client_properties

log = structlog.get_logger()


class HBaseClient:
    """Row-level data operations against one cluster."""

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

    def get_row(self, table: str, row: str, columns: list[str] | None = None) -> dict[str, str]:
        """Fetch one row as a ``{"family:qualifier": value}`` dict (empty if absent)."""
        connection = self._get_connection()
        try:
            data = connection.table(table).row(row, columns=columns)
        except Exception:
            log.error("failed_to_get_row", cluster=self.cluster, table=table, row=row)
            raise
        return {decode(k): decode(v) for k, v in data.items()}

    def put_row(self, table: str, row: str, data: dict[str, str]) -> None:
        connection = self._get_connection()
        try:
            connection.table(table).put(row, data)
        except Exception:
            log.error("failed_to_put_row", cluster=self.cluster, table=table, row=row)
            raise

    def delete_row(self, table: str, row: str, columns: list[str] | None = None) -> None:
        connection = self._get_connection()
        try:
            connection.table(table).delete(row, columns=columns)
        except Exception:
            log.error("failed_to_delete_row", cluster=self.cluster, table=table, row=row)
            raise

    def scan(
        self,
        table: str,
        row_prefix: str | None = None,
        columns: list[str] | None = None,
        limit: int | None = None,
    ) -> list[tuple[str, dict[str, str]]]:
        """Scan a table, optionally restricted to a row-key prefix.

        Returns (row key, columns) pairs in row-key order.
        """
        connection = self._get_connection()
        kwargs: dict[str, Any] = {}
        if row_prefix:
            kwargs["row_prefix"] = row_prefix.encode("utf-8")
        if columns:
            kwargs["columns"] = columns
        if limit is not None:
            kwargs["limit"] = limit
        try:
            return [
                (decode(key), {decode(k): decode(v) for k, v in data.items()})
                for key, data in connection.table(table).scan(**kwargs)
            ]
        except Exception:
            log.error("failed_to_scan", cluster=self.cluster, table=table)
            raise

    def close(self) -> None:
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None
