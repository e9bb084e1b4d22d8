"""SQL-like HBase client: projected, bounded selects over a table."""

from __future__ import annotations

import threading
from typing import Any

import happybase
import structlog

from hbase_registry.clients import decode, load_hbase_connection, validate_client_properties

log = structlog.get_logger()

ROW_KEY_COLUMN = "row_key"


class HBaseSqlClient:
    """Tabular read access: each result row is a flat dict with a ``row_key`` column."""

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

    def select(
        self,
        table: str,
        columns: list[str] | None = None,
        row_start: str | None = None,
        row_stop: str | None = None,
        row_prefix: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, str]]:
        """Roughly ``SELECT columns FROM table WHERE row_key in range LIMIT n``.

        Args:
            table: Table name.
            columns: ``family:qualifier`` (or whole ``family``) projections. None for all.
            row_start: Inclusive lower row-key bound.
            row_stop: Exclusive upper row-key bound.
            row_prefix: Row-key prefix; cannot be combined with a row range.
            limit: Maximum number of rows.
        """
        if row_prefix and (row_start or row_stop):
            msg = "row_prefix cannot be combined with row_start/row_stop."
            raise ValueError(msg)
        if limit is not None and limit < 1:
            msg = f"Invalid limit: {limit!r}. Must be a positive integer."
            raise ValueError(msg)

        kwargs: dict[str, Any] = {}
        if columns:
            kwargs["columns"] = columns
        if row_start:
            kwargs["row_start"] = row_start.encode("utf-8")
        if row_stop:
            kwargs["row_stop"] = row_stop.encode("utf-8")
        if row_prefix:
            kwargs["row_prefix"] = row_prefix.encode("utf-8")
        if limit is not None:
            kwargs["limit"] = limit

        connection = self._get_connection()
        try:
            results: list[dict[str, str]] = []
            for key, data in connection.table(table).scan(**kwargs):
                row = {ROW_KEY_COLUMN: decode(key)}
                row.update({decode(k): decode(v) for k, v in data.items()})
                results.append(row)
        except Exception:
            log.error("failed_to_select", cluster=self.cluster, table=table)
            raise
        return results

    def count(self, table: str, row_prefix: str | None = None) -> int:
        """Count rows, optionally restricted to a row-key prefix."""
        kwargs: dict[str, Any] = {"filter": b"FirstKeyOnlyFilter() AND KeyOnlyFilter()"}
        if row_prefix:
            kwargs["row_prefix"] = row_prefix.encode("utf-8")
        connection = self._get_connection()
        try:
            return sum(1 for _ in connection.table(table).scan(**kwargs))
        except Exception:
            log.error("failed_to_count", cluster=self.cluster, table=table)
            raise

    def close(self) -> None:
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None
