"""Tests for HBaseAdminClient table management."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from hbase_registry.clients.hbase_admin import HBaseAdminClient


@pytest.fixture
def client(client_properties: dict[str, str], mock_connection: MagicMock) -> HBaseAdminClient:
    client = HBaseAdminClient("cluster1", client_properties)
    with patch("hbase_registry.clients.hbase_admin.load_hbase_connection", return_value=mock_connection):
        client._get_connection()
    return client


class TestTables:
    def test_list_tables_sorted_and_decoded(self, client: HBaseAdminClient, mock_connection: MagicMock) -> None:
        mock_connection.tables.return_value = [b"users", b"events"]
        assert client.list_tables() == ["events", "users"]

    def test_list_tables_error_propagates(self, client: HBaseAdminClient, mock_connection: MagicMock) -> None:
        mock_connection.tables.side_effect = ConnectionRefusedError()
        with pytest.raises(ConnectionRefusedError):
            client.list_tables()

    def test_create_table(self, client: HBaseAdminClient, mock_connection: MagicMock) -> None:
        client.create_table("users", {"cf": {"max_versions": 3}})
        mock_connection.create_table.assert_called_once_with("users", {"cf": {"max_versions": 3}})

    def test_create_table_requires_family(self, client: HBaseAdminClient, mock_connection: MagicMock) -> None:
        with pytest.raises(ValueError, match="at least one column family"):
            client.create_table("users", {})
        mock_connection.create_table.assert_not_called()

    def test_delete_table_disables_by_default(self, client: HBaseAdminClient, mock_connection: MagicMock) -> None:
        client.delete_table("users")
        mock_connection.delete_table.assert_called_once_with("users", disable=True)

    def test_enable_disable(self, client: HBaseAdminClient, mock_connection: MagicMock) -> None:
        client.disable_table("users")
        client.enable_table("users")
        mock_connection.disable_table.assert_called_once_with("users")
        mock_connection.enable_table.assert_called_once_with("users")

    def test_is_table_enabled(self, client: HBaseAdminClient, mock_connection: MagicMock) -> None:
        mock_connection.is_table_enabled.return_value = False
        assert client.is_table_enabled("users") is False

    def test_get_families(self, client: HBaseAdminClient, mock_connection: MagicMock) -> None:
        mock_connection.table.return_value.families.return_value = {b"cf": {"max_versions": 1}}
        assert client.get_families("users") == {"cf": {"max_versions": 1}}
