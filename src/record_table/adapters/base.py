"""Data client protocol definition.

Defines the ``DataClient`` Protocol that every backend adapter implements.
All methods are ``async def``: each one is a round-trip to the data API.

Usage:
    from record_table.adapters.base import DataClient

    async def do_work(client: DataClient) -> None:
        rows = await client.select("tags", "*")
        await client.insert("tags", {"name": "Rock", "slug": "rock"})
        await client.close()
"""

from typing import Any, Protocol


class DataClient(Protocol):
    """Backend interface that all adapters must implement.

    Rows are plain dicts keyed by column name.  The backend assigns ``id``
    and the ``createdAt``/``updatedAt`` timestamps on insert.
    """

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
    ) -> list[dict]:
        """Select rows from table.

        Args:
            table: Table name.
            columns: Comma-separated column names, or ``"*"``.
            filters: Optional dict of field=value filters (all must match via AND).
            order_by: Optional column name to sort by.  Without it the
                backend's natural order is preserved.

        Returns:
            List of dicts, one per row.  Empty list if no matches.
        """
        ...

    async def insert(self, table: str, data: dict) -> dict:
        """Insert row into table and return the created row.

        Returns:
            Dict representing the created row (includes id and timestamps).
        """
        ...

    async def update(self, table: str, data: dict, filters: dict[str, Any]) -> dict:
        """Update rows in table and return the first updated row.

        Raises:
            Exception: If no rows match filters.
        """
        ...

    async def delete(self, table: str, filters: dict[str, Any]) -> None:
        """Delete rows matching filters."""
        ...

    async def close(self) -> None:
        """Close the backend connection and clean up resources."""
        ...
