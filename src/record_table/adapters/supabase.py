"""Supabase data adapter over the generated PostgREST API.

``AsyncSupabaseAdapter`` speaks the ``DataClient`` protocol against a
Supabase project.  PostgREST rejections (``postgrest.APIError``) are raised
as ``DataAPIError`` so ``BoundModel`` reports them in ``errors``.  A
``None`` filter value matches SQL ``NULL``.

Usage:
    adapter = AsyncSupabaseAdapter(url="https://xyzproject.supabase.co", key="eyJ...")
    rows = await adapter.select("tags", order_by="createdAt")
    await adapter.close()
"""

import asyncio
from typing import Any

from postgrest.exceptions import APIError
from supabase import AsyncClient, acreate_client

from record_table.errors import DataAPIError


def _api_error(table: str, e: APIError) -> DataAPIError:
    return DataAPIError(table, e.message or str(e), e.code)


def _match(query: Any, filters: dict[str, Any] | None) -> Any:
    for key, value in (filters or {}).items():
        query = query.is_(key, "null") if value is None else query.eq(key, value)
    return query


class AsyncSupabaseAdapter:
    """``DataClient`` for a Supabase project.

    The client is created on first use, once, under an ``asyncio.Lock``.

    Args:
        url: Supabase project URL.
        key: Anon or service-role key.
    """

    def __init__(self, url: str, key: str) -> None:
        self._url = url
        self._key = key
        self._client: AsyncClient | None = None
        self._lock = asyncio.Lock()

    async def _get_client(self) -> AsyncClient:
        if self._client is None:
            async with self._lock:
                if self._client is None:
                    self._client = await acreate_client(self._url, self._key)
        return self._client

    async def _execute(self, table: str, query: Any) -> list[dict]:
        try:
            result = await query.execute()
        except APIError as e:
            raise _api_error(table, e) from e
        return result.data or []

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
    ) -> list[dict]:
        client = await self._get_client()
        query = _match(client.table(table).select(columns), filters)
        if order_by:
            query = query.order(order_by)
        return await self._execute(table, query)

    async def insert(self, table: str, data: dict) -> dict:
        """Insert one row; ``_``-prefixed keys are not sent."""
        client = await self._get_client()
        clean_data = {k: v for k, v in data.items() if not k.startswith("_")}
        rows = await self._execute(table, client.table(table).insert(clean_data))
        if not rows:
            raise DataAPIError(table, "insert returned no row")
        return rows[0]

    async def update(self, table: str, data: dict, filters: dict[str, Any]) -> dict:
        """Update matching rows and return the first.

        Raises:
            ValueError: If no rows match filters.
        """
        client = await self._get_client()
        clean_data = {k: v for k, v in data.items() if not k.startswith("_")}
        rows = await self._execute(
            table, _match(client.table(table).update(clean_data), filters)
        )
        if not rows:
            raise ValueError(f"No rows matched filters: {filters}")
        return rows[0]

    async def delete(self, table: str, filters: dict[str, Any]) -> None:
        client = await self._get_client()
        await self._execute(table, _match(client.table(table).delete(), filters))

    async def close(self) -> None:
        """Release the client; a never-used adapter has nothing to close."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
