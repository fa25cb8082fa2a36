from typing import Dict, List, Optional, Sequence

from postgrest.exceptions import APIError
from supabase import AsyncClient, acreate_client

from sheetsync.core.config import SUPABASE_SERVICE_ROLE_KEY, SUPABASE_URL
from sheetsync.core.errors import PersistenceFailure
from sheetsync.core.logger import logger


def _apply_filters(query, eq=None, gte=None, lte=None):

    for col, val in (eq or {}).items():
        query = query.eq(col, val)

    for col, val in (gte or {}).items():
        query = query.gte(col, val)

    for col, val in (lte or {}).items():
        query = query.lte(col, val)

    return query


class SupabaseStore:
    """Thin async wrapper over the supabase query builder."""

    def __init__(self, client: AsyncClient):
        self.client = client


    async def _execute(self, action, table, query):

        try:
            return await query.execute()

        except APIError as e:
            raise PersistenceFailure(f"{action} {table}: {e.message}") from e


    async def select(self, table, columns="*", eq=None, gte=None, lte=None,
                     order: Optional[str] = None) -> List[Dict]:

        query = _apply_filters(self.client.table(table).select(columns), eq, gte, lte)

        if order:
            query = query.order(order)

        res = await self._execute("Select", table, query)

        return res.data or []


    async def delete_where(self, table, eq=None, gte=None, lte=None):

        if not (eq or gte or lte):
            raise ValueError(f"Refusing unfiltered delete on {table}")

        query = _apply_filters(self.client.table(table).delete(), eq, gte, lte)

        await self._execute("Delete", table, query)


    async def insert_batch(self, table, rows: Sequence[Dict], batch_size: int) -> int:

        inserted = 0

        for i in range(0, len(rows), batch_size):

            batch = list(rows[i:i + batch_size])

            await self._execute("Insert", table, self.client.table(table).insert(batch))

            inserted += len(batch)

        logger.info(f"Inserted {inserted} rows into {table}")

        return inserted


    async def upsert(self, table, rows, on_conflict: str):

        query = self.client.table(table).upsert(rows, on_conflict=on_conflict)

        await self._execute("Upsert", table, query)


    async def update(self, table, values: Dict, eq: Dict):

        query = _apply_filters(self.client.table(table).update(values), eq)

        await self._execute("Update", table, query)


async def create_store() -> SupabaseStore:

    if not SUPABASE_URL or not SUPABASE_SERVICE_ROLE_KEY:
        raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required")

    client = await acreate_client(SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY)

    return SupabaseStore(client)
