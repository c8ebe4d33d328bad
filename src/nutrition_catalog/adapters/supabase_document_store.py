"""Supabase-backed document store."""

from collections.abc import Mapping
from dataclasses import dataclass

from supabase import Client

from nutrition_catalog.services.documents import DocumentStore


@dataclass
class SupabaseDocumentStore(DocumentStore):
    """Supabase implementation mapping collections to tables."""

    client: Client

    def create(self, collection: str, record: dict[str, object]) -> str:
        """Insert a row and return its id."""
        response = self.client.table(collection).insert(record).execute()
        if not response.data:
            raise RuntimeError(f"Failed to create {collection} record")
        return str(response.data[0]["id"])

    def put(self, collection: str, record_id: str, record: dict[str, object]) -> None:
        """Upsert a row under a known id."""
        response = (
            self.client.table(collection)
            .upsert({**record, "id": record_id})
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to store {collection} record {record_id}")

    def get(self, collection: str, record_id: str) -> dict[str, object] | None:
        """Return a row by id, if present."""
        response = (
            self.client.table(collection)
            .select("*")
            .eq("id", record_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0]

    def query(
        self,
        collection: str,
        filters: Mapping[str, object] | None = None,
        order_by: str | None = None,
        desc: bool = False,
    ) -> list[dict[str, object]]:
        """Return rows matching equality filters, optionally ordered."""
        request = _apply_filters(self.client.table(collection).select("*"), filters)
        if order_by:
            request = request.order(order_by, desc=desc)
        response = request.execute()
        return response.data or []

    def update(
        self,
        collection: str,
        record_id: str,
        partial: dict[str, object],
        conditions: Mapping[str, object] | None = None,
    ) -> bool:
        """Update a row by id when it still matches the conditions."""
        request = self.client.table(collection).update(partial).eq("id", record_id)
        response = _apply_filters(request, conditions).execute()
        return bool(response.data)


def _apply_filters(  # type: ignore[no-untyped-def]
    request, filters: Mapping[str, object] | None
):
    for column, value in (filters or {}).items():
        if value is None:
            request = request.is_(column, "null")
        else:
            request = request.eq(column, value)
    return request
