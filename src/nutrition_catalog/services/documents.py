"""Remote document store interface."""

from collections.abc import Mapping
from typing import Protocol

APPROVED_COLLECTION = "approved_foods"
PENDING_COLLECTION = "pending_submissions"


class DocumentStore(Protocol):
    """Persistence interface for flat key/value records grouped in collections."""

    def create(self, collection: str, record: dict[str, object]) -> str:
        """Insert a record and return its generated id."""

    def put(self, collection: str, record_id: str, record: dict[str, object]) -> None:
        """Insert or overwrite a record under a known id."""

    def get(self, collection: str, record_id: str) -> dict[str, object] | None:
        """Return a record by id, if present."""

    def query(
        self,
        collection: str,
        filters: Mapping[str, object] | None = None,
        order_by: str | None = None,
        desc: bool = False,
    ) -> list[dict[str, object]]:
        """Return records matching every filter; a None value matches null."""

    def update(
        self,
        collection: str,
        record_id: str,
        partial: dict[str, object],
        conditions: Mapping[str, object] | None = None,
    ) -> bool:
        """Update a record only if it matches the conditions.

        Condition values follow the ``query`` filter rules. Returns whether a
        record was updated.
        """
