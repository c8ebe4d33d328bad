"""Repository for the moderator-approved catalog."""

import logging
from dataclasses import dataclass
from datetime import datetime

from nutrition_catalog.domain.catalog import CatalogItem
from nutrition_catalog.domain.errors import (
    MalformedRecord,
    RemoteReadFailed,
    RemoteWriteFailed,
)
from nutrition_catalog.domain.submissions import PendingSubmission
from nutrition_catalog.services.documents import APPROVED_COLLECTION, DocumentStore
from nutrition_catalog.services.records import decode_approved, encode_approved

_logger = logging.getLogger(__name__)


@dataclass
class ApprovedCatalogRepository:
    """Reads approved foods and stores newly approved ones."""

    store: DocumentStore

    def fetch_all(self) -> list[CatalogItem]:
        """Return approved foods, newest approval first, skipping bad records."""
        try:
            rows = self.store.query(
                APPROVED_COLLECTION, order_by="verified_at", desc=True
            )
        except Exception as exc:
            raise RemoteReadFailed("Failed to fetch approved catalog") from exc
        items = []
        for row in rows:
            try:
                items.append(decode_approved(row))
            except MalformedRecord as exc:
                _logger.warning("Dropping malformed approved food %s: %s", row.get("id"), exc)
        return items

    def get(self, item_id: str) -> CatalogItem | None:
        """Return an approved food by id, if present and well-formed."""
        try:
            row = self.store.get(APPROVED_COLLECTION, item_id)
        except Exception as exc:
            raise RemoteReadFailed(f"Failed to read approved food {item_id}") from exc
        if row is None:
            return None
        try:
            return decode_approved(row)
        except MalformedRecord as exc:
            _logger.warning("Approved food %s is malformed: %s", item_id, exc)
            return None

    def save_approved(
        self, submission: PendingSubmission, verified_by: str, verified_at: datetime
    ) -> CatalogItem:
        """Write the approved record derived from a submission."""
        record = encode_approved(submission, verified_by, verified_at)
        try:
            self.store.put(APPROVED_COLLECTION, submission.id, record)
        except Exception as exc:
            raise RemoteWriteFailed(
                f"Failed to store approved food {submission.id}"
            ) from exc
        return decode_approved(record)
