"""Repository for pending user submissions."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime

from nutrition_catalog.domain.catalog import CatalogItem
from nutrition_catalog.domain.errors import (
    AuthRequired,
    InvalidTransition,
    MalformedRecord,
    RemoteReadFailed,
    RemoteWriteFailed,
    SubmissionNotFound,
)
from nutrition_catalog.domain.submissions import PendingSubmission
from nutrition_catalog.services.documents import PENDING_COLLECTION, DocumentStore
from nutrition_catalog.services.records import decode_submission, encode_submission

_logger = logging.getLogger(__name__)

_OPEN_CONDITIONS = {"verified": False, "rejected_at": None}


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class SubmissionRepository:
    """Creates and queries pending catalog entries and closes them."""

    store: DocumentStore
    clock: Callable[[], datetime] = _utcnow

    def submit(
        self,
        draft: CatalogItem,
        owner_user_id: str | None,
        owner_email: str | None,
    ) -> PendingSubmission:
        """Persist a new pending submission for the owner."""
        if not owner_user_id:
            raise AuthRequired("A signed-in user is required to submit foods")
        created_at = self.clock()
        record = encode_submission(draft, owner_user_id, owner_email, created_at)
        try:
            submission_id = self.store.create(PENDING_COLLECTION, record)
        except Exception as exc:
            raise RemoteWriteFailed(f"Failed to submit {draft.name!r}") from exc
        _logger.info(
            "Submission created: id=%s owner=%s name=%s",
            submission_id,
            owner_user_id,
            draft.name,
        )
        item = replace(
            draft,
            id=submission_id,
            creator_user_id=owner_user_id,
            creator_email=owner_email,
        )
        return PendingSubmission(
            id=submission_id,
            item=item,
            owner_user_id=owner_user_id,
            owner_email=owner_email,
            created_at=created_at,
        )

    def list_mine(self, owner_user_id: str) -> list[PendingSubmission]:
        """Return the owner's non-terminal submissions, newest first."""
        return self._list_pending({"owner_user_id": owner_user_id})

    def list_all_pending(self) -> list[PendingSubmission]:
        """Return every non-terminal submission, newest first."""
        return self._list_pending({})

    def get(self, submission_id: str) -> PendingSubmission:
        """Return a submission by id regardless of its state."""
        try:
            row = self.store.get(PENDING_COLLECTION, submission_id)
        except Exception as exc:
            raise RemoteReadFailed(f"Failed to read submission {submission_id}") from exc
        if row is None:
            raise SubmissionNotFound(submission_id)
        try:
            return decode_submission(row)
        except MalformedRecord as exc:
            raise RemoteReadFailed(f"Submission {submission_id} is malformed") from exc

    def mark_verified(
        self, submission: PendingSubmission, verified_by: str, verified_at: datetime
    ) -> PendingSubmission:
        """Move a pending submission to the approved state."""
        _ensure_pending(submission)
        self._update(
            submission.id,
            {
                "verified": True,
                "verified_by": verified_by,
                "verified_at": verified_at.isoformat(),
            },
        )
        return replace(
            submission,
            verified=True,
            verified_by=verified_by,
            verified_at=verified_at,
        )

    def mark_rejected(
        self,
        submission: PendingSubmission,
        rejected_by: str,
        rejected_at: datetime,
        reason: str | None,
    ) -> PendingSubmission:
        """Move a pending submission to the rejected state."""
        _ensure_pending(submission)
        self._update(
            submission.id,
            {
                "verified": False,
                "rejected_by": rejected_by,
                "rejected_at": rejected_at.isoformat(),
                "rejection_reason": reason,
            },
        )
        return replace(
            submission,
            rejected_by=rejected_by,
            rejected_at=rejected_at,
            rejection_reason=reason,
        )

    def _update(self, submission_id: str, partial: dict[str, object]) -> None:
        try:
            updated = self.store.update(
                PENDING_COLLECTION,
                submission_id,
                partial,
                conditions=_OPEN_CONDITIONS,
            )
        except Exception as exc:
            raise RemoteWriteFailed(
                f"Failed to update submission {submission_id}"
            ) from exc
        if not updated:
            # Closed by someone else since it was read.
            raise InvalidTransition(f"Submission {submission_id} is no longer pending")

    def _list_pending(self, filters: dict[str, object]) -> list[PendingSubmission]:
        try:
            rows = self.store.query(
                PENDING_COLLECTION,
                filters={**filters, **_OPEN_CONDITIONS},
                order_by="created_at",
                desc=True,
            )
        except Exception as exc:
            raise RemoteReadFailed("Failed to list pending submissions") from exc
        submissions = []
        for row in rows:
            try:
                submission = decode_submission(row)
            except MalformedRecord as exc:
                _logger.warning("Dropping malformed submission %s: %s", row.get("id"), exc)
                continue
            if not submission.is_terminal:
                submissions.append(submission)
        return sorted(submissions, key=lambda item: item.created_at, reverse=True)


def _ensure_pending(submission: PendingSubmission) -> None:
    if submission.is_terminal:
        raise InvalidTransition(
            f"Submission {submission.id} is already {submission.status.value}"
        )
