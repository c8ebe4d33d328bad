"""Domain models for user submissions awaiting moderation."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from nutrition_catalog.domain.catalog import CatalogItem


class SubmissionStatus(str, Enum):
    """Verification state of a submission."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class PendingSubmission:
    """A user-authored catalog item plus its workflow metadata."""

    id: str
    item: CatalogItem
    owner_user_id: str
    owner_email: str | None
    created_at: datetime
    verified: bool = False
    verified_by: str | None = None
    verified_at: datetime | None = None
    rejected_by: str | None = None
    rejected_at: datetime | None = None
    rejection_reason: str | None = None

    @property
    def status(self) -> SubmissionStatus:
        """Return the derived workflow state."""
        if self.verified:
            return SubmissionStatus.APPROVED
        if self.rejected_at is not None:
            return SubmissionStatus.REJECTED
        return SubmissionStatus.PENDING

    @property
    def is_terminal(self) -> bool:
        """Return whether the submission reached a final state."""
        return self.status is not SubmissionStatus.PENDING
