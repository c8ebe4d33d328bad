"""Moderator workflow for approving or rejecting submissions."""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from nutrition_catalog.domain.errors import InvalidTransition
from nutrition_catalog.domain.models import Identity
from nutrition_catalog.domain.submissions import PendingSubmission, SubmissionStatus
from nutrition_catalog.services.approved_catalog import ApprovedCatalogRepository
from nutrition_catalog.services.submissions import SubmissionRepository

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True)
class ModeratorAllowList:
    """Fixed set of identities allowed to moderate."""

    user_ids: frozenset[str] = field(default_factory=frozenset)
    emails: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def create(
        cls, user_ids: Iterable[str] = (), emails: Iterable[str] = ()
    ) -> "ModeratorAllowList":
        """Build an allow-list, normalizing emails to lower case."""
        return cls(
            user_ids=frozenset(user_ids),
            emails=frozenset(email.strip().lower() for email in emails),
        )

    def allows(self, identity: Identity | None) -> bool:
        """Return whether the identity is on the allow-list."""
        if identity is None:
            return False
        if identity.user_id in self.user_ids:
            return True
        return bool(identity.email) and identity.email.strip().lower() in self.emails


@dataclass
class VerificationWorkflow:
    """State machine moving submissions to approved or rejected."""

    submissions: SubmissionRepository
    approved_catalog: ApprovedCatalogRepository
    moderators: ModeratorAllowList
    clock: Callable[[], datetime] = _utcnow

    def is_moderator(self, identity: Identity | None) -> bool:
        """Return whether moderation actions should be offered to the identity."""
        return self.moderators.allows(identity)

    def list_pending(self) -> list[PendingSubmission]:
        """Return the moderation queue, newest first."""
        return self.submissions.list_all_pending()

    def approve(
        self, submission: PendingSubmission, moderator_id: str
    ) -> PendingSubmission:
        """Publish a submission to the approved catalog and close it as approved.

        The two writes are not transactional. If closing fails the submission
        stays pending and approving again overwrites the same approved record.
        """
        current = self.submissions.get(submission.id)
        if current.status is SubmissionStatus.REJECTED:
            raise InvalidTransition(f"Submission {current.id} was rejected")
        if current.status is SubmissionStatus.APPROVED:
            return self._republish(current, moderator_id)
        verified_at = self.clock()
        self.approved_catalog.save_approved(
            current, verified_by=moderator_id, verified_at=verified_at
        )
        try:
            approved = self.submissions.mark_verified(
                current, verified_by=moderator_id, verified_at=verified_at
            )
        except InvalidTransition:
            latest = self.submissions.get(submission.id)
            if latest.status is not SubmissionStatus.APPROVED:
                _logger.warning(
                    "Submission %s was closed as %s during approval",
                    latest.id,
                    latest.status.value,
                )
                raise
            return self._republish(latest, moderator_id)
        _logger.info(
            "Submission approved: id=%s moderator=%s", approved.id, moderator_id
        )
        return approved

    def _republish(
        self, submission: PendingSubmission, moderator_id: str
    ) -> PendingSubmission:
        self.approved_catalog.save_approved(
            submission,
            verified_by=submission.verified_by or moderator_id,
            verified_at=submission.verified_at or self.clock(),
        )
        return submission

    def reject(
        self,
        submission: PendingSubmission,
        moderator_id: str,
        reason: str | None = None,
    ) -> PendingSubmission:
        """Close a submission without publishing it."""
        current = self.submissions.get(submission.id)
        if current.status is SubmissionStatus.APPROVED:
            raise InvalidTransition(f"Submission {current.id} was approved")
        if current.status is SubmissionStatus.REJECTED:
            return current
        try:
            rejected = self.submissions.mark_rejected(
                current,
                rejected_by=moderator_id,
                rejected_at=self.clock(),
                reason=reason,
            )
        except InvalidTransition:
            current = self.submissions.get(submission.id)
            if current.status is SubmissionStatus.REJECTED:
                return current
            raise
        _logger.info(
            "Submission rejected: id=%s moderator=%s", rejected.id, moderator_id
        )
        return rejected
