"""Moderation API endpoints gated by the moderator allow-list."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from fastapi import APIRouter, Depends, HTTPException, Request, status

from nutrition_catalog.api.auth import get_container, require_moderator
from nutrition_catalog.api.catalog import serialize_submission
from nutrition_catalog.api.schemas import RejectionRequest  # noqa: TC001
from nutrition_catalog.domain.errors import (
    CatalogError,
    InvalidTransition,
    NotFound,
)
from nutrition_catalog.domain.models import Identity  # noqa: TC001
from nutrition_catalog.domain.submissions import PendingSubmission

router = APIRouter(prefix="/moderation", tags=["moderation"])

_T = TypeVar("_T")


@router.get("/pending")
async def list_pending(
    request: Request, moderator: Identity = Depends(require_moderator)
) -> dict[str, object]:
    """Return every submission awaiting a decision."""
    workflow = get_container(request).verification_workflow
    submissions = _run(workflow.list_pending)
    return {"submissions": [serialize_submission(item) for item in submissions]}


@router.post("/submissions/{submission_id}/approve")
async def approve_submission(
    submission_id: str,
    request: Request,
    moderator: Identity = Depends(require_moderator),
) -> dict[str, object]:
    """Approve a submission and publish it to the shared catalog."""
    container = get_container(request)
    workflow = container.verification_workflow

    def approve() -> PendingSubmission:
        submission = container.submission_repository.get(submission_id)
        return workflow.approve(submission, moderator.user_id)

    return serialize_submission(_run(approve))


@router.post("/submissions/{submission_id}/reject")
async def reject_submission(
    submission_id: str,
    payload: RejectionRequest,
    request: Request,
    moderator: Identity = Depends(require_moderator),
) -> dict[str, object]:
    """Reject a submission."""
    container = get_container(request)
    workflow = container.verification_workflow

    def reject() -> PendingSubmission:
        submission = container.submission_repository.get(submission_id)
        return workflow.reject(submission, moderator.user_id, payload.reason)

    return serialize_submission(_run(reject))


def _run(action: Callable[[], _T]) -> _T:
    """Run a workflow action, mapping domain errors to HTTP errors."""
    try:
        return action()
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
    except InvalidTransition as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=str(exc)
        ) from exc
    except CatalogError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
