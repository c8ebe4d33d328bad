"""Catalog and asset API endpoints.

Signed-in callers are identified by their bearer token. Anonymous callers may
send an ``X-Device-Id`` header so that foods they save locally stay private to
that device; without it they can only browse.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from nutrition_catalog.api.auth import (
    current_device_id,
    current_identity,
    get_container,
    require_identity,
)
from nutrition_catalog.api.schemas import FoodSubmission  # noqa: TC001
from nutrition_catalog.domain.catalog import (
    CatalogItem,
    FoodCategory,
    scale_for_weight,
)
from nutrition_catalog.domain.errors import AssetNotFound, AuthRequired, CatalogError
from nutrition_catalog.domain.models import Identity  # noqa: TC001
from nutrition_catalog.domain.submissions import PendingSubmission

if TYPE_CHECKING:
    from nutrition_catalog.services.catalog import CatalogAggregator

_logger = logging.getLogger(__name__)

router = APIRouter(tags=["catalog"])


async def _loaded_catalog(
    request: Request, identity: Identity | None, device_id: str | None
) -> CatalogAggregator:
    aggregator = get_container(request).catalogs.for_caller(identity, device_id)
    if aggregator.snapshot.version == 0:
        await aggregator.load(identity)
    return aggregator


@router.get("/catalog")
async def list_catalog(
    request: Request,
    category: FoodCategory | None = None,
    q: str = "",
    identity: Identity | None = Depends(current_identity),
    device_id: str | None = Depends(current_device_id),
) -> dict[str, object]:
    """Return the merged catalog filtered by category and name."""
    aggregator = get_container(request).catalogs.for_caller(identity, device_id)
    snapshot = await aggregator.load(identity)
    items = aggregator.apply_filter(category=category, search_text=q)
    return {
        "version": snapshot.version,
        "items": [serialize_item(item) for item in items],
    }


@router.get("/catalog/items/{item_id}")
async def get_item(
    item_id: str,
    request: Request,
    identity: Identity | None = Depends(current_identity),
    device_id: str | None = Depends(current_device_id),
) -> dict[str, object]:
    """Return a catalog item by id."""
    aggregator = await _loaded_catalog(request, identity, device_id)
    item = aggregator.get_by_id(item_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return serialize_item(item)


@router.get("/catalog/items/{item_id}/scaled")
async def get_scaled_item(
    item_id: str,
    request: Request,
    grams: float = Query(gt=0),
    identity: Identity | None = Depends(current_identity),
    device_id: str | None = Depends(current_device_id),
) -> dict[str, object]:
    """Return an item's nutrients scaled to a weight in grams."""
    aggregator = await _loaded_catalog(request, identity, device_id)
    item = aggregator.get_by_id(item_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {"id": item.id, "grams": grams, **asdict(scale_for_weight(item, grams))}


@router.get("/catalog/barcode/{barcode}")
async def get_item_by_barcode(
    barcode: str,
    request: Request,
    identity: Identity | None = Depends(current_identity),
    device_id: str | None = Depends(current_device_id),
) -> dict[str, object]:
    """Return a catalog item by barcode."""
    aggregator = await _loaded_catalog(request, identity, device_id)
    item = aggregator.get_by_barcode(barcode)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return serialize_item(item)


@router.post("/catalog/items", status_code=status.HTTP_201_CREATED)
async def submit_item(
    payload: FoodSubmission,
    request: Request,
    identity: Identity | None = Depends(current_identity),
    device_id: str | None = Depends(current_device_id),
) -> dict[str, object]:
    """Submit a new food for moderation, saving it locally on failure.

    Anonymous callers need a device id, which owns their local store.
    """
    if identity is None and device_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Sign in or send X-Device-Id to save foods",
        )
    aggregator = await _loaded_catalog(request, identity, device_id)
    try:
        result = await aggregator.submit_new(payload.to_item(), identity)
    except AuthRequired as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)
        ) from exc
    except CatalogError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
    return {"outcome": result.outcome.value, "item": serialize_item(result.item)}


@router.delete("/catalog/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_local_item(
    item_id: str,
    request: Request,
    identity: Identity = Depends(require_identity),
) -> Response:
    """Remove one of the caller's locally saved foods."""
    aggregator = await _loaded_catalog(request, identity, None)
    if not await aggregator.remove_local_item(item_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/catalog/submissions/mine")
async def list_my_submissions(
    request: Request, identity: Identity = Depends(require_identity)
) -> dict[str, object]:
    """Return the caller's submissions that still await moderation."""
    repository = get_container(request).submission_repository
    try:
        submissions = repository.list_mine(identity.user_id)
    except CatalogError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
    return {"submissions": [serialize_submission(item) for item in submissions]}


@router.post("/assets", status_code=status.HTTP_201_CREATED)
async def upload_asset(request: Request) -> dict[str, str]:
    """Store an uploaded photograph and return its id."""
    data = await request.body()
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST)
    asset_store = get_container(request).asset_store
    asset_id = await asset_store.put(data)
    return {"id": asset_id, "url": asset_store.get_url(asset_id)}


@router.get("/assets/{asset_id}")
async def download_asset(asset_id: str, request: Request) -> Response:
    """Return photograph bytes."""
    try:
        data = await get_container(request).asset_store.get(asset_id)
    except AssetNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
    return Response(content=data, media_type="image/jpeg")


@router.delete("/assets/{asset_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_asset(
    asset_id: str,
    request: Request,
    identity: Identity = Depends(require_identity),
) -> Response:
    """Delete a photograph from every store."""
    _logger.info("Asset delete requested: id=%s user=%s", asset_id, identity.user_id)
    await get_container(request).asset_store.delete(asset_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def serialize_item(item: CatalogItem) -> dict[str, object]:
    """Serialize a catalog item for API responses."""
    payload = asdict(item)
    payload["category"] = item.category.value
    return payload


def serialize_submission(submission: PendingSubmission) -> dict[str, object]:
    """Serialize a submission for API responses."""
    return {
        "id": submission.id,
        "status": submission.status.value,
        "owner_user_id": submission.owner_user_id,
        "owner_email": submission.owner_email,
        "created_at": submission.created_at.isoformat(),
        "verified_by": submission.verified_by,
        "verified_at": _isoformat(submission.verified_at),
        "rejected_by": submission.rejected_by,
        "rejected_at": _isoformat(submission.rejected_at),
        "rejection_reason": submission.rejection_reason,
        "item": serialize_item(submission.item),
    }


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None
