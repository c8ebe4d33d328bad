"""Encoding and decoding of store records."""

from datetime import datetime

from nutrition_catalog.domain.catalog import CatalogItem, FoodCategory
from nutrition_catalog.domain.errors import MalformedRecord
from nutrition_catalog.domain.submissions import PendingSubmission

_DEFAULT_SERVING_SIZE_G = 100.0
_DEFAULT_SERVING_DESCRIPTION = "100g"


def encode_item(item: CatalogItem) -> dict[str, object]:
    """Encode a catalog item into a flat record."""
    return {
        "id": item.id,
        "name": item.name,
        "category": item.category.value,
        "calories": item.calories,
        "protein": item.protein,
        "carbs": item.carbs,
        "fat": item.fat,
        "fiber": item.fiber,
        "sugar": item.sugar,
        "serving_size_grams": item.serving_size_grams,
        "serving_description": item.serving_description,
        "image_ref": item.image_ref,
        "barcode": item.barcode,
        "creator_user_id": item.creator_user_id,
        "creator_email": item.creator_email,
    }


def decode_item(
    row: dict[str, object],
    *,
    creator_id_field: str = "creator_user_id",
    creator_email_field: str = "creator_email",
) -> CatalogItem:
    """Decode a flat record into a catalog item."""
    item_id = _required_str(row, "id")
    name = _required_str(row, "name")
    category = _category(row)
    try:
        return CatalogItem(
            id=item_id,
            name=name,
            category=category,
            calories=_required_number(row, "calories"),
            protein=_required_number(row, "protein"),
            carbs=_required_number(row, "carbs"),
            fat=_required_number(row, "fat"),
            fiber=_optional_number(row, "fiber", 0.0),
            sugar=_optional_number(row, "sugar", 0.0),
            serving_size_grams=_optional_number(
                row, "serving_size_grams", _DEFAULT_SERVING_SIZE_G
            ),
            serving_description=_optional_str(row, "serving_description")
            or _DEFAULT_SERVING_DESCRIPTION,
            image_ref=_optional_str(row, "image_ref"),
            barcode=_optional_str(row, "barcode"),
            creator_user_id=_optional_str(row, creator_id_field),
            creator_email=_optional_str(row, creator_email_field),
        )
    except ValueError as exc:
        raise MalformedRecord(f"Record {item_id}: {exc}") from exc


def encode_submission(
    item: CatalogItem,
    owner_user_id: str,
    owner_email: str | None,
    created_at: datetime,
) -> dict[str, object]:
    """Encode a new pending submission record."""
    record = encode_item(item)
    record.pop("id")
    record.pop("creator_user_id")
    record.pop("creator_email")
    record.update(
        {
            "owner_user_id": owner_user_id,
            "owner_email": owner_email,
            "created_at": created_at.isoformat(),
            "verified": False,
            "verified_by": None,
            "verified_at": None,
            "rejected_by": None,
            "rejected_at": None,
            "rejection_reason": None,
        }
    )
    return record


def decode_submission(row: dict[str, object]) -> PendingSubmission:
    """Decode a pending submission record."""
    item = decode_item(
        row,
        creator_id_field="owner_user_id",
        creator_email_field="owner_email",
    )
    owner_user_id = _required_str(row, "owner_user_id")
    created_at = _parse_datetime(row.get("created_at"))
    if created_at is None:
        raise MalformedRecord(f"Record {item.id}: missing created_at")
    return PendingSubmission(
        id=item.id,
        item=item,
        owner_user_id=owner_user_id,
        owner_email=_optional_str(row, "owner_email"),
        created_at=created_at,
        verified=bool(row.get("verified", False)),
        verified_by=_optional_str(row, "verified_by"),
        verified_at=_parse_datetime(row.get("verified_at")),
        rejected_by=_optional_str(row, "rejected_by"),
        rejected_at=_parse_datetime(row.get("rejected_at")),
        rejection_reason=_optional_str(row, "rejection_reason"),
    )


def encode_approved(
    submission: PendingSubmission, verified_by: str, verified_at: datetime
) -> dict[str, object]:
    """Encode the approved catalog record derived from a submission."""
    record = encode_item(submission.item)
    record.pop("creator_user_id")
    record.pop("creator_email")
    record.update(
        {
            "id": submission.id,
            "original_creator_id": submission.owner_user_id,
            "original_creator_email": submission.owner_email,
            "verified_by": verified_by,
            "verified_at": verified_at.isoformat(),
            "created_at": submission.created_at.isoformat(),
        }
    )
    return record


def decode_approved(row: dict[str, object]) -> CatalogItem:
    """Decode an approved catalog record."""
    return decode_item(
        row,
        creator_id_field="original_creator_id",
        creator_email_field="original_creator_email",
    )


def _required_str(row: dict[str, object], key: str) -> str:
    value = row.get(key)
    if not isinstance(value, str) or not value.strip():
        raise MalformedRecord(f"Missing required field: {key}")
    return value


def _optional_str(row: dict[str, object], key: str) -> str | None:
    value = row.get(key)
    if value is None or value == "":
        return None
    return str(value)


def _category(row: dict[str, object]) -> FoodCategory:
    raw = row.get("category")
    try:
        return FoodCategory(raw)
    except ValueError as exc:
        raise MalformedRecord(f"Unknown category: {raw!r}") from exc


def _required_number(row: dict[str, object], key: str) -> float:
    value = row.get(key)
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise MalformedRecord(f"Missing required field: {key}")
    return float(value)


def _optional_number(row: dict[str, object], key: str, default: float) -> float:
    value = row.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise MalformedRecord(f"Invalid numeric field: {key}")
    return float(value)


def _parse_datetime(raw: object) -> datetime | None:
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, str) and raw:
        try:
            return datetime.fromisoformat(raw)
        except ValueError as exc:
            raise MalformedRecord(f"Invalid timestamp: {raw!r}") from exc
    return None
