"""Pydantic models for API payloads."""

from pydantic import BaseModel, Field

from nutrition_catalog.domain.catalog import CatalogItem, FoodCategory, new_item_id


class FoodSubmission(BaseModel):
    """Payload for a user-created food."""

    name: str = Field(min_length=1)
    category: FoodCategory = FoodCategory.CUSTOM
    calories: float = Field(ge=0)
    protein: float = Field(ge=0)
    carbs: float = Field(ge=0)
    fat: float = Field(ge=0)
    fiber: float = Field(default=0.0, ge=0)
    sugar: float = Field(default=0.0, ge=0)
    serving_size_grams: float = Field(default=100.0, gt=0)
    serving_description: str = "100g"
    image_ref: str | None = None
    barcode: str | None = None

    def to_item(self) -> CatalogItem:
        """Build a draft catalog item with a fresh id."""
        return CatalogItem(id=new_item_id(), **self.model_dump())


class RejectionRequest(BaseModel):
    """Payload for rejecting a submission."""

    reason: str | None = None
