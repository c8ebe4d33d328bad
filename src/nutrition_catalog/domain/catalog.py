"""Domain models for catalog items."""

from dataclasses import dataclass
from enum import Enum
from uuid import uuid4

NUTRIENT_FIELDS = ("calories", "protein", "carbs", "fat", "fiber", "sugar")


class FoodCategory(str, Enum):
    """Closed set of food categories."""

    MEAT = "meat"
    DAIRY = "dairy"
    GRAINS = "grains"
    FRUITS = "fruits"
    VEGETABLES = "vegetables"
    NUTS = "nuts"
    BEVERAGES = "beverages"
    SNACKS = "snacks"
    CUSTOM = "custom"


@dataclass(frozen=True)
class CatalogItem:
    """Food record with nutrient values per declared serving."""

    id: str
    name: str
    category: FoodCategory
    calories: float
    protein: float
    carbs: float
    fat: float
    fiber: float = 0.0
    sugar: float = 0.0
    serving_size_grams: float = 100.0
    serving_description: str = "100g"
    image_ref: str | None = None
    barcode: str | None = None
    creator_user_id: str | None = None
    creator_email: str | None = None

    def __post_init__(self) -> None:
        if not self.id.strip():
            raise ValueError("Catalog item id must not be empty")
        if not self.name.strip():
            raise ValueError("Catalog item name must not be empty")
        for field_name in NUTRIENT_FIELDS:
            if getattr(self, field_name) < 0:
                raise ValueError(f"{field_name} must be >= 0")
        if self.serving_size_grams < 0:
            raise ValueError("serving_size_grams must be >= 0")
        if self.serving_size_grams == 0 and self.has_nutrients:
            raise ValueError("serving_size_grams must be > 0 for non-zero nutrients")

    @property
    def has_nutrients(self) -> bool:
        """Return whether any nutrient value is non-zero."""
        return any(getattr(self, field_name) for field_name in NUTRIENT_FIELDS)


@dataclass(frozen=True)
class NutrientAmounts:
    """Nutrient values for a concrete weight."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    sugar: float = 0.0

    def __add__(self, other: "NutrientAmounts") -> "NutrientAmounts":
        return NutrientAmounts(
            calories=self.calories + other.calories,
            protein=self.protein + other.protein,
            carbs=self.carbs + other.carbs,
            fat=self.fat + other.fat,
            fiber=self.fiber + other.fiber,
            sugar=self.sugar + other.sugar,
        )


def new_item_id() -> str:
    """Return a fresh catalog item id."""
    return str(uuid4())


def normalize_name(name: str) -> str:
    """Lower-case and trim a food name for comparison."""
    return name.strip().lower()


def identity_key(item: CatalogItem) -> str:
    """Return the key used to detect duplicate foods across sources.

    Names are only case and whitespace normalized, so transliterated names in
    different scripts produce different keys.
    """
    name = normalize_name(item.name)
    barcode = (item.barcode or "").strip()
    if barcode:
        return f"{name}|{barcode}"
    return name


def scale_for_weight(item: CatalogItem, grams: float) -> NutrientAmounts:
    """Scale an item's per-serving nutrients to the requested weight."""
    if grams < 0:
        raise ValueError("Weight must be >= 0")
    if item.serving_size_grams == 0:
        # Only reachable when every nutrient is zero.
        return NutrientAmounts()
    ratio = grams / item.serving_size_grams
    return NutrientAmounts(
        calories=item.calories * ratio,
        protein=item.protein * ratio,
        carbs=item.carbs * ratio,
        fat=item.fat * ratio,
        fiber=item.fiber * ratio,
        sugar=item.sugar * ratio,
    )
