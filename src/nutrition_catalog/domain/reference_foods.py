"""Static reference foods bundled with the catalog."""

from nutrition_catalog.domain.catalog import CatalogItem, FoodCategory

REFERENCE_FOODS: tuple[CatalogItem, ...] = (
    CatalogItem(
        id="beef_boiled",
        name="Чанасан үхрийн мах",
        category=FoodCategory.MEAT,
        calories=250.0,
        protein=26.0,
        carbs=0.0,
        fat=15.0,
    ),
    CatalogItem(
        id="mutton_boiled",
        name="Чанасан хонины мах",
        category=FoodCategory.MEAT,
        calories=294.0,
        protein=25.0,
        carbs=0.0,
        fat=21.0,
    ),
    CatalogItem(
        id="chicken_breast",
        name="Тахианы цээж",
        category=FoodCategory.MEAT,
        calories=165.0,
        protein=31.0,
        carbs=0.0,
        fat=3.6,
    ),
    CatalogItem(
        id="milk",
        name="Сүү",
        category=FoodCategory.DAIRY,
        calories=42.0,
        protein=3.4,
        carbs=5.0,
        fat=1.0,
        sugar=5.0,
        serving_description="100мл",
    ),
    CatalogItem(
        id="aaruul",
        name="Ааруул",
        category=FoodCategory.DAIRY,
        calories=310.0,
        protein=31.0,
        carbs=12.0,
        fat=15.0,
        sugar=12.0,
    ),
    CatalogItem(
        id="rice_boiled",
        name="Чанасан цагаан будаа",
        category=FoodCategory.GRAINS,
        calories=130.0,
        protein=2.7,
        carbs=28.0,
        fat=0.3,
        fiber=0.4,
        sugar=0.1,
    ),
    CatalogItem(
        id="oatmeal",
        name="Овъёос",
        category=FoodCategory.GRAINS,
        calories=68.0,
        protein=2.4,
        carbs=12.0,
        fat=1.4,
        fiber=2.0,
        serving_description="100г буцалсан",
    ),
    CatalogItem(
        id="potato_boiled",
        name="Чанасан төмс",
        category=FoodCategory.VEGETABLES,
        calories=86.0,
        protein=1.7,
        carbs=20.0,
        fat=0.1,
        fiber=1.8,
        sugar=0.8,
    ),
    CatalogItem(
        id="carrot_raw",
        name="Түүхий лууван",
        category=FoodCategory.VEGETABLES,
        calories=41.0,
        protein=0.9,
        carbs=9.6,
        fat=0.2,
        fiber=2.8,
        sugar=4.7,
    ),
    CatalogItem(
        id="apple",
        name="Алим",
        category=FoodCategory.FRUITS,
        calories=52.0,
        protein=0.3,
        carbs=14.0,
        fat=0.2,
        fiber=2.4,
        sugar=10.0,
        serving_description="1 дунд зэргийн",
    ),
    CatalogItem(
        id="banana",
        name="Гадил",
        category=FoodCategory.FRUITS,
        calories=89.0,
        protein=1.1,
        carbs=23.0,
        fat=0.3,
        fiber=2.6,
        sugar=12.0,
        serving_description="1 дунд зэргийн",
    ),
    CatalogItem(
        id="chocolate",
        name="Хар шоколад",
        category=FoodCategory.SNACKS,
        calories=546.0,
        protein=4.9,
        carbs=61.0,
        fat=31.0,
        fiber=7.0,
        sugar=48.0,
    ),
)
