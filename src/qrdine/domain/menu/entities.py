from __future__ import annotations

from dataclasses import dataclass, field

from qrdine.domain.common.ids import CategoryId, MenuItemId, PriceVariantId

DEFAULT_PREP_TIME_MINUTES = 15


@dataclass(frozen=True)
class LocalizedText:
    en: str
    ar: str


@dataclass(frozen=True)
class Category:
    category_id: CategoryId
    name: LocalizedText
    display_order: int = 0


@dataclass(frozen=True)
class PriceVariant:
    price_id: PriceVariantId
    item_id: MenuItemId
    size: LocalizedText
    price: float

    def __post_init__(self) -> None:
        if self.price < 0:
            raise ValueError("price must be >= 0")


@dataclass(frozen=True)
class MenuItem:
    item_id: MenuItemId
    name: LocalizedText
    description: LocalizedText | None
    category_id: CategoryId | None
    is_available: bool
    prep_time_minutes: int = DEFAULT_PREP_TIME_MINUTES
    variants: list[PriceVariant] = field(default_factory=list)
    image_url: str | None = None

    def __post_init__(self) -> None:
        if not self.name.en.strip() and not self.name.ar.strip():
            raise ValueError("name must be non-empty")
        for variant in self.variants:
            if variant.item_id != self.item_id:
                raise ValueError("price variant must belong to its menu item")

    @property
    def is_priced(self) -> bool:
        return bool(self.variants)

    @property
    def default_variant(self) -> PriceVariant | None:
        return self.variants[0] if self.variants else None

    def variant(self, price_id: PriceVariantId | str | None) -> PriceVariant | None:
        if price_id is None:
            return None
        for candidate in self.variants:
            if candidate.price_id == price_id:
                return candidate
        return None


def find_water_item(items: list[MenuItem]) -> MenuItem | None:
    for item in items:
        if "water" in item.name.en.lower() or "ماء" in item.name.ar:
            return item
    return None
