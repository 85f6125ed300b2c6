"""
Catalog filtering, sorting and related-product scoring for the shop views.

All functions return new lists and leave their input untouched.
"""
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from bson import ObjectId
from pydantic import BaseModel, Field

from schemas import Category, Product

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "All"


class SortKey(str, Enum):
    FEATURED = "featured"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    NEWEST = "newest"


class FilterSelection(BaseModel):
    category: str = ALL_CATEGORIES
    category_slug: Optional[str] = None
    price_range: Tuple[float, float] = (0.0, float("inf"))
    sizes: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)


def resolve_category(selection: FilterSelection, categories: Sequence[Category]) -> Tuple[str, str]:
    """Return the (name, slug) pair the category facet matches against."""
    for cat in categories:
        if cat.name == selection.category or (selection.category_slug and cat.slug == selection.category_slug):
            return cat.name.lower(), cat.slug.lower()
    raw = (selection.category_slug or selection.category).lower()
    return raw, raw


def matches(product: Product, selection: FilterSelection, category_keys: Optional[Tuple[str, str]] = None) -> bool:
    if selection.category != ALL_CATEGORIES:
        name, slug = category_keys or resolve_category(selection, [])
        product_category = (product.category or "").lower()
        if name not in product_category and slug not in product_category:
            return False
    low, high = selection.price_range
    if product.price < low or product.price > high:
        return False
    if selection.sizes and not any(s in product.sizes for s in selection.sizes):
        return False
    if selection.colors and not any(c in product.colors for c in selection.colors):
        return False
    return True


def filter_products(
    products: Iterable[Product],
    selection: FilterSelection,
    categories: Sequence[Category] = (),
) -> List[Product]:
    category_keys = None
    if selection.category != ALL_CATEGORIES:
        category_keys = resolve_category(selection, categories)
    return [p for p in products if matches(p, selection, category_keys)]


def created_time(product: Product) -> Optional[datetime]:
    """When the product was created, from ``createdAt`` or its ObjectId."""
    if product.created_at is not None:
        created = product.created_at
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return created
    if ObjectId.is_valid(product.id):
        return ObjectId(product.id).generation_time
    return None


def sort_products(products: Iterable[Product], sort_by: SortKey = SortKey.FEATURED) -> List[Product]:
    items = list(products)
    if sort_by == SortKey.PRICE_ASC:
        return sorted(items, key=lambda p: p.price)
    if sort_by == SortKey.PRICE_DESC:
        return sorted(items, key=lambda p: p.price, reverse=True)
    if sort_by == SortKey.NEWEST:
        dated = [(created_time(p), p) for p in items]
        known = [pair for pair in dated if pair[0] is not None]
        undated = [p for created, p in dated if created is None]
        if undated:
            logger.debug(f"{len(undated)} products without creation time sorted last")
        known.sort(key=lambda pair: pair[0], reverse=True)
        return [p for _, p in known] + undated
    return items


def apply_catalog(
    products: Iterable[Product],
    selection: FilterSelection,
    sort_by: SortKey = SortKey.FEATURED,
    categories: Sequence[Category] = (),
) -> List[Product]:
    return sort_products(filter_products(products, selection, categories), sort_by)


def stock_for_size(product: Product, size: str) -> int:
    for entry in product.stock_by_size:
        if entry.size == size:
            return entry.quantity
    return 0


def stock_for_color(product: Product, color: str) -> int:
    for entry in product.stock_by_color:
        if entry.color == color:
            return entry.quantity
    return 0


COLLECTIONS = {
    "new-arrivals": lambda p: p.is_new,
    "bestsellers": lambda p: p.is_bestseller,
    "summer": lambda p: p.is_summer,
    "winter": lambda p: p.is_winter,
}


def collection(products: Iterable[Product], name: str) -> List[Product]:
    predicate = COLLECTIONS[name]
    return [p for p in products if p.is_active and predicate(p)]


def related_products(current: Product, products: Sequence[Product], limit: int = 4) -> List[Product]:
    """
    Rank other products by relevance to ``current``.

    Category and subcategory matches weigh most, then price within 20%,
    then shared season and bestseller/new badges. Products scoring zero are
    left out.
    """
    low = current.price * 0.8
    high = current.price * 1.2
    scored = []
    for product in products:
        if product.id == current.id:
            continue
        score = 0
        if product.category == current.category:
            score += 50
        if product.subcategory and product.subcategory == current.subcategory:
            score += 40
        if low <= product.price <= high:
            score += 20
        if current.is_summer and product.is_summer:
            score += 10
        if current.is_winter and product.is_winter:
            score += 10
        if product.is_bestseller:
            score += 5
        if product.is_new:
            score += 5
        if score > 0:
            scored.append((score, product))

    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [p for _, p in scored[:limit]]
