"""
Client-side storefront state.

One ``StorefrontState`` owns the auth session, cart, wishlist and
recently-viewed list. Routes receive it through a dependency; each part
writes itself back to ``LocalStorage`` on every change.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from jose import JWTError, jwt
from pydantic import ValidationError

from config import (
    AUTH_TOKEN_KEY,
    AUTH_USER_KEY,
    CART_KEY,
    RECENTLY_VIEWED_KEY,
    RECENTLY_VIEWED_MAX,
    WISHLIST_KEY,
)
from schemas import CartItem, Product, RecentlyViewedItem, User, WishlistItem
from storage import LocalStorage

logger = logging.getLogger(__name__)


def _load_list(storage: LocalStorage, key: str, model):
    items = []
    for raw in storage.get_json(key, []) or []:
        try:
            items.append(model.model_validate(raw))
        except ValidationError as e:
            logger.warning(f"Dropping malformed {key} entry: {e.errors()[0]['msg']}")
    return items


def token_claims(token: str) -> Dict[str, Any]:
    """Claims of a JWT without verifying its signature; {} if not a JWT."""
    try:
        return jwt.get_unverified_claims(token)
    except JWTError:
        return {}


def token_expired(token: str) -> bool:
    exp = token_claims(token).get("exp")
    if exp is None:
        return False
    return datetime.fromtimestamp(exp, tz=timezone.utc) <= datetime.now(timezone.utc)


class AuthSession:
    def __init__(self, storage: LocalStorage):
        self.storage = storage
        self._token: Optional[str] = None
        self._user: Optional[User] = None
        stored_token = storage.get_item(AUTH_TOKEN_KEY)
        stored_user = storage.get_json(AUTH_USER_KEY)
        if stored_token and stored_user:
            try:
                self._user = User.model_validate(stored_user)
                self._token = stored_token
            except ValidationError:
                logger.warning("Stored user is unreadable, clearing session")
                self.logout()

    @property
    def token(self) -> Optional[str]:
        if self._token and token_expired(self._token):
            logger.info("Session token expired, logging out")
            self.logout()
        return self._token

    @property
    def user(self) -> Optional[User]:
        return self._user if self.token else None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def role(self) -> Optional[str]:
        if self.user is not None:
            return self.user.role
        return None

    def login(self, token: str, user: User) -> None:
        self._token = token
        self._user = user
        self.storage.set_item(AUTH_TOKEN_KEY, token)
        self.storage.set_json(AUTH_USER_KEY, user.model_dump(mode="json", by_alias=True))
        logger.info(f"Logged in as {user.email}")

    def logout(self) -> None:
        self._token = None
        self._user = None
        self.storage.remove_item(AUTH_TOKEN_KEY)
        self.storage.remove_item(AUTH_USER_KEY)

    def update_user(self, user: User, for_token: Optional[str]) -> bool:
        """Store a refreshed user fetched with ``for_token``.

        Results that arrive after a logout or re-login are discarded.
        """
        if for_token is None or for_token != self._token:
            logger.info("Discarding user update for a session that is no longer current")
            return False
        self._user = user
        self.storage.set_json(AUTH_USER_KEY, user.model_dump(mode="json", by_alias=True))
        return True


class Cart:
    def __init__(self, storage: LocalStorage):
        self.storage = storage
        self.items: List[CartItem] = _load_list(storage, CART_KEY, CartItem)

    def _save(self) -> None:
        self.storage.set_json(CART_KEY, [i.model_dump(mode="json", by_alias=True) for i in self.items])

    def _find(self, product_id: str, size: Optional[str]) -> Optional[int]:
        for i, item in enumerate(self.items):
            if item.id == product_id and item.size == size:
                return i
        return None

    def add(self, item: CartItem) -> CartItem:
        index = self._find(item.id, item.size)
        if index is None:
            self.items = [*self.items, item]
            logger.info(f"Added {item.name} to cart")
            result = item
        else:
            existing = self.items[index]
            result = existing.model_copy(update={"quantity": existing.quantity + item.quantity})
            self.items = [*self.items[:index], result, *self.items[index + 1:]]
            logger.info(f"Updated {item.name} quantity in cart")
        self._save()
        return result

    def remove(self, product_id: str, size: Optional[str] = None) -> bool:
        index = self._find(product_id, size)
        if index is None:
            return False
        removed = self.items[index]
        self.items = [*self.items[:index], *self.items[index + 1:]]
        logger.info(f"Removed {removed.name} from cart")
        self._save()
        return True

    def update_quantity(self, product_id: str, quantity: int, size: Optional[str] = None) -> bool:
        if quantity < 1:
            return self.remove(product_id, size)
        index = self._find(product_id, size)
        if index is None:
            return False
        updated = self.items[index].model_copy(update={"quantity": quantity})
        self.items = [*self.items[:index], updated, *self.items[index + 1:]]
        self._save()
        return True

    def clear(self) -> None:
        self.items = []
        self._save()

    @property
    def total_items(self) -> int:
        return sum(i.quantity for i in self.items)

    @property
    def subtotal(self) -> float:
        return sum(i.price * i.quantity for i in self.items)

    @property
    def total_savings(self) -> float:
        return sum((i.original_price - i.price) * i.quantity for i in self.items)


class Wishlist:
    def __init__(self, storage: LocalStorage):
        self.storage = storage
        self.items: List[WishlistItem] = _load_list(storage, WISHLIST_KEY, WishlistItem)

    def _save(self) -> None:
        self.storage.set_json(WISHLIST_KEY, [i.model_dump(mode="json", by_alias=True) for i in self.items])

    def contains(self, product_id: str) -> bool:
        return any(i.id == product_id for i in self.items)

    def add(self, item: WishlistItem) -> bool:
        if self.contains(item.id):
            return False
        self.items = [*self.items, item]
        self._save()
        return True

    def remove(self, product_id: str) -> bool:
        remaining = [i for i in self.items if i.id != product_id]
        if len(remaining) == len(self.items):
            return False
        self.items = remaining
        self._save()
        return True

    def toggle(self, item: WishlistItem) -> bool:
        """Returns True when the item is in the wishlist afterwards."""
        if self.contains(item.id):
            self.remove(item.id)
            return False
        self.add(item)
        return True


class RecentlyViewed:
    def __init__(self, storage: LocalStorage, limit: int = RECENTLY_VIEWED_MAX):
        self.storage = storage
        self.limit = limit
        self.items: List[RecentlyViewedItem] = _load_list(storage, RECENTLY_VIEWED_KEY, RecentlyViewedItem)

    def add(self, product: Product) -> None:
        item = RecentlyViewedItem(
            id=product.id,
            name=product.name,
            price=product.price,
            original_price=product.original_price,
            discount=product.discount,
            image=product.image,
            hover_image=product.images[1] if len(product.images) > 1 else product.image,
            category=product.category,
            subcategory=product.subcategory or None,
            viewed_at=int(time.time() * 1000),
        )
        others = [i for i in self.items if i.id != product.id]
        self.items = [item, *others][: self.limit]
        self.storage.set_json(RECENTLY_VIEWED_KEY, [i.model_dump(mode="json", by_alias=True) for i in self.items])

    def recent(self, exclude_id: Optional[str] = None, limit: int = 4) -> List[RecentlyViewedItem]:
        return [i for i in self.items if i.id != exclude_id][:limit]

    def clear(self) -> None:
        self.items = []
        self.storage.set_json(RECENTLY_VIEWED_KEY, [])


class StorefrontState:
    def __init__(self, storage: Optional[LocalStorage] = None):
        self.storage = storage or LocalStorage()
        self.auth = AuthSession(self.storage)
        self.cart = Cart(self.storage)
        self.wishlist = Wishlist(self.storage)
        self.recently_viewed = RecentlyViewed(self.storage)
