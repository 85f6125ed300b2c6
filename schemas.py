"""
Storefront Schemas for the Vasstra gateway

Each Pydantic model mirrors a record returned by the upstream REST API.
Payloads are parsed here, at the boundary, so a malformed response fails
loudly instead of leaking missing fields into the views.

Upstream records use camelCase keys and Mongo ids (``_id``); models accept
both the upstream keys and the python field names, and serialize back to
camelCase.

Records:
- product, category
- user, address
- order, order item, tracking update
- cart item, wishlist item, recently viewed item
- coupon, contact info, admin stats
"""
import math
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


def _pick(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class MongoRecord(CamelModel):
    """Record whose upstream id arrives as ``_id``."""

    @model_validator(mode="before")
    @classmethod
    def copy_mongo_id(cls, data: Any):
        if isinstance(data, dict) and data.get("id") is None and data.get("_id") is not None:
            data = {**data, "id": str(data["_id"])}
        return data


class OrderStatus(str, Enum):
    """Server-reported order status; any other string parses as UNKNOWN."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)

    @classmethod
    def known(cls) -> List["OrderStatus"]:
        return [s for s in cls if s is not cls.UNKNOWN]


# ---------- Catalog ----------

class Category(MongoRecord):
    id: Optional[str] = None
    name: str = Field(..., description="Display name")
    slug: str = Field("", description="URL-friendly id")


class SizeStock(CamelModel):
    size: str
    quantity: int = Field(0, ge=0)


class ColorStock(CamelModel):
    color: str
    quantity: int = Field(0, ge=0)


class Product(MongoRecord):
    """
    Product as listed by ``GET /products``
    """
    id: str = Field(..., description="Stringified ObjectId")
    name: str = Field("", description="Product name")
    price: float = Field(0, ge=0, description="Selling price in INR")
    original_price: float = Field(0, ge=0, description="List price before discount")
    discount: int = Field(0, description="Discount percentage derived from original price")
    category: str = Field("ethnic_wear", description="Category string, may embed several slugs")
    subcategory: str = ""
    description: str = ""
    image: str = ""
    images: List[str] = Field(default_factory=list)
    sizes: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    stock: int = 0
    stock_by_size: List[SizeStock] = Field(default_factory=list)
    stock_by_color: List[ColorStock] = Field(default_factory=list)
    is_active: bool = True
    is_new: bool = False
    is_bestseller: bool = False
    is_summer: bool = False
    is_winter: bool = False
    rating: Optional[float] = None
    reviews: Optional[int] = None
    created_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data: Any):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        price = _pick(data, "price") or 0
        original = _pick(data, "originalPrice", "original_price")
        if not original:
            data["originalPrice"] = price
        data["price"] = price
        images = _pick(data, "images") or []
        image = _pick(data, "image")
        if not image and images:
            data["image"] = images[0]
        if not images and image:
            data["images"] = [image]
        if _pick(data, "isNewProduct") and not _pick(data, "isNew", "is_new"):
            data["isNew"] = True
        if _pick(data, "discount") is None:
            try:
                original_num = float(original or 0)
                price_num = float(price)
            except (TypeError, ValueError):
                # left for field validation to reject
                return data
            if original_num:
                data["discount"] = int(math.floor((original_num - price_num) / original_num * 100 + 0.5))
        if data.get("isActive") is None and data.get("is_active") is None:
            data["isActive"] = True
        if isinstance(data.get("stock"), bool) or not isinstance(data.get("stock", 0), int):
            data["stock"] = 0
        return data


# ---------- Accounts ----------

class Address(MongoRecord):
    id: Optional[str] = None
    label: str = "Home"
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    is_default: bool = False


class User(MongoRecord):
    """
    Account cached after login
    """
    id: str
    name: str = ""
    email: str = Field(..., description="Email address")
    phone: Optional[str] = None
    role: Literal["user", "admin"] = "user"
    address: Optional[Address] = None
    addresses: List[Address] = Field(default_factory=list)
    profile_image: Optional[str] = None
    created_at: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


# ---------- Orders ----------

class OrderItem(CamelModel):
    product_id: Optional[str] = None
    name: str
    price: float = Field(..., ge=0)
    quantity: int = Field(1, ge=1)
    image: Optional[str] = None
    size: Optional[str] = None
    color: Optional[str] = None
    category: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def flatten_product(cls, data: Any):
        # track endpoint populates productId with {_id, name, price, image}
        if isinstance(data, dict) and isinstance(data.get("productId"), dict):
            product = data["productId"]
            data = {**data, "productId": str(product.get("_id", "")) or None}
            for key in ("name", "price", "image"):
                if data.get(key) is None and product.get(key) is not None:
                    data[key] = product[key]
        return data


class TrackingUpdate(CamelModel):
    status: str
    message: str = ""
    location: str = ""
    timestamp: Optional[datetime] = None

    @property
    def label(self) -> str:
        return self.status.replace("_", " ")


class ShippingAddress(CamelModel):
    name: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None


class Order(MongoRecord):
    """
    Order as created server-side at checkout
    Mutated only by the upstream (status and tracking updates)
    """
    id: str
    items: List[OrderItem] = Field(default_factory=list)
    subtotal: Optional[float] = None
    shipping: Optional[float] = None
    total: Optional[float] = None
    total_amount: Optional[float] = None
    status: OrderStatus = Field(OrderStatus.PENDING, description="pending | confirmed | processing | shipped | delivered | cancelled")
    shipping_address: Optional[ShippingAddress] = None
    payment_method: Optional[str] = None
    tracking_id: Optional[str] = None
    tracking_updates: List[TrackingUpdate] = Field(default_factory=list)
    estimated_delivery: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, value: Any):
        if not value:
            return OrderStatus.PENDING
        return OrderStatus(value)

    @property
    def grand_total(self) -> float:
        if self.total is not None:
            return self.total
        return self.total_amount or 0


# ---------- Client state ----------

class CartItem(CamelModel):
    id: str
    name: str
    price: float = Field(..., ge=0)
    original_price: float = Field(0, ge=0)
    image: str = ""
    size: Optional[str] = None
    color: Optional[str] = None
    category: str = ""
    quantity: int = Field(1, ge=1)


class WishlistItem(CamelModel):
    id: str
    name: str
    price: float = Field(..., ge=0)
    original_price: float = Field(0, ge=0)
    image: str = ""
    category: str = ""
    discount: int = 0


class RecentlyViewedItem(CamelModel):
    id: str
    name: str
    price: float
    original_price: float = 0
    discount: int = 0
    image: str = ""
    hover_image: str = ""
    category: str = ""
    subcategory: Optional[str] = None
    viewed_at: int = Field(..., description="Epoch milliseconds")


# ---------- Back-office ----------

class Coupon(CamelModel):
    code: str
    discount_type: str = "fixed"
    discount_value: float = 0
    discount: float = Field(0, ge=0, description="Discount for the order amount, already computed upstream")
    max_discount: Optional[float] = None


class ContactInfo(CamelModel):
    phone: str = "+91 98765 43210"
    email: str = "support@vasstra.com"
    address: str = "123 Fashion Street, Textile Hub\nMumbai, Maharashtra 400001"
    business_hours: str = "Monday - Saturday: 10:00 AM - 7:00 PM\nSunday: Closed"
    whatsapp: str = "919876543210"


class AdminStats(CamelModel):
    total_users: int = 0
    admin_users: int = 0
    active_users: int = 0
    total_orders: int = 0
    total_revenue: float = 0
