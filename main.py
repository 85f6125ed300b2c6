import logging
import re
from typing import Any, Dict, List, Literal, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from bson import ObjectId

from addresses import is_known_address, saved_addresses
from api_client import ApiError, ApiUnavailable, StorefrontApi
from catalog import ALL_CATEGORIES, COLLECTIONS, FilterSelection, SortKey, apply_catalog, collection, related_products, stock_for_color, stock_for_size
from checkout import CheckoutRequest, compute_totals, order_payload
from config import API_URL, CORS_ORIGINS, LOG_LEVEL, PORT, PRICE_SLIDER_MAX, STORAGE_PATH
from schemas import Address, CamelModel, CartItem, Category, ContactInfo, Coupon, OrderStatus, Product, SizeStock, ColorStock, User, WishlistItem
from storage import LocalStorage
from store import StorefrontState, token_claims, token_expired
from tracking import build_timeline, dashboard_timeline

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

# App init
app = FastAPI(title="Vasstra Storefront API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

api = StorefrontApi()
state = StorefrontState(LocalStorage(STORAGE_PATH))

DEFAULT_CATEGORIES = [
    Category(name="Ethnic Wear", slug="ethnic-wear"),
    Category(name="Western Wear", slug="western-wear"),
]

DEFAULT_PAYMENT_SETTINGS = {"upiEnabled": True, "codEnabled": True, "codePaymentEnabled": True}


# Dependencies
def get_api() -> StorefrontApi:
    return api


def get_state() -> StorefrontState:
    return state


def get_token(authorization: Optional[str] = Header(None), state: StorefrontState = Depends(get_state)) -> str:
    if authorization:
        token = authorization.replace("Bearer ", "").strip()
        if token_expired(token):
            raise HTTPException(status_code=401, detail="Session expired")
        return token
    token = state.auth.token
    if not token:
        raise HTTPException(status_code=401, detail="Missing Authorization header")
    return token


def require_admin(token: str = Depends(get_token), state: StorefrontState = Depends(get_state)) -> str:
    """Pre-screens admin routes on the unverified role claim; the upstream API enforces access."""
    role = token_claims(token).get("role")
    if role is None and token == state.auth.token:
        role = state.auth.role
    if role != "admin":
        raise HTTPException(status_code=403, detail="Admin only")
    return token


# Utils
def check_id(value: str, what: str = "ID") -> str:
    if not ObjectId.is_valid(value):
        raise HTTPException(status_code=400, detail=f"Invalid {what}")
    return value


def cart_summary(state: StorefrontState) -> Dict[str, Any]:
    totals = compute_totals(state.cart.items)
    return {
        "items": state.cart.items,
        "totalItems": state.cart.total_items,
        "subtotal": totals.subtotal,
        "totalSavings": totals.savings,
        "shipping": totals.shipping,
        "total": totals.total,
    }


@app.exception_handler(ApiError)
def api_error_handler(request: Request, exc: ApiError):
    if isinstance(exc, ApiUnavailable):
        status = 503
    elif 400 <= exc.status_code < 500:
        status = exc.status_code
    else:
        status = 502
    return JSONResponse(status_code=status, content={"detail": exc.message})


# Request models
class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


class SignupRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: str = Field(..., min_length=10)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class ProfileUpdateRequest(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    phone: Optional[str] = Field(None, min_length=10)
    address: Optional[Address] = None
    add_address: Optional[Address] = None


class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1)
    size: Optional[str] = None
    color: Optional[str] = None


class UpdateCartRequest(BaseModel):
    quantity: int
    size: Optional[str] = None


class WishlistRequest(BaseModel):
    product_id: str


class CouponRequest(BaseModel):
    code: str = ""


class InquiryRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: str
    subject: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)

    @field_validator("phone")
    @classmethod
    def phone_digits(cls, v: str) -> str:
        if len(re.sub(r"\D", "", v)) < 10:
            raise ValueError("Please enter a valid phone number with at least 10 digits")
        return v


class ProductCreateRequest(CamelModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    original_price: Optional[float] = Field(None, ge=0)
    category: str
    subcategory: Optional[str] = None
    image: Optional[str] = None
    images: List[str] = []
    sizes: List[str] = []
    colors: List[str] = []
    stock: int = Field(0, ge=0)
    stock_by_size: List[SizeStock] = []
    stock_by_color: List[ColorStock] = []
    is_new_product: bool = False
    is_bestseller: bool = False
    is_summer: bool = False
    is_winter: bool = False
    is_active: bool = True


class ProductUpdateRequest(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    original_price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None
    subcategory: Optional[str] = None
    image: Optional[str] = None
    images: Optional[List[str]] = None
    sizes: Optional[List[str]] = None
    colors: Optional[List[str]] = None
    stock: Optional[int] = Field(None, ge=0)
    stock_by_size: Optional[List[SizeStock]] = None
    stock_by_color: Optional[List[ColorStock]] = None
    is_new_product: Optional[bool] = None
    is_bestseller: Optional[bool] = None
    is_summer: Optional[bool] = None
    is_winter: Optional[bool] = None
    is_active: Optional[bool] = None


class AdminUserUpdateRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    role: Optional[Literal["user", "admin"]] = None
    is_active: Optional[bool] = None


class OrderUpdateRequest(CamelModel):
    status: Optional[str] = None
    tracking_id: Optional[str] = None

    @field_validator("status")
    @classmethod
    def known_status(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if OrderStatus(v) is OrderStatus.UNKNOWN:
            raise ValueError(f"Unknown order status: {v}")
        return OrderStatus(v).value


# Routes
@app.get("/")
def root():
    return {"message": "Vasstra Storefront API running"}


@app.get("/test")
def test_upstream(api: StorefrontApi = Depends(get_api)):
    response = {
        "backend": "✅ Running",
        "api": "❌ Not Available",
        "api_url": API_URL,
        "connection_status": "Not Connected",
        "categories": [],
    }
    try:
        categories = api.list_categories()
        response["api"] = "✅ Connected & Working"
        response["connection_status"] = "Connected"
        response["categories"] = [c.name for c in categories[:10]]
    except ApiUnavailable as e:
        response["api"] = f"❌ Error: {e.message[:50]}"
    except ApiError as e:
        response["api"] = f"⚠️  Connected but Error: {e.message[:50]}"
        response["connection_status"] = "Connected"
    return response


# Catalog
@app.get("/api/shop")
def shop(
    category: str = ALL_CATEGORIES,
    min_price: float = Query(0, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    sizes: List[str] = Query([]),
    colors: List[str] = Query([]),
    sort_by: SortKey = SortKey.FEATURED,
    api: StorefrontApi = Depends(get_api),
):
    try:
        categories = api.list_categories()
    except ApiError as e:
        logger.warning(f"Categories unavailable, using defaults: {e.message}")
        categories = DEFAULT_CATEGORIES
    products = api.list_products()

    selection = FilterSelection(
        category=category,
        category_slug=None if category == ALL_CATEGORIES else category,
        price_range=(min_price, max_price if max_price is not None else float("inf")),
        sizes=sizes,
        colors=colors,
    )
    results = apply_catalog(products, selection, sort_by, categories)
    return {
        "products": results,
        "total": len(results),
        "categories": categories,
        "priceRange": [0, PRICE_SLIDER_MAX],
        "sortOptions": [s.value for s in SortKey],
    }


@app.get("/api/collections/{name}")
def collection_view(name: str, api: StorefrontApi = Depends(get_api)):
    if name not in COLLECTIONS:
        raise HTTPException(status_code=404, detail="Collection not found")
    products = collection(api.list_products(), name)
    return {"collection": name, "products": products, "total": len(products)}


@app.get("/api/products/{product_id}")
def product_detail(product_id: str, api: StorefrontApi = Depends(get_api), state: StorefrontState = Depends(get_state)):
    check_id(product_id, "product ID")
    try:
        product = api.get_product(product_id)
    except ApiError as e:
        if e.status_code == 404:
            return JSONResponse(status_code=404, content={"detail": "Product not found", "redirect": "/shop"})
        raise

    try:
        related = related_products(product, api.list_products())
    except ApiError as e:
        logger.warning(f"Related products unavailable: {e.message}")
        related = []
    try:
        size_chart = api.size_chart(product_id)
    except ApiError as e:
        logger.warning(f"Size chart unavailable for {product_id}: {e.message}")
        size_chart = None

    state.recently_viewed.add(product)
    return {
        "product": product,
        "stockBySize": {size: stock_for_size(product, size) for size in product.sizes},
        "stockByColor": {color: stock_for_color(product, color) for color in product.colors},
        "related": related,
        "sizeChart": size_chart,
        "inWishlist": state.wishlist.contains(product.id),
        "recentlyViewed": state.recently_viewed.recent(exclude_id=product.id),
    }


# Order tracking
def _track(tracking_id: str, api: StorefrontApi):
    tracking_id = tracking_id.strip()
    if not tracking_id:
        raise HTTPException(status_code=400, detail="Please enter a tracking ID")
    try:
        order = api.track_order(tracking_id)
    except ApiUnavailable:
        raise HTTPException(status_code=502, detail="Failed to fetch order details")
    except ApiError as e:
        if e.status_code >= 500:
            raise HTTPException(status_code=502, detail="Failed to fetch order details")
        raise HTTPException(status_code=e.status_code, detail=e.upstream_message or "Order not found")
    return {"order": order, "timeline": build_timeline(order)}


@app.get("/api/track")
def track_by_query(id: str = "", api: StorefrontApi = Depends(get_api)):
    return _track(id, api)


@app.get("/api/track/{tracking_id}")
def track_order(tracking_id: str, api: StorefrontApi = Depends(get_api)):
    return _track(tracking_id, api)


# Auth
@app.post("/api/auth/login")
def login(req: LoginRequest, api: StorefrontApi = Depends(get_api), state: StorefrontState = Depends(get_state)):
    result = api.login(req.email, req.password)
    if not result["token"]:
        raise HTTPException(status_code=502, detail="Login failed")
    state.auth.login(result["token"], result["user"])
    return result


@app.post("/api/auth/signup")
def signup(req: SignupRequest, api: StorefrontApi = Depends(get_api), state: StorefrontState = Depends(get_state)):
    result = api.signup(req.email, req.password, req.name, req.phone)
    if not result["token"]:
        raise HTTPException(status_code=502, detail="Signup failed")
    state.auth.login(result["token"], result["user"])
    return result


@app.post("/api/auth/logout")
def logout(state: StorefrontState = Depends(get_state)):
    state.auth.logout()
    return {"loggedOut": True}


@app.get("/api/auth/me")
def me(state: StorefrontState = Depends(get_state)):
    user = state.auth.user
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return {"user": user}


def _merge_user(current: Optional[User], updated: User) -> User:
    if current is None:
        return updated
    merged = current.model_dump(by_alias=True)
    merged.update(updated.model_dump(by_alias=True, exclude_unset=True))
    return User.model_validate(merged)


@app.put("/api/auth/profile")
def update_profile(
    req: ProfileUpdateRequest,
    token: str = Depends(get_token),
    api: StorefrontApi = Depends(get_api),
    state: StorefrontState = Depends(get_state),
):
    updates = req.model_dump(mode="json", by_alias=True, exclude_none=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No updates provided")
    user = _merge_user(state.auth.user, api.update_profile(token, updates))
    state.auth.update_user(user, token)
    return {"user": user}


@app.post("/api/auth/forgot-password")
def forgot_password(req: ForgotPasswordRequest, api: StorefrontApi = Depends(get_api)):
    return {"message": api.forgot_password(req.email) or "If the email exists, a reset link has been sent"}


@app.post("/api/auth/reset-password")
def reset_password(req: ResetPasswordRequest, api: StorefrontApi = Depends(get_api)):
    return {"message": api.reset_password(req.token, req.password) or "Password reset successful"}


# Cart
@app.get("/api/cart")
def get_cart(state: StorefrontState = Depends(get_state)):
    return cart_summary(state)


@app.post("/api/cart")
def add_to_cart(req: AddToCartRequest, api: StorefrontApi = Depends(get_api), state: StorefrontState = Depends(get_state)):
    check_id(req.product_id, "product ID")
    product = api.get_product(req.product_id)
    if product.sizes:
        if not req.size:
            raise HTTPException(status_code=400, detail="Please select a size")
        if stock_for_size(product, req.size) == 0:
            raise HTTPException(status_code=400, detail=f"Size {req.size} is out of stock")
    if product.colors and not req.color:
        raise HTTPException(status_code=400, detail="Please select a color")
    if req.color and stock_for_color(product, req.color) == 0:
        raise HTTPException(status_code=400, detail=f"Color {req.color} is out of stock")

    state.cart.add(CartItem(
        id=product.id,
        name=product.name,
        price=product.price,
        original_price=product.original_price,
        image=product.image,
        size=req.size,
        color=req.color,
        category=product.category,
        quantity=req.quantity,
    ))
    return cart_summary(state)


@app.put("/api/cart/items/{product_id}")
def update_cart_item(product_id: str, req: UpdateCartRequest, state: StorefrontState = Depends(get_state)):
    if not state.cart.update_quantity(product_id, req.quantity, req.size):
        raise HTTPException(status_code=404, detail="Item not in cart")
    return cart_summary(state)


@app.delete("/api/cart/items/{product_id}")
def remove_cart_item(product_id: str, size: Optional[str] = None, state: StorefrontState = Depends(get_state)):
    if not state.cart.remove(product_id, size):
        raise HTTPException(status_code=404, detail="Item not in cart")
    return cart_summary(state)


@app.delete("/api/cart")
def clear_cart(state: StorefrontState = Depends(get_state)):
    state.cart.clear()
    return cart_summary(state)


# Wishlist
def _wishlist_item(product: Product) -> WishlistItem:
    return WishlistItem(
        id=product.id,
        name=product.name,
        price=product.price,
        original_price=product.original_price,
        image=product.image,
        category=product.category,
        discount=product.discount,
    )


@app.get("/api/wishlist")
def get_wishlist(state: StorefrontState = Depends(get_state)):
    return {"items": state.wishlist.items, "totalItems": len(state.wishlist.items)}


@app.post("/api/wishlist")
def add_to_wishlist(req: WishlistRequest, api: StorefrontApi = Depends(get_api), state: StorefrontState = Depends(get_state)):
    check_id(req.product_id, "product ID")
    if not state.wishlist.contains(req.product_id):
        state.wishlist.add(_wishlist_item(api.get_product(req.product_id)))
    return {"items": state.wishlist.items, "totalItems": len(state.wishlist.items)}


@app.post("/api/wishlist/{product_id}/toggle")
def toggle_wishlist(product_id: str, api: StorefrontApi = Depends(get_api), state: StorefrontState = Depends(get_state)):
    if state.wishlist.contains(product_id):
        state.wishlist.remove(product_id)
        return {"inWishlist": False, "totalItems": len(state.wishlist.items)}
    check_id(product_id, "product ID")
    state.wishlist.add(_wishlist_item(api.get_product(product_id)))
    return {"inWishlist": True, "totalItems": len(state.wishlist.items)}


@app.delete("/api/wishlist/{product_id}")
def remove_from_wishlist(product_id: str, state: StorefrontState = Depends(get_state)):
    if not state.wishlist.remove(product_id):
        raise HTTPException(status_code=404, detail="Item not in wishlist")
    return {"items": state.wishlist.items, "totalItems": len(state.wishlist.items)}


@app.get("/api/recently-viewed")
def recently_viewed(exclude: Optional[str] = None, limit: int = Query(4, ge=1, le=10), state: StorefrontState = Depends(get_state)):
    return {"items": state.recently_viewed.recent(exclude_id=exclude, limit=limit)}


# Checkout
@app.get("/api/checkout/addresses")
def checkout_addresses(token: str = Depends(get_token), state: StorefrontState = Depends(get_state)):
    return {"addresses": saved_addresses(state.auth.user)}


def _validate_coupon(code: str, subtotal: float, api: StorefrontApi) -> Coupon:
    code = code.strip()
    if not code:
        raise HTTPException(status_code=400, detail="Please enter a coupon code")
    try:
        return api.validate_coupon(code, subtotal)
    except ApiUnavailable:
        raise HTTPException(status_code=502, detail="Failed to validate coupon")
    except ApiError as e:
        if e.status_code >= 500:
            raise HTTPException(status_code=502, detail="Failed to validate coupon")
        raise HTTPException(status_code=e.status_code, detail=e.upstream_message or "Invalid coupon code")


@app.post("/api/checkout/coupon")
def apply_coupon(req: CouponRequest, api: StorefrontApi = Depends(get_api), state: StorefrontState = Depends(get_state)):
    coupon = _validate_coupon(req.code, state.cart.subtotal, api)
    return {"coupon": coupon, "totals": compute_totals(state.cart.items, coupon)}


@app.post("/api/checkout")
def place_order(
    req: CheckoutRequest,
    token: str = Depends(get_token),
    api: StorefrontApi = Depends(get_api),
    state: StorefrontState = Depends(get_state),
):
    items = list(state.cart.items)
    if not items:
        raise HTTPException(status_code=400, detail="Your cart is empty")
    coupon = _validate_coupon(req.coupon_code, state.cart.subtotal, api) if req.coupon_code else None
    totals = compute_totals(items, coupon)

    address_saved = False
    new_address = req.shipping_address.as_address()
    if req.save_address and not is_known_address(new_address, saved_addresses(state.auth.user)):
        try:
            updated = api.update_profile(token, {
                "addAddress": new_address.model_dump(mode="json", by_alias=True, exclude_none=True),
                "phone": req.shipping_address.phone,
            })
            address_saved = state.auth.update_user(_merge_user(state.auth.user, updated), token)
        except ApiError as e:
            logger.warning(f"Failed to save address: {e.message}")

    payload = order_payload(items, req.shipping_address, totals, req.payment_method, req.upi_transaction_id, coupon)
    order = api.create_order(token, payload)
    state.cart.clear()
    logger.info(f"Order {order.id} placed for {totals.total}")
    return {"orderId": order.id, "order": order, "totals": totals, "addressSaved": address_saved}


# Orders
@app.get("/api/orders")
def my_orders(token: str = Depends(get_token), api: StorefrontApi = Depends(get_api)):
    orders = api.my_orders(token)
    return {"orders": orders, "total": len(orders)}


@app.get("/api/orders/{order_id}/timeline")
def order_timeline(order_id: str, token: str = Depends(get_token), api: StorefrontApi = Depends(get_api)):
    for order in api.my_orders(token):
        if order.id == order_id:
            return {"order": order, "timeline": dashboard_timeline(order)}
    raise HTTPException(status_code=404, detail="Order not found")


# Content
@app.get("/api/contact")
def contact(api: StorefrontApi = Depends(get_api)):
    try:
        return {"contact": api.contact()}
    except ApiError as e:
        logger.warning(f"Contact info unavailable, using defaults: {e.message}")
        return {"contact": ContactInfo()}


@app.post("/api/inquiries")
def submit_inquiry(req: InquiryRequest, api: StorefrontApi = Depends(get_api)):
    result = api.submit_inquiry(req.model_dump())
    return {"submitted": True, "message": result.get("message", "Inquiry submitted")}


@app.get("/api/payment-settings")
def payment_settings(api: StorefrontApi = Depends(get_api)):
    try:
        settings = api.payment_settings()
    except ApiError as e:
        logger.warning(f"Payment settings unavailable, using defaults: {e.message}")
        settings = {}
    return {"paymentSettings": {**DEFAULT_PAYMENT_SETTINGS, **settings}}


# Admin
@app.get("/api/admin/stats")
def admin_stats(token: str = Depends(require_admin), api: StorefrontApi = Depends(get_api)):
    return {"stats": api.admin_stats(token)}


@app.get("/api/admin/users")
def admin_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    token: str = Depends(require_admin),
    api: StorefrontApi = Depends(get_api),
):
    params = {"page": page, "limit": limit}
    if search:
        params["search"] = search
    return api.admin_users(token, params)


@app.put("/api/admin/users/{user_id}")
def admin_update_user(user_id: str, req: AdminUserUpdateRequest, token: str = Depends(require_admin), api: StorefrontApi = Depends(get_api)):
    check_id(user_id, "user ID")
    updates = req.model_dump(mode="json", by_alias=True, exclude_none=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No updates provided")
    return {"user": api.admin_update_user(token, user_id, updates)}


@app.delete("/api/admin/users/{user_id}")
def admin_delete_user(user_id: str, token: str = Depends(require_admin), api: StorefrontApi = Depends(get_api)):
    check_id(user_id, "user ID")
    api.admin_delete_user(token, user_id)
    return {"deleted": True}


@app.get("/api/admin/orders")
def admin_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[str] = None,
    token: str = Depends(require_admin),
    api: StorefrontApi = Depends(get_api),
):
    params: Dict[str, Any] = {"page": page, "limit": limit}
    if status:
        if OrderStatus(status) is OrderStatus.UNKNOWN:
            raise HTTPException(status_code=400, detail=f"Unknown order status: {status}")
        params["status"] = OrderStatus(status).value
    return api.admin_orders(token, params)


@app.put("/api/admin/orders/{order_id}")
def admin_update_order(order_id: str, req: OrderUpdateRequest, token: str = Depends(require_admin), api: StorefrontApi = Depends(get_api)):
    check_id(order_id, "order ID")
    updates = req.model_dump(by_alias=True, exclude_none=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No updates provided")
    order = api.admin_update_order(token, order_id, updates)
    return {"order": order, "timeline": build_timeline(order)}


@app.get("/api/admin/products")
def admin_products(token: str = Depends(require_admin), api: StorefrontApi = Depends(get_api)):
    products = api.list_all_products(token)
    return {"products": products, "total": len(products)}


@app.post("/api/admin/products")
def create_product(req: ProductCreateRequest, token: str = Depends(require_admin), api: StorefrontApi = Depends(get_api)):
    product = api.create_product(token, req.model_dump(mode="json", by_alias=True, exclude_none=True))
    return {"product": product}


@app.put("/api/admin/products/{product_id}")
def update_product(product_id: str, req: ProductUpdateRequest, token: str = Depends(require_admin), api: StorefrontApi = Depends(get_api)):
    check_id(product_id, "product ID")
    updates = req.model_dump(mode="json", by_alias=True, exclude_none=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No updates provided")
    return {"product": api.update_product(token, product_id, updates)}


@app.delete("/api/admin/products/{product_id}")
def delete_product(product_id: str, token: str = Depends(require_admin), api: StorefrontApi = Depends(get_api)):
    check_id(product_id, "product ID")
    api.delete_product(token, product_id)
    return {"deleted": True}


@app.on_event("shutdown")
def close_api_client():
    api.close()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
