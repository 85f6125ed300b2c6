"""
HTTP client for the upstream Vasstra REST API.

Every call is a single request: no retries, no batching, no caching.
Transport failures raise ``ApiUnavailable``; non-2xx responses raise
``ApiError`` carrying the upstream ``error`` text; responses that do not
parse into the expected schema raise ``ApiError`` with status 502.
"""
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from config import API_TIMEOUT, API_URL
from schemas import AdminStats, Category, ContactInfo, Coupon, Order, Product, User

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class ApiError(Exception):
    def __init__(self, status_code: int, message: str, upstream_message: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        # text from the upstream body; None when it sent no error or message
        self.upstream_message = upstream_message


class ApiUnavailable(ApiError):
    def __init__(self, message: str = "API unreachable"):
        super().__init__(503, message)


def parse(model: Type[M], data: Any, what: str) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.error(f"Malformed {what} from API: {e}")
        raise ApiError(502, f"Malformed {what} in API response")


def parse_list(model: Type[M], data: Any, what: str) -> List[M]:
    if not isinstance(data, list):
        raise ApiError(502, f"Malformed {what} in API response")
    return [parse(model, item, what) for item in data]


class StorefrontApi:
    def __init__(self, base_url: str = API_URL, timeout: float = API_TIMEOUT, transport: Optional[httpx.BaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self.client.close()

    def request(
        self,
        method: str,
        path: str,
        token: Optional[str] = None,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            response = self.client.request(method, path, headers=headers, json=json, params=params)
        except httpx.HTTPError as e:
            logger.error(f"{method} {self.base_url}{path} failed: {e}")
            raise ApiUnavailable()

        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = None

        if response.is_error:
            message = data.get("error") or data.get("message") if isinstance(data, dict) else None
            logger.warning(f"{method} {path} -> {response.status_code} {message or response.reason_phrase}")
            raise ApiError(response.status_code, message or response.reason_phrase, message)
        if not isinstance(data, dict):
            logger.error(f"{method} {path} returned a non-object body")
            raise ApiError(502, "Unexpected API response")
        return data

    # ---------- Catalog ----------

    def list_products(self) -> List[Product]:
        data = self.request("GET", "/products")
        return parse_list(Product, data.get("products", []), "product")

    def get_product(self, product_id: str) -> Product:
        data = self.request("GET", f"/products/{product_id}")
        return parse(Product, data.get("product"), "product")

    def list_all_products(self, token: str) -> List[Product]:
        data = self.request("GET", "/products/admin/all", token=token)
        return parse_list(Product, data.get("products", []), "product")

    def create_product(self, token: str, product: Dict[str, Any]) -> Product:
        data = self.request("POST", "/products", token=token, json=product)
        return parse(Product, data.get("product"), "product")

    def update_product(self, token: str, product_id: str, updates: Dict[str, Any]) -> Product:
        data = self.request("PUT", f"/products/{product_id}", token=token, json=updates)
        return parse(Product, data.get("product"), "product")

    def delete_product(self, token: str, product_id: str) -> None:
        self.request("DELETE", f"/products/{product_id}", token=token)

    def list_categories(self) -> List[Category]:
        data = self.request("GET", "/categories")
        return parse_list(Category, data.get("categories", []), "category")

    def size_chart(self, product_id: str) -> Optional[Dict[str, Any]]:
        data = self.request("GET", f"/size-charts/product/{product_id}")
        return data.get("sizeChart")

    # ---------- Auth ----------

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self.request("POST", "/auth/login", json={"email": email, "password": password})
        return {"token": data.get("token"), "user": parse(User, data.get("user"), "user")}

    def signup(self, email: str, password: str, name: str, phone: str) -> Dict[str, Any]:
        payload = {"email": email, "password": password, "name": name, "phone": phone}
        data = self.request("POST", "/auth/signup", json=payload)
        return {"token": data.get("token"), "user": parse(User, data.get("user"), "user")}

    def update_profile(self, token: str, updates: Dict[str, Any]) -> User:
        data = self.request("PUT", "/auth/profile", token=token, json=updates)
        return parse(User, data.get("user"), "user")

    def forgot_password(self, email: str) -> str:
        data = self.request("POST", "/auth/forgot-password", json={"email": email})
        return data.get("message", "")

    def reset_password(self, token: str, password: str) -> str:
        data = self.request("POST", "/auth/reset-password", json={"token": token, "password": password})
        return data.get("message", "")

    # ---------- Orders ----------

    def validate_coupon(self, code: str, order_amount: float) -> Coupon:
        data = self.request("GET", f"/coupons/validate/{quote(code.upper(), safe='')}", params={"orderAmount": order_amount})
        return parse(Coupon, data.get("coupon"), "coupon")

    def create_order(self, token: str, payload: Dict[str, Any]) -> Order:
        data = self.request("POST", "/orders", token=token, json=payload)
        return parse(Order, data.get("order"), "order")

    def my_orders(self, token: str) -> List[Order]:
        data = self.request("GET", "/orders/my-orders", token=token)
        return parse_list(Order, data.get("orders", []), "order")

    def track_order(self, tracking_id: str) -> Order:
        data = self.request("GET", f"/orders/track/{quote(tracking_id, safe='')}")
        return parse(Order, data.get("order"), "order")

    # ---------- Content ----------

    def contact(self) -> ContactInfo:
        data = self.request("GET", "/contact")
        contact = {k: v for k, v in (data.get("contact") or {}).items() if v}
        return parse(ContactInfo, contact, "contact")

    def submit_inquiry(self, inquiry: Dict[str, Any]) -> Dict[str, Any]:
        return self.request("POST", "/inquiries/submit", json=inquiry)

    def payment_settings(self) -> Dict[str, Any]:
        data = self.request("GET", "/admin/payment-settings/public")
        return data.get("paymentSettings") or {}

    # ---------- Admin ----------

    def admin_stats(self, token: str) -> AdminStats:
        data = self.request("GET", "/admin/stats", token=token)
        return parse(AdminStats, data.get("stats", {}), "stats")

    def admin_users(self, token: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        data = self.request("GET", "/admin/users", token=token, params=params)
        return {"users": parse_list(User, data.get("users", []), "user"), "pagination": data.get("pagination")}

    def admin_update_user(self, token: str, user_id: str, updates: Dict[str, Any]) -> User:
        data = self.request("PUT", f"/admin/users/{user_id}", token=token, json=updates)
        return parse(User, data.get("user"), "user")

    def admin_delete_user(self, token: str, user_id: str) -> None:
        self.request("DELETE", f"/admin/users/{user_id}", token=token)

    def admin_orders(self, token: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        data = self.request("GET", "/admin/orders", token=token, params=params)
        return {"orders": parse_list(Order, data.get("orders", []), "order"), "pagination": data.get("pagination")}

    def admin_update_order(self, token: str, order_id: str, updates: Dict[str, Any]) -> Order:
        data = self.request("PUT", f"/admin/orders/{order_id}", token=token, json=updates)
        return parse(Order, data.get("order"), "order")
