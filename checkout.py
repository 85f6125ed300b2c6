"""
Checkout arithmetic and the order payload sent upstream.
"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from config import DEFAULT_COUNTRY, FREE_SHIPPING_THRESHOLD, SHIPPING_COST
from schemas import Address, CartItem, Coupon


class ShippingForm(BaseModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = ""
    address: str = Field(..., min_length=1, description="Street address")
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    pincode: str = Field(..., min_length=1)
    country: str = DEFAULT_COUNTRY
    phone: str = Field(..., min_length=10)

    def as_address(self) -> Address:
        return Address(
            label=self.first_name or "Home",
            street=self.address,
            city=self.city,
            state=self.state,
            zip_code=self.pincode,
            country=self.country,
            phone=self.phone,
        )


class CheckoutRequest(BaseModel):
    shipping_address: ShippingForm
    payment_method: Literal["card", "upi", "cod"] = "card"
    upi_transaction_id: Optional[str] = None
    coupon_code: Optional[str] = None
    save_address: bool = True

    @model_validator(mode="after")
    def require_upi_reference(self):
        if self.payment_method == "upi" and not (self.upi_transaction_id or "").strip():
            raise ValueError("Please enter your UPI transaction ID")
        return self


class OrderTotals(BaseModel):
    subtotal: float
    shipping: float
    discount: float = 0
    total: float
    savings: float = 0


def shipping_cost(subtotal: float) -> float:
    return 0 if subtotal >= FREE_SHIPPING_THRESHOLD else SHIPPING_COST


def compute_totals(items: List[CartItem], coupon: Optional[Coupon] = None) -> OrderTotals:
    subtotal = sum(i.price * i.quantity for i in items)
    shipping = shipping_cost(subtotal)
    discount = coupon.discount if coupon else 0
    return OrderTotals(
        subtotal=subtotal,
        shipping=shipping,
        discount=discount,
        total=max(0, subtotal + shipping - discount),
        savings=sum((i.original_price - i.price) * i.quantity for i in items),
    )


def order_payload(
    items: List[CartItem],
    form: ShippingForm,
    totals: OrderTotals,
    payment_method: str,
    upi_transaction_id: Optional[str] = None,
    coupon: Optional[Coupon] = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "items": [
            i.model_dump(mode="json", by_alias=True, exclude_none=True) | {"productId": i.id}
            for i in items
        ],
        "subtotal": totals.subtotal,
        "shipping": totals.shipping,
        "totalAmount": totals.total,
        "shippingAddress": {
            "name": f"{form.first_name} {form.last_name}".strip(),
            "street": form.address,
            "city": form.city,
            "state": form.state,
            "zipCode": form.pincode,
            "country": form.country or DEFAULT_COUNTRY,
            "phone": form.phone,
        },
        "paymentMethod": payment_method,
    }
    if payment_method == "upi":
        payload["paymentDetails"] = {"transactionId": upi_transaction_id or None}
    if coupon is not None:
        payload["couponCode"] = coupon.code
        payload["discount"] = totals.discount
    return payload
