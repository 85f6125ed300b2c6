import json

import httpx

from schemas import CartItem, User

from tests.conftest import ORDER_ID, PRODUCT_IDS, USER_ID, make_product, make_token, make_user

CATEGORIES = {"categories": [{"_id": "c1", "name": "Ethnic Wear", "slug": "ethnic-wear"}, {"_id": "c2", "name": "Western Wear", "slug": "western-wear"}]}


def shipping(**fields):
    form = {"first_name": "Asha", "address": "12 MG Road", "city": "Pune", "state": "MH", "pincode": "411001", "phone": "9876543210"}
    form.update(fields)
    return form


def seed_catalog(upstream):
    upstream.add("GET", "/categories", CATEGORIES)
    upstream.add("GET", "/products", {"products": [
        make_product(PRODUCT_IDS[0], price=500, category="ethnic-wear", sizes=["S", "M"]),
        make_product(PRODUCT_IDS[1], price=1500, category="western-wear", sizes=["M"]),
        make_product(PRODUCT_IDS[2], price=2500, category="ethnic-wear", colors=["Red"]),
    ]})


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Vasstra Storefront API running"}


def test_health_reports_upstream(client, upstream):
    upstream.add("GET", "/categories", CATEGORIES)
    data = client.get("/test").json()
    assert data["connection_status"] == "Connected"
    assert data["categories"] == ["Ethnic Wear", "Western Wear"]


def test_shop_filters_and_sorts(client, upstream):
    seed_catalog(upstream)
    response = client.get("/api/shop", params={"min_price": 1000, "max_price": 3000, "sort_by": "price-desc"})
    assert response.status_code == 200
    data = response.json()
    assert [p["id"] for p in data["products"]] == [PRODUCT_IDS[2], PRODUCT_IDS[1]]
    assert data["total"] == 2


def test_shop_category_by_slug(client, upstream):
    seed_catalog(upstream)
    data = client.get("/api/shop", params={"category": "ethnic-wear", "sizes": ["M"]}).json()
    assert [p["id"] for p in data["products"]] == [PRODUCT_IDS[0]]


def test_shop_default_keeps_fetch_order(client, upstream):
    seed_catalog(upstream)
    data = client.get("/api/shop").json()
    assert [p["id"] for p in data["products"]] == PRODUCT_IDS
    assert data["priceRange"] == [0, 20000]


def test_shop_survives_missing_categories(client, upstream):
    seed_catalog(upstream)
    upstream.add("GET", "/categories", {"error": "boom"}, status=500)
    data = client.get("/api/shop", params={"category": "Western Wear"}).json()
    assert [p["id"] for p in data["products"]] == [PRODUCT_IDS[1]]
    assert [c["slug"] for c in data["categories"]] == ["ethnic-wear", "western-wear"]


def test_shop_rejects_unknown_sort(client, upstream):
    seed_catalog(upstream)
    assert client.get("/api/shop", params={"sort_by": "cheapest"}).status_code == 422


def test_shop_reports_unreachable_api(client, upstream):
    upstream.add("GET", "/categories", CATEGORIES)
    upstream.add("GET", "/products", error=httpx.ConnectError("refused"))
    response = client.get("/api/shop")
    assert response.status_code == 503


def test_malformed_products_fail_loudly(client, upstream):
    upstream.add("GET", "/categories", CATEGORIES)
    upstream.add("GET", "/products", {"products": [{"_id": "x", "price": "free"}]})
    response = client.get("/api/shop")
    assert response.status_code == 502
    assert response.json()["detail"] == "Malformed product in API response"


def test_product_detail_records_recently_viewed(client, upstream, state):
    seed_catalog(upstream)
    pid = PRODUCT_IDS[0]
    upstream.add("GET", f"/products/{pid}", {"product": make_product(pid, sizes=["S", "M"], stockBySize=[{"size": "S", "quantity": 4}])})
    upstream.add("GET", f"/size-charts/product/{pid}", {"sizeChart": None})
    data = client.get(f"/api/products/{pid}").json()
    assert data["stockBySize"] == {"S": 4, "M": 0}
    assert data["inWishlist"] is False
    assert pid not in [p["id"] for p in data["related"]]
    assert [i.id for i in state.recently_viewed.items] == [pid]


def test_product_not_found_redirects_to_shop(client, upstream):
    pid = PRODUCT_IDS[0]
    upstream.add("GET", f"/products/{pid}", {"error": "Product not found"}, status=404)
    response = client.get(f"/api/products/{pid}")
    assert response.status_code == 404
    assert response.json()["redirect"] == "/shop"


def test_product_id_is_validated(client):
    response = client.get("/api/products/not-an-id")
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid product ID"


def test_track_order_fallback_timeline(client, upstream):
    upstream.add("GET", "/orders/track/VAS123", {"order": {"_id": ORDER_ID, "trackingId": "VAS123", "status": "shipped", "items": [{"name": "Kurta", "price": 900, "quantity": 1}]}})
    data = client.get("/api/track/VAS123").json()
    assert data["timeline"]["mode"] == "status"
    assert [s["reached"] for s in data["timeline"]["steps"]] == [True, True, False]


def test_track_order_with_updates(client, upstream):
    updates = [{"status": "out_for_delivery", "message": "Out for delivery", "location": "Pune", "timestamp": "2024-05-03T09:00:00Z"}]
    upstream.add("GET", "/orders/track/VAS123", {"order": {"_id": ORDER_ID, "status": "shipped", "trackingUpdates": updates}})
    data = client.get("/api/track", params={"id": "VAS123"}).json()
    assert data["timeline"]["mode"] == "updates"
    assert data["timeline"]["updates"][0]["label"] == "out for delivery"


def test_track_order_errors(client, upstream):
    assert client.get("/api/track", params={"id": "  "}).json()["detail"] == "Please enter a tracking ID"

    upstream.add("GET", "/orders/track/NOPE", {}, status=404)
    response = client.get("/api/track/NOPE")
    assert response.status_code == 404
    assert response.json()["detail"] == "Order not found"

    upstream.add("GET", "/orders/track/GONE", {"error": "Order not found with this tracking ID"}, status=404)
    assert client.get("/api/track/GONE").json()["detail"] == "Order not found with this tracking ID"

    upstream.add("GET", "/orders/track/DOWN", error=httpx.ConnectError("refused"))
    response = client.get("/api/track/DOWN")
    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to fetch order details"


def test_login_stores_session(client, upstream, state):
    token = make_token()
    upstream.add("POST", "/auth/login", {"token": token, "user": make_user()})
    response = client.post("/api/auth/login", json={"email": "asha@example.com", "password": "secret1"})
    assert response.status_code == 200
    assert state.auth.token == token
    assert client.get("/api/auth/me").json()["user"]["email"] == "asha@example.com"

    client.post("/api/auth/logout")
    assert client.get("/api/auth/me").status_code == 401


def test_login_validates_input(client):
    assert client.post("/api/auth/login", json={"email": "nope", "password": "secret1"}).status_code == 422
    assert client.post("/api/auth/login", json={"email": "a@example.com", "password": "123"}).status_code == 422


def test_login_passes_upstream_error(client, upstream):
    upstream.add("POST", "/auth/login", {"error": "Invalid credentials"}, status=401)
    response = client.post("/api/auth/login", json={"email": "asha@example.com", "password": "secret1"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_reset_password_must_match(client):
    response = client.post("/api/auth/reset-password", json={"token": "t", "password": "secret1", "confirm_password": "secret2"})
    assert response.status_code == 422


def test_profile_update_sends_bearer_token(client, upstream, logged_in, state):
    upstream.add("PUT", "/auth/profile", {"user": make_user(name="Asha R")})
    response = client.put("/api/auth/profile", json={"name": "Asha R"})
    assert response.status_code == 200
    assert upstream.last("PUT", "/auth/profile").headers["Authorization"] == f"Bearer {logged_in}"
    assert state.auth.user.name == "Asha R"


def test_cart_flow(client, upstream, state):
    pid = PRODUCT_IDS[0]
    upstream.add("GET", f"/products/{pid}", {"product": make_product(pid, price=600, sizes=["M"], stockBySize=[{"size": "M", "quantity": 2}])})

    assert client.post("/api/cart", json={"product_id": pid}).json()["detail"] == "Please select a size"
    assert client.post("/api/cart", json={"product_id": pid, "size": "L"}).json()["detail"] == "Size L is out of stock"

    data = client.post("/api/cart", json={"product_id": pid, "size": "M", "quantity": 2}).json()
    assert data["totalItems"] == 2
    assert data["subtotal"] == 1200
    assert data["shipping"] == 0

    data = client.put(f"/api/cart/items/{pid}", json={"quantity": 1, "size": "M"}).json()
    assert data["subtotal"] == 600
    assert data["shipping"] == 99

    data = client.delete(f"/api/cart/items/{pid}", params={"size": "M"}).json()
    assert data["items"] == []
    assert client.delete(f"/api/cart/items/{pid}", params={"size": "M"}).status_code == 404


def test_wishlist_toggle(client, upstream):
    pid = PRODUCT_IDS[1]
    upstream.add("GET", f"/products/{pid}", {"product": make_product(pid)})
    assert client.post(f"/api/wishlist/{pid}/toggle").json() == {"inWishlist": True, "totalItems": 1}
    assert client.post("/api/wishlist", json={"product_id": pid}).json()["totalItems"] == 1
    assert client.post(f"/api/wishlist/{pid}/toggle").json() == {"inWishlist": False, "totalItems": 0}


def test_checkout_addresses_are_deduplicated(client, state, logged_in):
    state.auth.update_user(User.model_validate(make_user(addresses=[
        {"_id": "a1", "label": "Home", "street": "12 MG Road", "city": "Pune", "state": "MH", "zipCode": "411001"},
        {"_id": "a2", "label": "Home 2", "street": "12 mg road ", "city": "PUNE", "state": "mh", "zipCode": "411001"},
    ])), logged_in)
    data = client.get("/api/checkout/addresses").json()
    assert [a["label"] for a in data["addresses"]] == ["Home"]


def test_checkout_requires_login(client):
    response = client.post("/api/checkout", json={"shipping_address": shipping()})
    assert response.status_code == 401


def test_checkout_places_order(client, upstream, state, logged_in):
    state.cart.add(CartItem(id=PRODUCT_IDS[0], name="Kurta", price=800, original_price=1000, size="M", quantity=1))
    upstream.add("GET", "/coupons/validate/SAVE10", {"coupon": {"code": "SAVE10", "discountType": "percentage", "discountValue": 10, "discount": 80}})
    upstream.add("PUT", "/auth/profile", {"user": make_user(addresses=[{"street": "12 MG Road", "city": "Pune", "state": "MH", "zipCode": "411001"}])})
    upstream.add("POST", "/orders", {"order": {"_id": ORDER_ID, "status": "pending", "items": [{"name": "Kurta", "price": 800, "quantity": 1}]}})

    response = client.post("/api/checkout", json={
        "shipping_address": shipping(),
        "payment_method": "cod",
        "coupon_code": "save10",
    })
    assert response.status_code == 200
    data = response.json()
    assert data["orderId"] == ORDER_ID
    assert data["totals"]["total"] == 800 + 99 - 80
    assert data["addressSaved"] is True
    assert state.cart.items == []

    sent = upstream.last("POST", "/orders")
    assert sent.headers["Authorization"] == f"Bearer {logged_in}"
    assert json.loads(sent.content)["couponCode"] == "SAVE10"
    assert upstream.last("GET", "/coupons/validate/SAVE10").url.params["orderAmount"] == "800.0"


def test_checkout_skips_known_address(client, upstream, state, logged_in):
    user = User.model_validate(make_user(addresses=[{"street": "12 MG Road", "city": "Pune", "state": "MH", "zipCode": "411001"}]))
    state.auth.update_user(user, logged_in)
    state.cart.add(CartItem(id=PRODUCT_IDS[0], name="Kurta", price=1200, quantity=1))
    upstream.add("POST", "/orders", {"order": {"_id": ORDER_ID, "status": "pending"}})
    response = client.post("/api/checkout", json={
        "shipping_address": shipping(address=" 12 mg road", city="PUNE", state="mh"),
    })
    assert response.status_code == 200
    assert response.json()["addressSaved"] is False
    assert not any(r.method == "PUT" for r in upstream.requests)


def test_checkout_requires_name_and_phone(client, logged_in):
    response = client.post("/api/checkout", json={"shipping_address": shipping(first_name="", phone="")})
    assert response.status_code == 422


def test_checkout_with_empty_cart(client, logged_in):
    response = client.post("/api/checkout", json={"shipping_address": shipping()})
    assert response.status_code == 400
    assert response.json()["detail"] == "Your cart is empty"


def test_coupon_errors(client, upstream):
    assert client.post("/api/checkout/coupon", json={"code": " "}).json()["detail"] == "Please enter a coupon code"
    upstream.add("GET", "/coupons/validate/OLD", {"success": False, "error": "Coupon not found or expired"}, status=404)
    response = client.post("/api/checkout/coupon", json={"code": "old"})
    assert response.status_code == 404
    assert response.json()["detail"] == "Coupon not found or expired"

    upstream.add("GET", "/coupons/validate/GONE", {}, status=404)
    response = client.post("/api/checkout/coupon", json={"code": "gone"})
    assert response.status_code == 404
    assert response.json()["detail"] == "Invalid coupon code"


def test_order_timeline_for_dashboard(client, upstream, logged_in):
    upstream.add("GET", "/orders/my-orders", {"orders": [{"_id": ORDER_ID, "status": "processing"}]})
    data = client.get(f"/api/orders/{ORDER_ID}/timeline").json()
    assert [s["reached"] for s in data["timeline"]["steps"]] == [True, True, True, False, False]
    assert client.get("/api/orders/65a0000000000000000000ff/timeline").status_code == 404


def test_contact_falls_back_to_defaults(client, upstream):
    upstream.add("GET", "/contact", error=httpx.ConnectError("refused"))
    data = client.get("/api/contact").json()
    assert data["contact"]["email"] == "support@vasstra.com"

    upstream.add("GET", "/contact", {"contact": {"email": "help@vasstra.in", "phone": ""}})
    data = client.get("/api/contact").json()
    assert data["contact"]["email"] == "help@vasstra.in"
    assert data["contact"]["phone"] == "+91 98765 43210"


def test_inquiry_phone_needs_ten_digits(client, upstream):
    upstream.add("POST", "/inquiries/submit", {"success": True, "message": "Thanks"})
    body = {"name": "Asha", "email": "asha@example.com", "phone": "98-765", "subject": "Size", "message": "Help"}
    assert client.post("/api/inquiries", json=body).status_code == 422
    body["phone"] = "+91 98765-43210"
    assert client.post("/api/inquiries", json=body).json() == {"submitted": True, "message": "Thanks"}


def test_admin_routes_require_admin(client, logged_in):
    response = client.get("/api/admin/stats")
    assert response.status_code == 403


def test_admin_stats(client, upstream, admin_token):
    upstream.add("GET", "/admin/stats", {"stats": {"totalUsers": 3, "totalOrders": 7, "totalRevenue": 4200}})
    response = client.get("/api/admin/stats", headers={"Authorization": f"Bearer {admin_token}"})
    assert response.status_code == 200
    assert response.json()["stats"]["totalOrders"] == 7


def test_admin_order_status_update(client, upstream, admin_token):
    headers = {"Authorization": f"Bearer {admin_token}"}
    upstream.add("PUT", f"/admin/orders/{ORDER_ID}", {"order": {"_id": ORDER_ID, "status": "shipped", "trackingId": "VAS9"}})

    bad = client.put(f"/api/admin/orders/{ORDER_ID}", json={"status": "teleported"}, headers=headers)
    assert bad.status_code == 422
    assert client.put(f"/api/admin/orders/{ORDER_ID}", json={}, headers=headers).status_code == 400

    response = client.put(f"/api/admin/orders/{ORDER_ID}", json={"status": "Shipped", "trackingId": "VAS9"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["timeline"]["status"] == "shipped"
    assert json.loads(upstream.last("PUT", f"/admin/orders/{ORDER_ID}").content) == {"status": "shipped", "trackingId": "VAS9"}


def test_admin_product_update_needs_fields(client, admin_token):
    headers = {"Authorization": f"Bearer {admin_token}"}
    response = client.put(f"/api/admin/products/{PRODUCT_IDS[0]}", json={}, headers=headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "No updates provided"


def test_admin_delete_user(client, upstream, admin_token):
    upstream.add("DELETE", f"/admin/users/{USER_ID}", {"success": True})
    response = client.delete(f"/api/admin/users/{USER_ID}", headers={"Authorization": f"Bearer {admin_token}"})
    assert response.json() == {"deleted": True}
