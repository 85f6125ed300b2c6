import os

API_URL = os.getenv("VASSTRA_API_URL", "http://localhost:5000/api").rstrip("/")
API_TIMEOUT = float(os.getenv("VASSTRA_API_TIMEOUT", "10"))
STORAGE_PATH = os.getenv("VASSTRA_STORAGE_PATH") or None
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
PORT = int(os.getenv("PORT", 8000))

# Storefront constants
AUTH_TOKEN_KEY = "vasstra_auth_token"
AUTH_USER_KEY = "vasstra_auth_user"
CART_KEY = "vasstra-cart"
WISHLIST_KEY = "vasstra-wishlist"
RECENTLY_VIEWED_KEY = "vasstra-recently-viewed"
RECENTLY_VIEWED_MAX = 10

PRICE_SLIDER_MAX = 20000
FREE_SHIPPING_THRESHOLD = 999
SHIPPING_COST = 99
DEFAULT_COUNTRY = "India"
