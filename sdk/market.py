# sdk/market.py
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

import httpx
import requests
from rich import print

_ID_RE = re.compile(r"^\d+$")
MAX_ID = 2**63 - 1
MIN_PRICE = Decimal("0.01")
MAX_PRICE = Decimal("99999999.99")


class ApiError(Exception):
    """A failed call. status_code is 0 when no HTTP response was received."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def __str__(self):
        return self.message


class ValidationFailed(ApiError):
    """Input rejected locally, no request was sent."""

    def __init__(self, message: str):
        super().__init__(0, message)


# ---------------------------
# Input helpers
# ---------------------------
def parse_price(raw: Any) -> float:
    if raw is None or isinstance(raw, bool):
        raise ValidationFailed("Price must be a valid positive number")
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation:
        raise ValidationFailed("Price must be a valid positive number")
    if not value.is_finite() or value < MIN_PRICE:
        raise ValidationFailed("Price must be a valid positive number")
    if value > MAX_PRICE:
        raise ValidationFailed("Price is too large")
    if value != value.quantize(MIN_PRICE):
        raise ValidationFailed("Price can have at most 2 decimal places")
    return float(value)


def _validate_id(raw: Any, message: str) -> int:
    if raw is None or isinstance(raw, bool):
        raise ValidationFailed(message)
    text = str(raw).strip()
    if not _ID_RE.fullmatch(text) or not text.isascii() or not 0 < int(text) <= MAX_ID:
        raise ValidationFailed(message)
    return int(text)


def validate_product_id(raw: Any) -> int:
    return _validate_id(raw, "Invalid product id")


def validate_category_id(raw: Any) -> int:
    return _validate_id(raw, "Invalid category id")


def normalize_optional(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    text = text.strip()
    return text or None


def _error_message(resp, fallback: str) -> str:
    try:
        body = resp.json()
    except ValueError:
        return fallback
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return fallback


class MarketClient:
    def __init__(self, base_url: str = "http://localhost:8085", user_id: Optional[int] = None,
                 timeout: int = 10, session=None):
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.user_id = None
        self.set_user(user_id)

    def set_user(self, user_id: Optional[int]):
        """Switch the acting user; None means anonymous."""
        self.user_id = user_id
        if user_id is None:
            self.session.headers.pop("X-User-Id", None)
        else:
            self.session.headers.update({"X-User-Id": str(user_id)})

    def _request(self, method: str, path: str, fallback: str, **kwargs):
        try:
            r = self.session.request(method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise ApiError(0, f"Network error: {e}")
        if not 200 <= r.status_code < 300:
            raise ApiError(r.status_code, _error_message(r, fallback))
        if r.status_code == 204 or not r.content:
            return None
        return r.json()

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/health", "Health check failed")

    # Categories
    def list_categories(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/categories", "Failed to load categories")

    # Products
    def list_products(self, category_id: Optional[int] = None) -> List[Dict[str, Any]]:
        params = {}
        if category_id is not None:
            params["categoryId"] = category_id
        return self._request("GET", "/products", "Failed to load products", params=params)

    def list_my_products(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/products/mine", "Failed to load products")

    def get_product(self, product_id) -> Dict[str, Any]:
        pid = validate_product_id(product_id)
        return self._request("GET", f"/products/{pid}", "Failed to load product")

    def create_product(self, category_id: int, title: str, price, description: Optional[str] = None,
                       location: Optional[str] = None, image_url: Optional[str] = None,
                       show_email: bool = True, show_whatsapp: bool = False,
                       show_messenger: bool = False) -> Dict[str, Any]:
        parsed_category = validate_category_id(category_id)
        parsed_price = parse_price(price)
        if not title or not title.strip():
            raise ValidationFailed("Title is required")
        payload = {
            "categoryId": parsed_category,
            "title": title.strip(),
            "price": parsed_price,
            "showEmail": show_email,
            "showWhatsapp": show_whatsapp,
            "showMessenger": show_messenger,
        }
        # unset optional fields are left out of the payload
        for key, value in (("description", description), ("location", location), ("imageUrl", image_url)):
            value = normalize_optional(value)
            if value is not None:
                payload[key] = value
        return self._request("POST", "/products", "Failed to create product", json=payload)

    def mark_sold(self, product_id) -> Dict[str, Any]:
        pid = validate_product_id(product_id)
        return self._request("PATCH", f"/products/{pid}/sold", "Failed to mark as sold")

    def delete_product(self, product_id) -> None:
        pid = validate_product_id(product_id)
        self._request("DELETE", f"/products/{pid}", "Failed to delete product")

    # Async listing, for overlapping fetches
    async def list_products_async(self, category_id: Optional[int] = None) -> List[Dict[str, Any]]:
        params = {}
        if category_id is not None:
            params["categoryId"] = category_id
        headers = {"X-User-Id": str(self.user_id)} if self.user_id is not None else {}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                r = await client.get(f"{self.base_url}/products", params=params, headers=headers)
        except httpx.HTTPError as e:
            raise ApiError(0, f"Network error: {e}")
        if not r.is_success:
            raise ApiError(r.status_code, _error_message(r, "Failed to load products"))
        return r.json()


if __name__ == "__main__":
    import argparse
    import os

    parser = argparse.ArgumentParser(description="Marketplace API client")
    parser.add_argument("--base-url", default=os.environ.get("MARKET_API_URL", "http://127.0.0.1:8085"))
    parser.add_argument("--user-id", type=int, default=os.environ.get("MARKET_USER_ID") or None,
                        help="Acting user id (sent as X-User-Id)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("health", help="Check the API is up")
    subparsers.add_parser("list-categories", help="List all categories")

    lp = subparsers.add_parser("list-products", help="List products")
    lp.add_argument("--category-id", type=int, help="Filter products by category")

    subparsers.add_parser("my-products", help="List products owned by --user-id")

    gp = subparsers.add_parser("get-product", help="Get a product by its ID")
    gp.add_argument("--product-id", required=True, help="ID of the product")

    cp = subparsers.add_parser("create-product", help="Create a new listing")
    cp.add_argument("--category-id", type=int, required=True)
    cp.add_argument("--title", required=True)
    cp.add_argument("--price", required=True)
    cp.add_argument("--description")
    cp.add_argument("--location")
    cp.add_argument("--image-url")
    cp.add_argument("--hide-email", action="store_true")
    cp.add_argument("--show-whatsapp", action="store_true")
    cp.add_argument("--show-messenger", action="store_true")

    ms = subparsers.add_parser("mark-sold", help="Mark one of your products as sold")
    ms.add_argument("--product-id", required=True)

    dp = subparsers.add_parser("delete-product", help="Delete one of your products")
    dp.add_argument("--product-id", required=True)

    args = parser.parse_args()
    c = MarketClient(base_url=args.base_url, user_id=args.user_id)

    try:
        if args.command == "health":
            print(c.health())
        elif args.command == "list-categories":
            print(c.list_categories())
        elif args.command == "list-products":
            print(c.list_products(args.category_id))
        elif args.command == "my-products":
            print(c.list_my_products())
        elif args.command == "get-product":
            print(c.get_product(args.product_id))
        elif args.command == "create-product":
            print(c.create_product(
                args.category_id, args.title, args.price,
                description=args.description, location=args.location, image_url=args.image_url,
                show_email=not args.hide_email, show_whatsapp=args.show_whatsapp,
                show_messenger=args.show_messenger,
            ))
        elif args.command == "mark-sold":
            print(c.mark_sold(args.product_id))
        elif args.command == "delete-product":
            c.delete_product(args.product_id)
            print(f"[green]Deleted product {args.product_id}[/green]")
    except ApiError as e:
        print(f"[red]Error ({e.status_code}): {e.message}[/red]")
        raise SystemExit(1)
