# sdk/views.py
import asyncio
from typing import Any, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel

from .market import ApiError, MarketClient, validate_product_id

# View state for the listing and detail screens. Each load takes a new request
# token; a response whose token is no longer the latest is dropped.

Status = Literal["loading", "success", "error"]


class ViewState(BaseModel):
    status: Status = "loading"
    data: Any = None
    message: Optional[str] = None


class ListingQuery(BaseModel):
    """The (categoryId, view, user) triple a listing is loaded for."""

    category_id: Optional[int] = None
    view: Literal["all", "my"] = "all"
    user_id: Optional[int] = None

    def select_category(self, category_id: Optional[int]) -> "ListingQuery":
        return self.model_copy(update={"category_id": category_id})

    def select_view(self, view: Literal["all", "my"]) -> "ListingQuery":
        if view == "my":
            return self.model_copy(update={"view": "my", "category_id": None})
        return self.model_copy(update={"view": "all"})

    def with_user(self, user_id: Optional[int]) -> "ListingQuery":
        return self.model_copy(update={"user_id": user_id})

    @property
    def empty_message(self) -> str:
        if self.view == "my":
            return "You have not created any products yet."
        return "No products found for the selected filter."


def is_owner(user_id: Optional[int], product: Optional[Dict[str, Any]]) -> bool:
    return bool(user_id is not None and product and product.get("userId") == user_id)


class _SequencedLoader:
    # whether the previous data stays visible while reloading or after a failed load
    keep_stale_data = True

    def __init__(self, client: MarketClient):
        self.client = client
        self.state = ViewState()
        self._token = 0

    def begin(self) -> int:
        self._token += 1
        self.state = ViewState(status="loading", data=self._stale_data())
        return self._token

    def _stale_data(self) -> Any:
        return self.state.data if self.keep_stale_data else None

    def is_current(self, token: int) -> bool:
        return token == self._token

    def resolve(self, token: int, data: Any) -> bool:
        if not self.is_current(token):
            return False
        self.state = ViewState(status="success", data=data)
        return True

    def fail(self, token: int, message: str) -> bool:
        if not self.is_current(token):
            return False
        self.state = ViewState(status="error", data=self._stale_data(), message=message)
        return True

    def _set_error(self, message: str):
        self.state = self.state.model_copy(update={"status": "error", "message": message})


class ListingLoader(_SequencedLoader):
    """Products (plus categories) for the home screen."""

    def __init__(self, client: MarketClient):
        super().__init__(client)
        self.categories: List[Dict[str, Any]] = []

    def _fetch_products(self, query: ListingQuery) -> List[Dict[str, Any]]:
        if query.view == "my":
            if query.user_id is None:
                return []
            return self.client.list_my_products()
        return self.client.list_products(query.category_id)

    def load(self, query: ListingQuery) -> ViewState:
        token = self.begin()
        try:
            categories = self.client.list_categories()
            products = self._fetch_products(query)
        except ApiError as e:
            self.fail(token, e.message or "Failed to load products")
        else:
            if self.resolve(token, products):
                self.categories = categories
        return self.state

    async def load_async(self, query: ListingQuery) -> ViewState:
        token = self.begin()
        if query.view == "my":
            products_call = asyncio.to_thread(self._fetch_products, query)
        else:
            products_call = self.client.list_products_async(query.category_id)
        try:
            categories, products = await asyncio.gather(
                asyncio.to_thread(self.client.list_categories),
                products_call,
            )
        except ApiError as e:
            self.fail(token, e.message or "Failed to load products")
        else:
            if self.resolve(token, products):
                self.categories = categories
        return self.state

    def mark_sold(self, query: ListingQuery, product_id: int) -> ViewState:
        if query.user_id is None:
            self._set_error("Please login first")
            return self.state
        try:
            self.client.mark_sold(product_id)
        except ApiError as e:
            self._set_error(e.message or "Failed to mark as sold")
            return self.state
        return self.load(query)

    def delete(self, query: ListingQuery, product_id: int, confirm: Callable[[], bool]) -> ViewState:
        if query.user_id is None:
            self._set_error("Please login first")
            return self.state
        if not confirm():
            return self.state
        try:
            self.client.delete_product(product_id)
        except ApiError as e:
            self._set_error(e.message or "Failed to delete product")
            return self.state
        return self.load(query)


class DetailLoader(_SequencedLoader):
    """A single product for the detail screen."""

    # mark_sold/delete act on whatever product is held here
    keep_stale_data = False

    def load(self, raw_id: Any) -> ViewState:
        token = self.begin()
        try:
            product_id = validate_product_id(raw_id)
            product = self.client.get_product(product_id)
        except ApiError as e:
            self.fail(token, e.message or "Failed to load product")
        else:
            self.resolve(token, product)
        return self.state

    @property
    def product(self) -> Optional[Dict[str, Any]]:
        return self.state.data

    def mark_sold(self) -> ViewState:
        if not self.product:
            return self.state
        try:
            updated = self.client.mark_sold(self.product["id"])
        except ApiError as e:
            self._set_error(e.message or "Failed to mark sold")
        else:
            self.state = ViewState(status="success", data=updated)
        return self.state

    def delete(self, confirm: Callable[[], bool]) -> bool:
        """Returns True once the product is gone."""
        if not self.product or not confirm():
            return False
        try:
            self.client.delete_product(self.product["id"])
        except ApiError as e:
            self._set_error(e.message or "Failed to delete product")
            return False
        self.state = ViewState(status="success", data=None)
        return True
