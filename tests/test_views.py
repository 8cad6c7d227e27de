# tests/test_views.py
import asyncio

from sdk.market import ApiError
from sdk.views import DetailLoader, ListingLoader, ListingQuery, is_owner

CATEGORIES = [{"id": 1, "name": "Books"}]


class FakeClient:
    def __init__(self, products=None, delays=None):
        self.products = products or []
        self.delays = delays or {}
        self.calls = []

    def list_categories(self):
        self.calls.append("categories")
        return CATEGORIES

    def list_products(self, category_id=None):
        self.calls.append(("products", category_id))
        return [p for p in self.products if category_id is None or p["categoryId"] == category_id]

    def list_my_products(self):
        self.calls.append("mine")
        return [p for p in self.products if p["userId"] == 42]

    async def list_products_async(self, category_id=None):
        await asyncio.sleep(self.delays.get(category_id, 0))
        return self.list_products(category_id)

    def get_product(self, product_id):
        self.calls.append(("get", product_id))
        for p in self.products:
            if p["id"] == product_id:
                return p
        raise ApiError(404, "Product not found")

    def mark_sold(self, product_id):
        self.calls.append(("sold", product_id))
        product = self.get_product(product_id)
        product["isSold"] = True
        return product

    def delete_product(self, product_id):
        self.calls.append(("delete", product_id))
        self.products = [p for p in self.products if p["id"] != product_id]


def _products():
    return [
        {"id": 1, "userId": 42, "categoryId": 1, "title": "Desk", "isSold": False},
        {"id": 2, "userId": 7, "categoryId": 2, "title": "Lamp", "isSold": False},
    ]


def test_selecting_my_view_clears_category():
    q = ListingQuery(user_id=42).select_category(3)
    assert q.category_id == 3
    mine = q.select_view("my")
    assert mine.view == "my"
    assert mine.category_id is None
    assert mine.select_view("all").view == "all"
    assert mine.empty_message == "You have not created any products yet."
    assert q.empty_message == "No products found for the selected filter."


def test_is_owner():
    product = {"id": 1, "userId": 42}
    assert is_owner(42, product)
    assert not is_owner(7, product)
    assert not is_owner(None, product)
    assert not is_owner(42, None)


def test_listing_load_success_and_filter():
    client = FakeClient(_products())
    loader = ListingLoader(client)
    assert loader.state.status == "loading"

    state = loader.load(ListingQuery(category_id=2))
    assert state.status == "success"
    assert [p["title"] for p in state.data] == ["Lamp"]
    assert loader.categories == CATEGORIES


def test_my_view_without_user_skips_request():
    client = FakeClient(_products())
    state = ListingLoader(client).load(ListingQuery(view="my"))
    assert state.status == "success"
    assert state.data == []
    assert "mine" not in client.calls


def test_listing_error_state():
    class Broken(FakeClient):
        def list_categories(self):
            raise ApiError(0, "Network error: connection refused")

    state = ListingLoader(Broken()).load(ListingQuery())
    assert state.status == "error"
    assert state.message == "Network error: connection refused"


def test_stale_response_is_dropped():
    loader = ListingLoader(FakeClient())
    old = loader.begin()
    new = loader.begin()
    assert loader.resolve(old, ["stale"]) is False
    assert loader.state.status == "loading"
    assert loader.resolve(new, ["fresh"]) is True
    assert loader.fail(old, "late failure") is False
    assert loader.state.data == ["fresh"]


def test_overlapping_async_loads_keep_latest():
    client = FakeClient(_products(), delays={1: 0.05, 2: 0})
    loader = ListingLoader(client)

    async def run():
        await asyncio.gather(
            loader.load_async(ListingQuery(category_id=1)),
            loader.load_async(ListingQuery(category_id=2)),
        )

    asyncio.run(run())
    assert loader.state.status == "success"
    assert [p["title"] for p in loader.state.data] == ["Lamp"]


def test_listing_mutations_need_user():
    client = FakeClient(_products())
    loader = ListingLoader(client)
    state = loader.mark_sold(ListingQuery(), 1)
    assert state.status == "error"
    assert state.message == "Please login first"
    assert ("sold", 1) not in client.calls


def test_listing_delete_waits_for_confirmation():
    client = FakeClient(_products())
    loader = ListingLoader(client)
    query = ListingQuery(user_id=42)

    loader.delete(query, 1, confirm=lambda: False)
    assert ("delete", 1) not in client.calls

    state = loader.delete(query, 1, confirm=lambda: True)
    assert ("delete", 1) in client.calls
    assert [p["id"] for p in state.data] == [2]


def test_listing_mark_sold_reloads():
    client = FakeClient(_products())
    loader = ListingLoader(client)
    state = loader.mark_sold(ListingQuery(user_id=42), 1)
    assert state.status == "success"
    assert state.data[0]["isSold"] is True


def test_detail_invalid_id_skips_request():
    client = FakeClient(_products())
    state = DetailLoader(client).load("abc")
    assert state.status == "error"
    assert state.message == "Invalid product id"
    assert client.calls == []


def test_detail_not_found():
    state = DetailLoader(FakeClient()).load("99")
    assert state.status == "error"
    assert state.message == "Product not found"


def test_detail_mark_sold_and_delete():
    client = FakeClient(_products())
    detail = DetailLoader(client)
    detail.load("1")
    assert detail.product["title"] == "Desk"

    assert detail.mark_sold().data["isSold"] is True
    assert detail.delete(confirm=lambda: False) is False
    assert detail.delete(confirm=lambda: True) is True
    assert detail.product is None


def test_failed_detail_load_drops_previous_product():
    client = FakeClient(_products())
    detail = DetailLoader(client)
    detail.load("1")
    assert detail.product["id"] == 1

    state = detail.load("abc")
    assert state.status == "error"
    assert detail.product is None

    detail.mark_sold()
    assert detail.delete(confirm=lambda: True) is False
    assert ("sold", 1) not in client.calls
    assert ("delete", 1) not in client.calls
    assert client.products[0]["isSold"] is False


def test_detail_clears_product_while_loading():
    detail = DetailLoader(FakeClient(_products()))
    detail.load("1")
    detail.begin()
    assert detail.product is None


def test_listing_keeps_rows_after_failed_reload():
    client = FakeClient(_products())
    loader = ListingLoader(client)
    loader.load(ListingQuery())

    token = loader.begin()
    loader.fail(token, "Network error")
    assert loader.state.status == "error"
    assert len(loader.state.data) == 2


def test_async_load_fetches_categories():
    client = FakeClient(_products())
    loader = ListingLoader(client)
    asyncio.run(loader.load_async(ListingQuery(category_id=2)))
    assert loader.state.status == "success"
    assert loader.categories == CATEGORIES
    assert "categories" in client.calls
