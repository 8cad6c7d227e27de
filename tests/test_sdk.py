# tests/test_sdk.py
import pytest

from sdk.market import (
    ApiError, MarketClient, ValidationFailed, normalize_optional, parse_price,
    validate_category_id, validate_product_id,
)


class RecordingSession:
    """Stands in for requests.Session and fails the test if a request is sent."""

    def __init__(self):
        self.headers = {}
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url))
        raise AssertionError(f"unexpected request {method} {url}")


def test_parse_price():
    assert parse_price("500") == 500.0
    assert parse_price(" 19.99 ") == 19.99
    assert parse_price(3) == 3.0
    for bad in ("", "abc", "0", "-1", "nan", "inf", None, True):
        with pytest.raises(ValidationFailed):
            parse_price(bad)


def test_validate_product_id():
    assert validate_product_id("12") == 12
    assert validate_product_id(7) == 7
    for bad in ("abc", "", "-1", "1.5", "12a", "١٢"):
        with pytest.raises(ValidationFailed) as exc:
            validate_product_id(bad)
        assert exc.value.message == "Invalid product id"


def test_normalize_optional():
    assert normalize_optional(None) is None
    assert normalize_optional("   ") is None
    assert normalize_optional(" Dhaka ") == "Dhaka"


def test_invalid_id_fails_without_request():
    session = RecordingSession()
    c = MarketClient(base_url="http://testserver", user_id=42, session=session)
    with pytest.raises(ValidationFailed):
        c.get_product("abc")
    with pytest.raises(ValidationFailed):
        c.mark_sold("abc")
    with pytest.raises(ValidationFailed):
        c.delete_product("x1")
    assert session.calls == []


def test_bad_price_fails_without_request():
    session = RecordingSession()
    c = MarketClient(base_url="http://testserver", user_id=42, session=session)
    for price in (0, -3, "abc", ""):
        with pytest.raises(ValidationFailed) as exc:
            c.create_product(1, "Desk", price)
        assert exc.value.message == "Price must be a valid positive number"
    assert session.calls == []


def test_set_user_updates_header():
    session = RecordingSession()
    c = MarketClient(session=session, user_id=5)
    assert session.headers["X-User-Id"] == "5"
    c.set_user(None)
    assert "X-User-Id" not in session.headers


def test_categories_and_filtering(market):
    c = market(user_id=42)
    assert [cat["name"] for cat in c.list_categories()] == ["Books", "Electronics", "Vehicles"]

    c.create_product(1, "Bike", 120)
    c.create_product(2, "Novel", "8.50", description="", location="Campus")

    filtered = c.list_products(category_id=2)
    assert [p["title"] for p in filtered] == ["Novel"]
    assert filtered[0]["location"] == "Campus"
    assert filtered[0]["description"] is None
    assert len(c.list_products()) == 2


def test_not_found_is_api_error(market):
    c = market()
    with pytest.raises(ApiError) as exc:
        c.get_product(404)
    assert exc.value.status_code == 404
    assert exc.value.message == "Product not found"


def test_anonymous_my_products_is_401(market):
    with pytest.raises(ApiError) as exc:
        market().list_my_products()
    assert exc.value.status_code == 401


def test_end_to_end(market):
    owner = market(user_id=42)
    stranger = market(user_id=7)

    created = owner.create_product(1, "Desk", 500)
    pid = created["id"]

    fetched = stranger.get_product(str(pid))
    assert fetched["userId"] == 42
    assert fetched["isSold"] is False

    with pytest.raises(ApiError) as exc:
        stranger.mark_sold(pid)
    assert exc.value.status_code == 403

    assert owner.mark_sold(pid)["isSold"] is True
    assert owner.mark_sold(pid)["isSold"] is True

    with pytest.raises(ApiError) as exc:
        stranger.delete_product(pid)
    assert exc.value.status_code == 403

    assert owner.delete_product(pid) is None
    with pytest.raises(ApiError) as exc:
        owner.get_product(pid)
    assert exc.value.status_code == 404


def test_parse_price_two_decimal_boundary():
    assert parse_price("0.01") == 0.01
    assert parse_price(0.01) == 0.01
    assert parse_price("99999999.99") == 99999999.99
    with pytest.raises(ValidationFailed) as exc:
        parse_price("0.001")
    assert exc.value.message == "Price must be a valid positive number"
    for bad in ("0.005", "12.345"):
        with pytest.raises(ValidationFailed) as exc:
            parse_price(bad)
        assert exc.value.message == "Price can have at most 2 decimal places"
    with pytest.raises(ValidationFailed):
        parse_price("100000000")


def test_oversized_product_id_fails_locally():
    session = RecordingSession()
    c = MarketClient(base_url="http://testserver", session=session)
    for bad in ("9" * 25, str(2**63), "0"):
        with pytest.raises(ValidationFailed):
            c.get_product(bad)
    assert session.calls == []
    assert validate_product_id(str(2**63 - 1)) == 2**63 - 1


def test_bad_category_id_is_validation_failure():
    session = RecordingSession()
    c = MarketClient(base_url="http://testserver", user_id=42, session=session)
    for bad in ("books", None, True, "9" * 25, -1):
        with pytest.raises(ValidationFailed) as exc:
            c.create_product(bad, "Desk", 10)
        assert exc.value.message == "Invalid category id"
    assert session.calls == []
    assert validate_category_id("3") == 3
