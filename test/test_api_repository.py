from datetime import datetime, timezone

import pytest
import requests

from conftest import FakeResponse, FakeSession

from shopkeeper.domain.errors import (
    ApiError,
    AuthenticationError,
    AuthorizationError,
    BackendUnavailableError,
    NotFoundError,
)
from shopkeeper.repositories.api_repo import ApiRepository, parse_timestamp


def test_parse_timestamp_handles_zulu_and_nanoseconds():
    ts = parse_timestamp("2024-03-04T10:15:30.123456789Z")
    assert ts == datetime(2024, 3, 4, 10, 15, 30, 123456, tzinfo=timezone.utc)

    naive = parse_timestamp("2024-03-04T10:15:30")
    assert naive.tzinfo is None


@pytest.mark.parametrize(
    "raw, micro",
    [
        ("2024-03-04T10:15:30.5Z", 500000),
        ("2024-03-04T10:15:30.12Z", 120000),
        ("2024-03-04T10:15:30.12345Z", 123450),
        ("2024-03-04T10:15:30.1234+02:00", 123400),
    ],
)
def test_parse_timestamp_pads_short_fractions(raw, micro):
    assert parse_timestamp(raw).microsecond == micro


def test_fetch_transactions_accepts_short_fraction_and_rejects_bad_timestamp():
    row = {"id": "t1", "type": "Sale", "amount": 5, "created_at": "2024-03-04T10:15:30.5Z"}
    session = FakeSession(
        FakeResponse(200, {"transactions": [row]}),
        FakeResponse(200, {"transactions": [dict(row, created_at="yesterday")]}),
    )
    repo = ApiRepository("http://backend", session=session, token="tok")

    txs = repo.fetch_transactions()
    assert txs[0].created_at == datetime(2024, 3, 4, 10, 15, 30, 500000, tzinfo=timezone.utc)

    with pytest.raises(ApiError, match="malformed transaction"):
        repo.fetch_transactions()


def test_login_stores_token_and_sends_bearer_on_next_call():
    session = FakeSession(
        FakeResponse(200, {"token": "abc", "user": {"id": 7, "name": "Ana", "email": "a@b.co", "role": "SuperAdmin"}}),
        FakeResponse(200, {"products": []}),
    )
    repo = ApiRepository("http://backend:8080/", session=session)

    auth = repo.login("a@b.co", "secret123")
    repo.fetch_products()

    assert auth.token == "abc"
    assert auth.user.id == "7"
    assert session.calls[0]["url"] == "http://backend:8080/auth/login"
    assert session.calls[0]["headers"] == {}
    assert session.calls[1]["headers"] == {"Authorization": "Bearer abc"}


def test_fetch_transactions_maps_rows_and_drops_empty_filters():
    session = FakeSession(
        FakeResponse(
            200,
            {
                "transactions": [
                    {
                        "id": "t1",
                        "type": "Sale",
                        "product_id": "p1",
                        "product": {"name": "Soap"},
                        "quantity": 2,
                        "amount": 50,
                        "created_at": "2024-03-04T09:00:00Z",
                    },
                    {"id": "t2", "type": "Expense", "amount": 20.5, "created_at": "2024-03-04T12:00:00Z"},
                ]
            },
        )
    )
    repo = ApiRepository("http://backend", session=session, token="tok")

    txs = repo.fetch_transactions(date_from="2024-03-01", date_to="2024-03-31")

    assert session.calls[0]["params"] == {"date_from": "2024-03-01", "date_to": "2024-03-31"}
    assert txs[0].kind == "Sale"
    assert txs[0].amount == 50.0
    assert txs[0].product_name == "Soap"
    assert txs[0].quantity == 2
    assert txs[1].quantity is None
    assert txs[1].product_name is None


def test_dashboard_summary_parses_low_stock_products():
    session = FakeSession(
        FakeResponse(
            200,
            {
                "total_sales": 80,
                "total_expenses": 20,
                "net_profit": 60,
                "total_items_sold": 3,
                "total_products": 2,
                "total_transactions": 3,
                "low_stock_products": [{"id": "p9", "name": "Salt", "stock": 0, "category": "Food"}],
            },
        )
    )
    summary = ApiRepository("http://backend", session=session, token="t").fetch_dashboard_summary()

    assert summary.net_profit == 60.0
    assert summary.low_stock_products[0].name == "Salt"
    assert summary.low_stock_products[0].selling_price == 0.0


@pytest.mark.parametrize(
    "status,exc",
    [(401, AuthenticationError), (403, AuthorizationError), (404, NotFoundError)],
)
def test_http_errors_map_to_domain_errors(status, exc):
    session = FakeSession(FakeResponse(status, {"error": "nope"}))
    repo = ApiRepository("http://backend", session=session, token="t")

    with pytest.raises(exc, match="nope"):
        repo.get_product("p1")


def test_server_error_keeps_status_and_falls_back_to_default_message():
    session = FakeSession(FakeResponse(500, None))
    repo = ApiRepository("http://backend", session=session, token="t")

    with pytest.raises(ApiError) as info:
        repo.create_transaction({"type": "Expense", "amount": 3})

    assert info.value.status == 500
    assert str(info.value) == "Failed to create transaction"


def test_transport_failure_becomes_backend_unavailable():
    session = FakeSession(requests.ConnectionError("refused"))
    repo = ApiRepository("http://backend", session=session)

    with pytest.raises(BackendUnavailableError):
        repo.fetch_public_products("shop-1")


def test_public_products_without_shop_is_not_found():
    session = FakeSession(FakeResponse(200, {"shop": None, "products": []}))
    repo = ApiRepository("http://backend", session=session)

    with pytest.raises(NotFoundError):
        repo.fetch_public_products("missing")


def test_public_products_are_unauthenticated_and_pass_in_stock_flag():
    session = FakeSession(
        FakeResponse(
            200,
            {
                "shop": {"id": "s1", "name": "Corner", "whatsapp_number": "+22500000000"},
                "products": [{"id": "p1", "name": "Soap", "selling_price": 2.5, "stock": 3, "stock_status": "Low stock"}],
            },
        )
    )
    repo = ApiRepository("http://backend", session=session, token="secret")

    storefront = repo.fetch_public_products("s1", in_stock_only=True)

    assert session.calls[0]["headers"] == {}
    assert session.calls[0]["params"] == {"in_stock_only": "true"}
    assert storefront.shop.name == "Corner"
    assert storefront.products[0].stock_status == "Low stock"
