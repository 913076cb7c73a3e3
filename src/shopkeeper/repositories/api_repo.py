from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Optional

import requests

from shopkeeper.domain.errors import (
    ApiError,
    AuthenticationError,
    AuthorizationError,
    BackendUnavailableError,
    NotFoundError,
)
from shopkeeper.domain.models import (
    AuthSession,
    DashboardSummary,
    Product,
    Shop,
    Storefront,
    PublicProduct,
    Transaction,
    User,
)

log = logging.getLogger("shopkeeper.api")

_FRACTION_RE = re.compile(r"\.(\d+)")


def parse_timestamp(value: str) -> datetime:
    # Backend emits RFC 3339 with up to nanosecond precision and a "Z" suffix.
    raw = value.strip()
    if raw.endswith("Z") or raw.endswith("z"):
        raw = raw[:-1] + "+00:00"
    # fromisoformat on 3.10 only takes 3 or 6 fractional digits
    raw = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), raw)
    return datetime.fromisoformat(raw)


def _opt_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def _opt_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def _row_to_product(row: dict) -> Product:
    return Product(
        id=str(row["id"]),
        name=str(row.get("name") or ""),
        selling_price=float(row.get("selling_price") or 0.0),
        stock=int(row.get("stock") or 0),
        category=row.get("category") or None,
        description=row.get("description") or None,
        purchase_price=_opt_float(row.get("purchase_price")),
        image_url=row.get("image_url") or None,
    )


def _row_to_transaction(row: dict) -> Transaction:
    product = row.get("product") or {}
    return Transaction(
        id=str(row["id"]),
        kind=str(row["type"]),
        amount=float(row.get("amount") or 0.0),
        created_at=parse_timestamp(str(row["created_at"])),
        quantity=_opt_int(row.get("quantity")),
        product_id=str(row["product_id"]) if row.get("product_id") else None,
        product_name=product.get("name") or None,
        comment=row.get("comment") or None,
    )


def _row_to_user(row: dict) -> User:
    return User(
        id=str(row["id"]),
        name=str(row.get("name") or ""),
        email=str(row.get("email") or ""),
        role=str(row.get("role") or ""),
        shop_id=str(row["shop_id"]) if row.get("shop_id") else None,
    )


def _row_to_shop(row: dict) -> Shop:
    return Shop(
        id=str(row["id"]),
        name=str(row.get("name") or ""),
        whatsapp_number=row.get("whatsapp_number") or None,
    )


def _row_to_summary(row: dict) -> DashboardSummary:
    return DashboardSummary(
        total_sales=float(row.get("total_sales") or 0.0),
        total_expenses=float(row.get("total_expenses") or 0.0),
        net_profit=float(row.get("net_profit") or 0.0),
        total_items_sold=int(row.get("total_items_sold") or 0),
        total_products=int(row.get("total_products") or 0),
        total_transactions=int(row.get("total_transactions") or 0),
        low_stock_products=tuple(_row_to_product(p) for p in row.get("low_stock_products") or []),
    )


class ApiRepository:
    """REST client for the shop backend.

    The bearer token is kept on the instance only; callers decide whether and
    where to persist it.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        session: requests.Session | None = None,
        token: str | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.token = token

    def _auth_header(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    @staticmethod
    def _error_message(resp, fallback: str) -> str:
        try:
            data = resp.json()
        except ValueError:
            return fallback
        if isinstance(data, dict) and data.get("error"):
            return str(data["error"])
        return fallback

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict | None = None,
        payload: dict | None = None,
        auth: bool = True,
        failure: str = "Request failed",
    ) -> Any:
        url = f"{self.base_url}{path}"
        headers = self._auth_header() if auth else {}
        clean_params = {k: v for k, v in (params or {}).items() if v not in (None, "")}

        try:
            resp = self.session.request(
                method,
                url,
                params=clean_params or None,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.warning("api_unreachable method=%s path=%s error=%s", method, path, e)
            raise BackendUnavailableError(f"{failure}: backend unreachable ({e})") from e

        log.info("api_call method=%s path=%s status=%s", method, path, resp.status_code)

        if not 200 <= resp.status_code < 300:
            message = self._error_message(resp, failure)
            if resp.status_code == 401:
                raise AuthenticationError(message)
            if resp.status_code == 403:
                raise AuthorizationError(message)
            if resp.status_code == 404:
                raise NotFoundError(message)
            raise ApiError(resp.status_code, message)

        try:
            return resp.json()
        except ValueError as e:
            raise ApiError(resp.status_code, f"{failure}: invalid JSON response") from e

    # -------- auth --------

    def _session_from(self, data: dict) -> AuthSession:
        token = str(data.get("token") or "")
        user = data.get("user")
        if not token or not user:
            raise ApiError(200, "Authentication response missing token or user")
        self.token = token
        return AuthSession(token=token, user=_row_to_user(user))

    def register(
        self,
        name: str,
        email: str,
        password: str,
        role: str,
        shop_name: str | None = None,
        whatsapp_number: str | None = None,
        shop_id: str | None = None,
    ) -> AuthSession:
        payload = {"name": name, "email": email, "password": password, "role": role}
        for key, value in (("shop_name", shop_name), ("whatsapp_number", whatsapp_number), ("shop_id", shop_id)):
            if value:
                payload[key] = value
        data = self._request("POST", "/auth/register", payload=payload, auth=False, failure="Registration failed")
        return self._session_from(data)

    def login(self, email: str, password: str) -> AuthSession:
        data = self._request(
            "POST", "/auth/login", payload={"email": email, "password": password}, auth=False, failure="Login failed"
        )
        return self._session_from(data)

    # -------- shop --------

    def get_shop(self) -> Shop:
        data = self._request("GET", "/api/shops", failure="Failed to fetch shop")
        return _row_to_shop(data.get("shop", data))

    def update_whatsapp(self, whatsapp_number: str) -> Shop:
        data = self._request(
            "PUT",
            "/api/shops/whatsapp",
            payload={"whatsapp_number": whatsapp_number},
            failure="Failed to update WhatsApp",
        )
        return _row_to_shop(data.get("shop", data))

    # -------- products --------

    def fetch_products(self, category: str | None = None, search: str | None = None) -> list[Product]:
        data = self._request(
            "GET", "/api/products", params={"category": category, "search": search}, failure="Failed to fetch products"
        )
        return [_row_to_product(r) for r in data.get("products") or []]

    def get_product(self, product_id: str) -> Product:
        data = self._request("GET", f"/api/products/{product_id}", failure="Failed to fetch product")
        return _row_to_product(data.get("product", data))

    def create_product(self, fields: dict) -> Product:
        data = self._request("POST", "/api/products", payload=fields, failure="Failed to create product")
        return _row_to_product(data.get("product", data))

    def update_product(self, product_id: str, fields: dict) -> Product:
        data = self._request("PUT", f"/api/products/{product_id}", payload=fields, failure="Failed to update product")
        return _row_to_product(data.get("product", data))

    def delete_product(self, product_id: str) -> None:
        self._request("DELETE", f"/api/products/{product_id}", failure="Failed to delete product")

    # -------- transactions --------

    def fetch_transactions(
        self,
        kind: str | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
    ) -> list[Transaction]:
        data = self._request(
            "GET",
            "/api/transactions",
            params={"type": kind, "date_from": date_from, "date_to": date_to},
            failure="Failed to fetch transactions",
        )
        try:
            return [_row_to_transaction(r) for r in data.get("transactions") or []]
        except (KeyError, TypeError, ValueError) as e:
            raise ApiError(200, f"Failed to fetch transactions: malformed transaction ({e})") from e

    def create_transaction(self, fields: dict) -> Transaction:
        data = self._request("POST", "/api/transactions", payload=fields, failure="Failed to create transaction")
        return _row_to_transaction(data.get("transaction", data))

    # -------- users --------

    def list_users(self) -> list[User]:
        data = self._request("GET", "/api/users", failure="Failed to fetch users")
        return [_row_to_user(r) for r in data.get("users") or []]

    def create_user(self, name: str, email: str, password: str, role: str) -> User:
        data = self._request(
            "POST",
            "/api/users",
            payload={"name": name, "email": email, "password": password, "role": role},
            failure="Failed to create user",
        )
        return _row_to_user(data.get("user", data))

    def delete_user(self, user_id: str) -> None:
        self._request("DELETE", f"/api/users/{user_id}", failure="Failed to delete user")

    # -------- reports --------

    def fetch_dashboard_summary(self) -> DashboardSummary:
        data = self._request("GET", "/api/reports/dashboard", failure="Failed to fetch dashboard")
        return _row_to_summary(data)

    # -------- public storefront --------

    def fetch_public_products(
        self,
        shop_id: str,
        category: str | None = None,
        in_stock_only: bool = False,
    ) -> Storefront:
        data = self._request(
            "GET",
            f"/public/{shop_id}/products",
            params={"category": category, "in_stock_only": "true" if in_stock_only else None},
            auth=False,
            failure="Failed to fetch public products",
        )
        shop_row = data.get("shop")
        if not shop_row:
            raise NotFoundError("Shop not found or inactive.")
        products = [
            PublicProduct(
                product=_row_to_product(r),
                stock_status=str(r.get("stock_status") or ""),
                whatsapp_link=r.get("whatsapp_link") or None,
            )
            for r in data.get("products") or []
        ]
        return Storefront(shop=_row_to_shop(shop_row), products=products)

    def fetch_whatsapp_link(self, shop_id: str, product_id: str) -> str:
        data = self._request(
            "GET",
            f"/public/{shop_id}/products/{product_id}/whatsapp",
            auth=False,
            failure="Failed to fetch WhatsApp link",
        )
        for key in ("whatsapp_link", "link", "url"):
            if data.get(key):
                return str(data[key])
        raise ApiError(200, "WhatsApp link missing from response")
