from __future__ import annotations

from typing import Protocol

from shopkeeper.domain.models import AuthSession, DashboardSummary, Product, Shop, Storefront, Transaction, User


class ProductRepository(Protocol):
    def fetch_products(self, category: str | None = None, search: str | None = None) -> list[Product]: ...
    def get_product(self, product_id: str) -> Product: ...
    def create_product(self, fields: dict) -> Product: ...
    def update_product(self, product_id: str, fields: dict) -> Product: ...
    def delete_product(self, product_id: str) -> None: ...


class TransactionRepository(Protocol):
    def fetch_transactions(
        self,
        kind: str | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
    ) -> list[Transaction]: ...
    def create_transaction(self, fields: dict) -> Transaction: ...


class ReportRepository(ProductRepository, TransactionRepository, Protocol):
    def fetch_dashboard_summary(self) -> DashboardSummary: ...


class ShopRepository(Protocol):
    def get_shop(self) -> Shop: ...
    def update_whatsapp(self, whatsapp_number: str) -> Shop: ...
    def fetch_public_products(self, shop_id: str, category: str | None = None, in_stock_only: bool = False) -> Storefront: ...
    def fetch_whatsapp_link(self, shop_id: str, product_id: str) -> str: ...


class UserRepository(Protocol):
    def login(self, email: str, password: str) -> AuthSession: ...
    def register(
        self,
        name: str,
        email: str,
        password: str,
        role: str,
        shop_name: str | None = None,
        whatsapp_number: str | None = None,
        shop_id: str | None = None,
    ) -> AuthSession: ...
    def list_users(self) -> list[User]: ...
    def create_user(self, name: str, email: str, password: str, role: str) -> User: ...
    def delete_user(self, user_id: str) -> None: ...
