from __future__ import annotations

from dataclasses import replace
from typing import Optional

from shopkeeper.domain.errors import ValidationError
from shopkeeper.domain.models import Product
from shopkeeper.repositories.contracts import ProductRepository
from shopkeeper.services import aggregator


class InventoryService:
    def __init__(self, repo: ProductRepository):
        self.repo = repo

    def list_products(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        show_purchase_price: bool = True,
    ) -> list[Product]:
        products = self.repo.fetch_products(category=category, search=search)
        if show_purchase_price:
            return products
        return [replace(p, purchase_price=None) for p in products]

    def get_product(self, product_id: str) -> Product:
        return self.repo.get_product(product_id)

    def low_stock(self) -> list[Product]:
        return aggregator.select_low_stock(self.repo.fetch_products())

    def categories(self) -> list[str]:
        names = {p.category.strip() for p in self.repo.fetch_products() if p.category and p.category.strip()}
        return sorted(names, key=str.lower)

    @staticmethod
    def _validate(
        name: str,
        selling_price: float,
        stock: int,
        purchase_price: Optional[float],
    ) -> None:
        if not name:
            raise ValidationError("Name is required.")
        if selling_price < 0:
            raise ValidationError("Selling price must be >= 0.")
        if stock < 0:
            raise ValidationError("Stock must be >= 0.")
        if purchase_price is not None and purchase_price < 0:
            raise ValidationError("Purchase price must be >= 0.")

    def add_product(
        self,
        name: str,
        selling_price: float,
        stock: int,
        category: str = "",
        description: str = "",
        purchase_price: Optional[float] = None,
        image_url: Optional[str] = None,
    ) -> Product:
        name = (name or "").strip()
        self._validate(name, selling_price, stock, purchase_price)

        fields = {
            "name": name,
            "description": (description or "").strip(),
            "category": (category or "").strip(),
            "selling_price": float(selling_price),
            "stock": int(stock),
        }
        if purchase_price is not None:
            fields["purchase_price"] = float(purchase_price)
        if image_url:
            fields["image_url"] = image_url
        return self.repo.create_product(fields)

    def update_product(self, product_id: str, **changes) -> Product:
        allowed = {"name", "description", "category", "purchase_price", "selling_price", "stock", "image_url"}
        unknown = set(changes) - allowed
        if unknown:
            raise ValidationError(f"Unknown product fields: {', '.join(sorted(unknown))}")
        if not changes:
            raise ValidationError("Nothing to update.")

        current = self.repo.get_product(product_id)
        name = (changes.get("name", current.name) or "").strip()
        selling_price = float(changes.get("selling_price", current.selling_price))
        stock = int(changes.get("stock", current.stock))
        purchase_price = changes.get("purchase_price", current.purchase_price)
        self._validate(name, selling_price, stock, None if purchase_price is None else float(purchase_price))

        if "name" in changes:
            changes["name"] = name
        return self.repo.update_product(product_id, changes)

    def delete_product(self, product_id: str) -> None:
        self.repo.delete_product(product_id)
